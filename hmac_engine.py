"""Generic HMAC construction (RFC 2104 / FIPS 198-1).

The construction only relies on the engine interface

    engine.block_size, engine.digest_size
    engine().init() -> engine
    engine.update(data) -> engine
    engine.final() -> bytes

so any digest engine providing those can be wrapped, e.g.:

    mac = HMAC(SHA1).init(key).update(message).final()
"""

from __future__ import annotations

from typing import Optional


IPAD_BYTE = 0x36
OPAD_BYTE = 0x5C

_BYTES_LIKE = (bytes, bytearray, memoryview)


def _xor_pad(key: bytes, pad_byte: int) -> bytes:
    return bytes(b ^ pad_byte for b in key)


class HMAC:
    """Keyed hash built from two contexts of an arbitrary digest engine."""

    def __init__(self, hash_cls, block_size: Optional[int] = None):
        if block_size is None:
            block_size = hash_cls.block_size
        if block_size <= 0:
            raise ValueError(f"block_size must be positive, got {block_size}")
        if block_size < hash_cls.digest_size:
            raise ValueError(
                f"block_size {block_size} is smaller than the digest size "
                f"{hash_cls.digest_size} of {getattr(hash_cls, 'name', hash_cls.__name__)}"
            )

        self.hash_cls = hash_cls
        self.block_size = block_size
        self.digest_size = hash_cls.digest_size
        self._inner = hash_cls()
        self._outer = hash_cls()
        self._ready = False

    def init(self, key) -> "HMAC":
        """Derive the padded key and seed the inner and outer contexts."""
        if not isinstance(key, _BYTES_LIKE):
            raise TypeError(f"key must be bytes-like, got {type(key).__name__}")

        key = bytes(key)
        if len(key) > self.block_size:
            key = self.hash_cls().init().update(key).final()

        # K0: the key right-padded with zeros to the block size.
        key = key + b"\x00" * (self.block_size - len(key))

        self._inner.init().update(_xor_pad(key, IPAD_BYTE))
        self._outer.init().update(_xor_pad(key, OPAD_BYTE))
        self._ready = True
        return self

    def update(self, data) -> "HMAC":
        if not self._ready:
            raise RuntimeError("HMAC context used before init(key)")
        self._inner.update(data)
        return self

    def final(self) -> bytes:
        """Return H((K0 ^ opad) || H((K0 ^ ipad) || text)).

        Both contexts are consumed; call `init(key)` again to reuse this
        object.
        """
        if not self._ready:
            raise RuntimeError("HMAC context used before init(key)")
        self._ready = False
        return self._outer.update(self._inner.final()).final()
