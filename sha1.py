"""SHA-1 built on the `compress80` loop from `compress.py`.

This module provides:

- `SHA1`: an incremental context (`init` / `update` / `final`) that accepts
  input split at arbitrary byte boundaries.
- `digest(data)` / `hexdigest(data)`: one-shot helpers; every call owns its
  own context, so they are safe to call from several threads at once.
- `combine(left, right)`: the Merkle inner-node rule over two SHA-1 digests.
- `authenticate(data, key)`: HMAC-SHA1 through the generic `hmac_engine.HMAC`.

Known limitation: the length trailer is a 64-bit bit count, so a single
message is capped at `MAX_MESSAGE_BYTES`; `update` raises `OverflowError`
rather than wrapping once that would be exceeded.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from compress import MASK32, ROUNDS, _rotl, compress80
from hmac_engine import HMAC


BLOCK_SIZE = 64
DIGEST_SIZE = 20

MAX_MESSAGE_BYTES = (1 << 61) - 1

# Initial hash values H0..H4, as per FIPS 180-4.
_H0 = (
    0x67452301,
    0xEFCDAB89,
    0x98BADCFE,
    0x10325476,
    0xC3D2E1F0,
)

_ZERO_STATE = (0, 0, 0, 0, 0)

_BYTES_LIKE = (bytes, bytearray, memoryview)

# Context lifecycle.
UNINITIALIZED = "uninitialized"
INITIALIZED = "initialized"
ACCUMULATING = "accumulating"
FINALIZED = "finalized"


def _check_bytes(data, what: str = "data") -> None:
    if not isinstance(data, _BYTES_LIKE):
        raise TypeError(f"{what} must be bytes-like, got {type(data).__name__}")


def _byte_view(data) -> memoryview:
    """View `data` as a flat sequence of bytes, whatever its item size."""
    return memoryview(data).cast("B")


def _length_trailer(byte_count: int) -> bytes:
    """Encode the message length as a 64-bit big-endian bit count."""
    return (byte_count * 8).to_bytes(8, byteorder="big")


def _padding(byte_count: int) -> bytes:
    """Return 0x80 followed by zeros so that the length is 56 mod 64."""
    return b"\x80" + b"\x00" * ((119 - (byte_count % BLOCK_SIZE)) % BLOCK_SIZE)


def pad_message(message) -> bytes:
    """Pad a whole message to a multiple of 64 bytes (512 bits)."""
    _check_bytes(message, "message")
    message = bytes(message)
    return message + _padding(len(message)) + _length_trailer(len(message))


def split_into_blocks(padded) -> List[bytes]:
    """Split a padded message into 64-byte blocks."""
    padded = _byte_view(padded)
    if len(padded) % BLOCK_SIZE != 0:
        raise ValueError(
            f"Padded message length must be a multiple of 64 bytes, got {len(padded)}"
        )
    return [bytes(padded[i : i + BLOCK_SIZE]) for i in range(0, len(padded), BLOCK_SIZE)]


def expand_message_schedule(w: List[int], rounds: int = ROUNDS) -> List[int]:
    """Expand an initial schedule W[0..15] to W[0..(rounds-1)].

    The input ``w`` must contain at least the first 16 words; any additional
    words are ignored for expansion purposes. The caller's list is left
    untouched.
    """
    if len(w) < 16:
        raise ValueError(
            f"Message schedule must contain at least 16 words, got {len(w)}"
        )

    schedule = list(w[:16]) + [0] * max(0, rounds - 16)
    for i in range(16, rounds):
        schedule[i] = _rotl(
            schedule[i - 3] ^ schedule[i - 8] ^ schedule[i - 14] ^ schedule[i - 16], 1
        )
    return schedule


def build_message_schedule(block) -> List[int]:
    """Given a 512-bit block, build the 80-word message schedule w[0..79]."""
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"Expected 64-byte block, got {len(block)}")

    w = [
        int.from_bytes(block[4 * i : 4 * (i + 1)], byteorder="big") & MASK32
        for i in range(16)
    ]
    return expand_message_schedule(w)


def update_hash_state(
    H_i: Tuple[int, int, int, int, int],
    a: int,
    b: int,
    c: int,
    d: int,
    e: int,
) -> Tuple[int, int, int, int, int]:
    """Add the post-round working registers back into the chaining value.

        H_{i+1}[j] = (H_i[j] + working[j]) mod 2^32
    """
    h0, h1, h2, h3, h4 = H_i
    return (
        (h0 + a) & MASK32,
        (h1 + b) & MASK32,
        (h2 + c) & MASK32,
        (h3 + d) & MASK32,
        (h4 + e) & MASK32,
    )


def finalize_digest(state: Tuple[int, int, int, int, int]) -> bytes:
    """Convert a final chaining value into the 20-byte SHA-1 digest."""
    return b"".join(word.to_bytes(4, byteorder="big") for word in state)


class SHA1:
    """Incremental SHA-1 context.

    A fresh context is uninitialized; call `init()` before feeding data.
    `final()` consumes the context, which must be re-initialized before it
    can be used again:

        ctx = SHA1().init()
        ctx.update(b"ab").update(b"c")
        ctx.final()
    """

    name = "sha1"
    block_size = BLOCK_SIZE
    digest_size = DIGEST_SIZE

    def __init__(self, data=None):
        self._state = _ZERO_STATE
        self._pending = bytearray()
        self._bytes = 0
        self._phase = UNINITIALIZED
        if data is not None:
            self.init().update(data)

    @property
    def phase(self) -> str:
        return self._phase

    def init(self) -> "SHA1":
        self._state = _H0
        self._pending = bytearray()
        self._bytes = 0
        self._phase = INITIALIZED
        return self

    def update(self, data) -> "SHA1":
        """Absorb `data`; whole blocks are compressed as soon as they exist."""
        _check_bytes(data)
        self._require_open("update")

        view = _byte_view(data)
        length = len(view)
        if self._bytes + length > MAX_MESSAGE_BYTES:
            raise OverflowError(
                f"SHA-1 input is limited to {MAX_MESSAGE_BYTES} bytes per message"
            )

        self._bytes += length
        self._phase = ACCUMULATING

        pos = 0
        size = len(self._pending)
        if size > 0:
            want = min(BLOCK_SIZE - size, length)
            self._pending += view[:want]
            pos = want
            if len(self._pending) < BLOCK_SIZE:
                return self
            self._transform(self._pending)
            self._pending = bytearray()

        while length - pos >= BLOCK_SIZE:
            self._transform(view[pos : pos + BLOCK_SIZE])
            pos += BLOCK_SIZE

        if pos < length:
            self._pending += view[pos:]
        return self

    def final(self) -> bytes:
        """Pad, compress the last one or two blocks and return the digest."""
        self._require_open("final")

        tail = (
            bytes(self._pending) + _padding(self._bytes) + _length_trailer(self._bytes)
        )
        for block in split_into_blocks(tail):
            self._transform(block)

        out = finalize_digest(self._state)

        self._state = _ZERO_STATE
        self._pending = bytearray()
        self._phase = FINALIZED
        return out

    # Names used by the byte-stream interface.
    initialize = init
    feed = update
    finalize = final

    def copy(self) -> "SHA1":
        """Return an independent clone of the current context."""
        other = type(self)()
        other._state = self._state
        other._pending = bytearray(self._pending)
        other._bytes = self._bytes
        other._phase = self._phase
        return other

    def _require_open(self, op: str) -> None:
        if self._phase == UNINITIALIZED:
            raise RuntimeError(f"SHA1.{op}() called before init()")
        if self._phase == FINALIZED:
            raise RuntimeError(f"SHA1.{op}() called on a finalized context; call init() first")

    def _transform(self, block) -> None:
        schedule = build_message_schedule(block)
        work_out = compress80(*self._state, schedule)
        self._state = update_hash_state(self._state, *work_out)


def digest(data) -> bytes:
    """Compute the SHA-1 digest of `data` with a private context."""
    _check_bytes(data)
    return SHA1().init().update(data).final()


def hexdigest(data) -> str:
    return digest(data).hex()


def combine(left, right) -> bytes:
    """Hash two child digests into their Merkle parent."""
    _check_bytes(left, "left")
    _check_bytes(right, "right")
    left = _byte_view(left)
    right = _byte_view(right)
    if len(left) != DIGEST_SIZE or len(right) != DIGEST_SIZE:
        raise ValueError(
            f"combine expects two {DIGEST_SIZE}-byte digests, "
            f"got {len(left)} and {len(right)} bytes"
        )
    return SHA1().init().update(left).update(right).final()


root = combine


def hmac_factory() -> HMAC:
    """Return an un-keyed HMAC-SHA1 context."""
    return HMAC(SHA1, BLOCK_SIZE)


def authenticate(data, key) -> bytes:
    """Compute HMAC-SHA1 of `data` under `key`."""
    _check_bytes(data)
    return hmac_factory().init(key).update(data).final()


mac = authenticate


def sha1_with_round_tracking(data) -> Tuple[bytes, List[List[int]]]:
    """Compute SHA-1 while tracking the `a` register after every round.

    Returns:
        (digest, a_values_per_block)
        where a_values_per_block[block_idx] is a list of 80 a values for that block
    """
    state = _H0
    all_a_values: List[List[int]] = []

    for block in split_into_blocks(pad_message(data)):
        work_out, a_values = compress80(*state, build_message_schedule(block), track=True)
        all_a_values.append(a_values)
        state = update_hash_state(state, *work_out)

    return finalize_digest(state), all_a_values


def hash_chunks(chunks: Iterable[bytes]) -> bytes:
    """Hash an iterable of byte chunks as one message."""
    ctx = SHA1().init()
    for chunk in chunks:
        ctx.update(chunk)
    return ctx.final()
