"""Command line front end for the SHA-1 engine in `sha1.py`.

Usage:
    python sha1_cli.py "message"
    python sha1_cli.py -f path/to/file
    python sha1_cli.py --hmac-key secret "message"
    python sha1_cli.py --combine <left-hex> <right-hex>

Without flags, the single argument is interpreted as a UTF-8 string and
hashed. With `-f`, the file's raw bytes are streamed through the context in
`CHUNK_SIZE` pieces. `--hmac-key` switches to HMAC-SHA1 keyed with the UTF-8
encoding of the key, and `--combine` prints the Merkle parent of two hex
encoded digests. The result is printed to stdout as lowercase hex.
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from sha1 import SHA1, authenticate, combine, hexdigest, hmac_factory


CHUNK_SIZE = 64 * 1024


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sha1-cli",
        description="Print the SHA-1 (or HMAC-SHA1) hex digest of a message or file",
    )
    parser.add_argument(
        "message",
        nargs="?",
        help="Message to hash (UTF-8)",
    )
    parser.add_argument(
        "-f",
        "--file",
        dest="filename",
        help="Hash the raw bytes of this file instead of a message",
    )
    parser.add_argument(
        "--hmac-key",
        dest="hmac_key",
        help="Compute HMAC-SHA1 keyed with this UTF-8 string",
    )
    parser.add_argument(
        "--combine",
        nargs=2,
        metavar=("LEFT", "RIGHT"),
        help="Print the Merkle parent of two hex-encoded 20-byte digests",
    )
    return parser


def _hash_file(filename: str, hmac_key: Optional[bytes]) -> str:
    ctx = hmac_factory().init(hmac_key) if hmac_key is not None else SHA1().init()
    with open(filename, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            ctx.update(chunk)
    return ctx.final().hex()


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    sources = [args.message is not None, args.filename is not None, args.combine is not None]
    if sum(sources) != 1:
        parser.error("give exactly one of MESSAGE, -f FILE or --combine LEFT RIGHT")
    if args.combine is not None and args.hmac_key is not None:
        parser.error("--hmac-key cannot be used with --combine")

    key = args.hmac_key.encode("utf-8") if args.hmac_key is not None else None

    if args.combine is not None:
        try:
            left, right = (bytes.fromhex(h) for h in args.combine)
            digest_hex = combine(left, right).hex()
        except ValueError as e:
            sys.stderr.write(f"Error: {e}\n")
            return 1
        print(digest_hex)
        return 0

    if args.filename is not None:
        try:
            digest_hex = _hash_file(args.filename, key)
        except OSError as e:
            sys.stderr.write(f"Error reading file '{args.filename}': {e}\n")
            return 1
        print(digest_hex)
        return 0

    message_bytes = args.message.encode("utf-8")
    if key is not None:
        digest_hex = authenticate(message_bytes, key).hex()
    else:
        digest_hex = hexdigest(message_bytes)
    print(digest_hex)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
