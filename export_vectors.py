"""Export SHA-1 known-answer vectors with per-round `a` register traces.

For each requested message length N, this script:
1. Builds a deterministic message of N bytes (a counting pattern, or a
   repeated `--fill-byte`)
2. Computes SHA-1 while tracking the `a` register after every round
3. Saves all records to <output-dir>/vectors.yaml or vectors.db (SQLite)

The default lengths sit on either side of the padding boundaries, so the
output covers both the one-extra-block and two-extra-block padding paths.

Usage:
    python export_vectors.py                    # default boundary lengths
    python export_vectors.py 0 3 64 1000
    python export_vectors.py --fill-byte 0x61 --format sqlite

SQLite Schema:
    - messages: id, length_bytes, message_hex, digest_hex, block_count
    - a_values: message_id, block_index, round_index, a_value
"""

from __future__ import annotations

import argparse
import os
import sqlite3
import sys
from typing import Dict, Iterable, List, Optional

import yaml

from sha1 import BLOCK_SIZE, sha1_with_round_tracking


BOUNDARY_LENGTHS = (0, 55, 56, 57, 63, 64, 119, 120, 121)


def build_message(length: int, fill_byte: Optional[int] = None) -> bytes:
    """Return the deterministic test message of `length` bytes."""
    if length < 0:
        raise ValueError(f"Message length must be non-negative, got {length}")
    if fill_byte is not None:
        return bytes([fill_byte]) * length
    return bytes(i & 0xFF for i in range(length))


def build_records(lengths: Iterable[int], fill_byte: Optional[int] = None) -> List[Dict]:
    """Compute one vector record per message length."""
    records: List[Dict] = []
    for length in lengths:
        message = build_message(length, fill_byte)
        digest, a_values_per_block = sha1_with_round_tracking(message)
        records.append(
            {
                "length_bytes": length,
                "message_hex": message.hex(),
                "digest_hex": digest.hex(),
                "block_count": len(a_values_per_block),
                "blocks": [
                    {
                        "block_index": block_idx,
                        "a_values": [f"{a:08x}" for a in a_values],
                    }
                    for block_idx, a_values in enumerate(a_values_per_block)
                ],
            }
        )
    return records


def write_yaml(records: List[Dict], output_dir: str) -> str:
    output_path = os.path.join(output_dir, "vectors.yaml")
    document = {
        "algorithm": "sha1",
        "block_size": BLOCK_SIZE,
        "vectors": records,
    }
    with open(output_path, "w") as f:
        yaml.dump(document, f, default_flow_style=False, sort_keys=False)
    return output_path


def write_sqlite(records: List[Dict], output_dir: str) -> str:
    output_path = os.path.join(output_dir, "vectors.db")

    # Remove existing database if present
    if os.path.exists(output_path):
        os.remove(output_path)

    conn = sqlite3.connect(output_path)
    try:
        cursor = conn.cursor()
        cursor.executescript("""
            CREATE TABLE messages (
                id INTEGER PRIMARY KEY,
                length_bytes INTEGER NOT NULL,
                message_hex TEXT NOT NULL,
                digest_hex TEXT NOT NULL,
                block_count INTEGER NOT NULL
            );

            CREATE TABLE a_values (
                message_id INTEGER NOT NULL,
                block_index INTEGER NOT NULL,
                round_index INTEGER NOT NULL,
                a_value TEXT NOT NULL,
                FOREIGN KEY (message_id) REFERENCES messages(id)
            );

            CREATE INDEX idx_a_values_block ON a_values(message_id, block_index);
        """)

        for idx, record in enumerate(records):
            cursor.execute(
                "INSERT INTO messages VALUES (?, ?, ?, ?, ?)",
                (
                    idx,
                    record["length_bytes"],
                    record["message_hex"],
                    record["digest_hex"],
                    record["block_count"],
                ),
            )
            cursor.executemany(
                "INSERT INTO a_values VALUES (?, ?, ?, ?)",
                [
                    (idx, block["block_index"], round_idx, a_value)
                    for block in record["blocks"]
                    for round_idx, a_value in enumerate(block["a_values"])
                ],
            )
        conn.commit()
    finally:
        conn.close()
    return output_path


def _byte_value(text: str) -> int:
    value = int(text, 0)
    if not 0 <= value <= 0xFF:
        raise argparse.ArgumentTypeError(f"fill byte must be in 0..255, got {text}")
    return value


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Export SHA-1 vectors with per-round a register traces"
    )
    parser.add_argument(
        "lengths",
        type=int,
        nargs="*",
        default=list(BOUNDARY_LENGTHS),
        help="Message lengths in BYTES (default: padding boundary lengths)",
    )
    parser.add_argument(
        "--fill-byte",
        type=_byte_value,
        default=None,
        help="Repeat this byte instead of the counting pattern (e.g. 0x61)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="data/vectors",
        help="Output directory (default: data/vectors)",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["yaml", "sqlite"],
        default="yaml",
        help="Output format: yaml or sqlite (default: yaml)",
    )
    args = parser.parse_args(argv)

    if any(length < 0 for length in args.lengths):
        print(f"ERROR: Message lengths must be non-negative (got {args.lengths})")
        return 1

    print(f"Computing {len(args.lengths)} vectors for lengths: {args.lengths}")
    records = build_records(args.lengths, args.fill_byte)

    os.makedirs(args.output_dir, exist_ok=True)
    if args.format == "sqlite":
        output_path = write_sqlite(records, args.output_dir)
    else:
        output_path = write_yaml(records, args.output_dir)

    print(f"Done! Saved {len(records)} vectors to {output_path}")
    _print_samples(records[:4])
    return 0


def _print_samples(sample_entries: List[Dict]) -> None:
    """Print sample entries from the results."""
    print("\nSample entries:")
    for i, sample in enumerate(sample_entries):
        print(
            f"  [{i}] len={sample['length_bytes']:<6} blocks={sample['block_count']} "
            f"digest={sample['digest_hex']}"
        )


if __name__ == "__main__":
    sys.exit(main())
