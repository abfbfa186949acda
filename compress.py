"""Forward SHA-1 compression (round primitives and the 80-round loop).

Given the current working state words `(a, b, c, d, e)`, the message schedule
word `w` and the round constant `k` of the current stage, one round computes:

    t  = (a <<< 5) + f(b, c, d) + e + w + k

    a' = t
    b' = a
    c' = b <<< 30
    d' = c
    e' = d

where `f` is selected by stage (`i // 20`):

    stage 0 (rounds  0..19): ch(b, c, d)     = (b & c) ^ (~b & d)
    stage 1 (rounds 20..39): parity(b, c, d) = b ^ c ^ d
    stage 2 (rounds 40..59): maj(b, c, d)    = (b & c) ^ (b & d) ^ (c & d)
    stage 3 (rounds 60..79): parity(b, c, d)

All additions are performed modulo 2**32, as in SHA-1.
"""

from __future__ import annotations

from typing import Callable, List, Sequence, Tuple, Union


MASK32 = 0xFFFFFFFF

ROUNDS = 80

# SHA-1 stage constants from FIPS 180-4, one per block of 20 rounds.
K_VALUES: Tuple[int, ...] = (
    0x5A827999,
    0x6ED9EBA1,
    0x8F1BBCDC,
    0xCA62C1D6,
)


def _rotl(x: int, n: int) -> int:
    """Left-rotate a 32-bit word `x` by `n` bits."""
    x &= MASK32
    return ((x << n) | (x >> (32 - n))) & MASK32


def ch(x: int, y: int, z: int) -> int:
    """Choose: bits of `y` where `x` is set, bits of `z` elsewhere."""
    return ((x & y) ^ (~x & z)) & MASK32


def parity(x: int, y: int, z: int) -> int:
    return (x ^ y ^ z) & MASK32


def maj(x: int, y: int, z: int) -> int:
    """Majority of the three input bits at each position."""
    return ((x & y) ^ (x & z) ^ (y & z)) & MASK32


RoundFunction = Callable[[int, int, int], int]

# Indexed by stage (round // 20).
ROUND_FUNCTIONS: Tuple[RoundFunction, ...] = (ch, parity, maj, parity)


def compression(
    a: int,
    b: int,
    c: int,
    d: int,
    e: int,
    w: int,
    k: int,
    f: RoundFunction,
) -> Tuple[int, int, int, int, int]:
    """Perform one SHA-1 compression round.

    Parameters
    ----------
    a, b, c, d, e : int
        32-bit words representing the current working state.
    w : int
        Message schedule word `w[i]`.
    k : int
        Stage constant for round `i` (`K_VALUES[i // 20]`).
    f : callable
        Stage round function for round `i` (`ROUND_FUNCTIONS[i // 20]`).

    Returns
    -------
    (a_new, b_new, c_new, d_new, e_new) : tuple[int, ...]
        Updated working state after one round, all reduced modulo 2**32.
    """
    t = (_rotl(a, 5) + f(b, c, d) + e + w + k) & MASK32
    return t, a & MASK32, _rotl(b, 30), c & MASK32, d & MASK32


def compress80(
    a: int,
    b: int,
    c: int,
    d: int,
    e: int,
    ws: Sequence[int],
    track: bool = False,
) -> Union[
    Tuple[int, int, int, int, int],
    Tuple[Tuple[int, int, int, int, int], List[int]],
]:
    """Run the full 80-round SHA-1 compression loop for one block.

    Parameters
    ----------
    a, b, c, d, e : int
        Initial working state words (typically the current hash value).
    ws : Sequence[int]
        The 80-word message schedule `w[0..79]` for this block.
    track : bool
        When true, also return the value of the `a` register after each round.

    Returns
    -------
    (a, b, c, d, e) : tuple[int, ...]
        Final working state words after 80 rounds. The caller is responsible
        for adding them back into the chaining value.
    ((a, b, c, d, e), a_values) : when `track` is true.
    """
    if len(ws) != ROUNDS:
        raise ValueError(f"compress80 expects 80 message schedule words, got {len(ws)}")

    a_values: List[int] = []
    for i in range(ROUNDS):
        stage = i // 20
        a, b, c, d, e = compression(
            a, b, c, d, e, ws[i], K_VALUES[stage], ROUND_FUNCTIONS[stage]
        )
        if track:
            a_values.append(a)

    work_out = (a, b, c, d, e)
    if track:
        return work_out, a_values
    return work_out
