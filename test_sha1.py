import array
import hashlib
import random
from concurrent.futures import ThreadPoolExecutor

import pytest

import sha1
from sha1 import (
    ACCUMULATING,
    DIGEST_SIZE,
    FINALIZED,
    INITIALIZED,
    MAX_MESSAGE_BYTES,
    SHA1,
    UNINITIALIZED,
    build_message_schedule,
    combine,
    digest,
    expand_message_schedule,
    hash_chunks,
    hexdigest,
    pad_message,
    sha1_with_round_tracking,
    split_into_blocks,
)


KNOWN_ANSWERS = [
    (b"", "da39a3ee5e6b4b0d3255bfef95601890afd80709"),
    (b"abc", "a9993e364706816aba3e25717850c26c9cd0d89d"),
    (
        b"abcdbcdecdefdefgefghfghighijhijkijkljklmklmnlmnomnopnopq",
        "84983e441c3bd26ebaae4aa1f95129e5e54670f1",
    ),
    (
        b"The quick brown fox jumps over the lazy dog",
        "2fd4e1c67a2d28fced849ee1bb76e7391b93eb12",
    ),
]

BOUNDARY_LENGTHS = [0, 1, 55, 56, 57, 63, 64, 65, 119, 120, 121, 127, 128, 129]


def _message(length: int) -> bytes:
    return bytes((i * 7 + 3) & 0xFF for i in range(length))


@pytest.mark.parametrize("data,expected_hex", KNOWN_ANSWERS)
def test_known_answer_vectors(data, expected_hex):
    assert hexdigest(data) == expected_hex
    assert SHA1().init().update(data).final().hex() == expected_hex


@pytest.mark.parametrize("length", BOUNDARY_LENGTHS)
def test_padding_boundaries_match_hashlib(length):
    data = _message(length)
    assert digest(data) == hashlib.sha1(data).digest()


@pytest.mark.parametrize(
    "length,blocks",
    [(0, 1), (55, 1), (56, 2), (63, 2), (64, 2), (119, 2), (120, 3), (121, 3)],
)
def test_pad_message_block_counts(length, blocks):
    padded = pad_message(_message(length))
    assert len(padded) == blocks * 64
    assert padded[length] == 0x80
    assert padded[-8:] == (length * 8).to_bytes(8, "big")


def test_split_into_blocks_rejects_unpadded_input():
    with pytest.raises(ValueError):
        split_into_blocks(b"\x00" * 65)
    assert split_into_blocks(b"\x01" * 128) == [b"\x01" * 64, b"\x01" * 64]


def test_message_schedule_expansion():
    block = bytes(range(64))
    ws = build_message_schedule(block)

    assert len(ws) == 80
    assert ws[0] == 0x00010203
    assert ws[15] == 0x3C3D3E3F
    for i in range(16, 80):
        x = ws[i - 3] ^ ws[i - 8] ^ ws[i - 14] ^ ws[i - 16]
        assert ws[i] == ((x << 1) | (x >> 31)) & 0xFFFFFFFF


def test_expand_message_schedule_leaves_input_untouched():
    w = list(range(16))
    schedule = expand_message_schedule(w)
    assert w == list(range(16))
    assert schedule[:16] == w
    assert len(schedule) == 80

    with pytest.raises(ValueError):
        expand_message_schedule([0] * 15)


@pytest.mark.parametrize("size", [0, 63, 65])
def test_build_message_schedule_rejects_wrong_block_size(size):
    with pytest.raises(ValueError):
        build_message_schedule(b"\x00" * size)


@pytest.mark.parametrize("length", [0, 1, 63, 64, 65, 200, 500])
@pytest.mark.parametrize("seed", [1, 2, 3])
def test_streaming_equivalence_random_partitions(length, seed):
    rng = random.Random(seed * 1000 + length)
    data = _message(length)

    chunks = []
    pos = 0
    while pos < length:
        step = rng.randint(0, 80)
        chunks.append(data[pos : pos + step])
        pos += step

    assert hash_chunks(chunks) == digest(data)


@pytest.mark.parametrize("chunk_size", [1, 3, 55, 63, 64, 65, 128])
def test_streaming_equivalence_fixed_chunks(chunk_size):
    data = _message(300)
    ctx = SHA1().init()
    for i in range(0, len(data), chunk_size):
        ctx.update(data[i : i + chunk_size])
    assert ctx.final() == hashlib.sha1(data).digest()


def test_accepts_bytearray_and_memoryview():
    data = _message(150)
    expected = hashlib.sha1(data).digest()
    assert digest(bytearray(data)) == expected
    assert digest(memoryview(data)) == expected
    assert SHA1().init().update(memoryview(data)[:70]).update(data[70:]).final() == expected


def test_pending_buffer_does_not_alias_caller_input():
    buf = bytearray(b"x" * 10)
    ctx = SHA1().init().update(buf)
    buf[:] = b"y" * 10
    assert ctx.final() == hashlib.sha1(b"x" * 10).digest()


@pytest.mark.parametrize("bad", ["abc", 123, None, [1, 2, 3]])
def test_update_rejects_non_bytes_without_mutation(bad):
    ctx = SHA1().init().update(b"ab")
    with pytest.raises(TypeError):
        ctx.update(bad)
    assert ctx.update(b"c").final() == hashlib.sha1(b"abc").digest()


@pytest.mark.parametrize("bad", ["abc", 5, None])
def test_digest_rejects_non_bytes(bad):
    with pytest.raises(TypeError):
        digest(bad)


def test_lifecycle_phases():
    ctx = SHA1()
    assert ctx.phase == UNINITIALIZED
    ctx.init()
    assert ctx.phase == INITIALIZED
    ctx.update(b"data")
    assert ctx.phase == ACCUMULATING
    ctx.final()
    assert ctx.phase == FINALIZED


def test_usage_before_init_is_an_error():
    with pytest.raises(RuntimeError):
        SHA1().update(b"abc")
    with pytest.raises(RuntimeError):
        SHA1().final()


def test_usage_after_final_is_an_error():
    ctx = SHA1().init().update(b"abc")
    ctx.final()
    with pytest.raises(RuntimeError):
        ctx.update(b"more")
    with pytest.raises(RuntimeError):
        ctx.final()


def test_final_wipes_state():
    ctx = SHA1().init().update(b"secret material")
    ctx.final()
    assert ctx._state == (0, 0, 0, 0, 0)
    assert len(ctx._pending) == 0


def test_reuse_after_reinitialize():
    data = _message(130)
    ctx = SHA1()
    first = ctx.init().update(data).final()
    second = ctx.init().update(data).final()
    assert first == second == SHA1().init().update(data).final()


def test_init_resets_partial_accumulation():
    ctx = SHA1().init().update(b"garbage that should be forgotten")
    ctx.init()
    assert ctx.update(b"abc").final().hex() == KNOWN_ANSWERS[1][1]


def test_init_is_idempotent():
    ctx = SHA1().init().init()
    assert ctx.final().hex() == KNOWN_ANSWERS[0][1]


def test_aliases_match_byte_stream_interface():
    ctx = SHA1()
    ctx.initialize()
    ctx.feed(b"abc")
    assert ctx.finalize().hex() == KNOWN_ANSWERS[1][1]


def test_constructor_with_data():
    assert SHA1(b"abc").final().hex() == KNOWN_ANSWERS[1][1]


def test_copy_is_independent():
    ctx = SHA1().init().update(b"a" * 70)
    clone = ctx.copy()
    ctx.update(b"b")
    clone.update(b"c")
    assert ctx.final() == hashlib.sha1(b"a" * 70 + b"b").digest()
    assert clone.final() == hashlib.sha1(b"a" * 70 + b"c").digest()


def test_byte_counter_overflow_is_rejected():
    ctx = SHA1().init()
    ctx._bytes = MAX_MESSAGE_BYTES
    with pytest.raises(OverflowError):
        ctx.update(b"x")
    assert ctx._bytes == MAX_MESSAGE_BYTES
    # An empty update never overflows.
    ctx.update(b"")


def test_determinism():
    data = _message(97)
    assert digest(data) == digest(data)


def test_digest_is_safe_across_threads():
    messages = [_message(n) for n in range(0, 300, 7)]
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(digest, messages))
    assert results == [hashlib.sha1(m).digest() for m in messages]


def test_combine_equals_digest_of_concatenation():
    left = digest(b"left")
    right = digest(b"right")
    assert combine(left, right) == digest(left + right)
    assert sha1.root(left, right) == combine(left, right)
    assert combine(left, right) != combine(right, left)


@pytest.mark.parametrize("left_len,right_len", [(19, 20), (20, 21), (0, 20), (40, 0)])
def test_combine_rejects_wrong_lengths(left_len, right_len):
    with pytest.raises(ValueError):
        combine(b"\x00" * left_len, b"\x00" * right_len)


def test_combine_rejects_non_bytes():
    with pytest.raises(TypeError):
        combine("a" * 20, b"\x00" * 20)


def test_merkle_root_of_four_leaves():
    leaves = [digest(bytes([i])) for i in range(4)]
    parent_left = combine(leaves[0], leaves[1])
    parent_right = combine(leaves[2], leaves[3])
    expected = hashlib.sha1(
        hashlib.sha1(leaves[0] + leaves[1]).digest()
        + hashlib.sha1(leaves[2] + leaves[3]).digest()
    ).digest()
    assert combine(parent_left, parent_right) == expected


@pytest.mark.parametrize("length", [0, 55, 56, 64, 120])
def test_round_tracking_matches_digest(length):
    data = _message(length)
    tracked_digest, a_values_per_block = sha1_with_round_tracking(data)

    assert tracked_digest == digest(data)
    assert len(a_values_per_block) == len(pad_message(data)) // 64
    assert all(len(a_values) == 80 for a_values in a_values_per_block)


def _word_view(byte_count: int) -> memoryview:
    """A memoryview over `byte_count` bytes whose items are wider than one byte."""
    words = array.array("I")
    words.extend(range(byte_count // words.itemsize))
    assert words.itemsize * len(words) == byte_count
    return memoryview(words)


def test_combine_measures_wide_item_views_in_bytes():
    wide = _word_view(4 * DIGEST_SIZE)
    # 80 bytes, even though len(wide) is 20 with 4-byte items.
    with pytest.raises(ValueError):
        combine(wide, b"\x00" * DIGEST_SIZE)

    digest_view = _word_view(DIGEST_SIZE)
    right = b"\x00" * DIGEST_SIZE
    assert combine(digest_view, right) == hashlib.sha1(digest_view.tobytes() + right).digest()


def test_split_into_blocks_measures_wide_item_views_in_bytes():
    view = _word_view(128)
    blocks = split_into_blocks(view)
    assert blocks == [view.tobytes()[:64], view.tobytes()[64:]]

    with pytest.raises(ValueError):
        split_into_blocks(_word_view(64 + 4))
