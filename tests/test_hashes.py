import pytest
from hypothesis import given
from hypothesis import strategies as st

from progpowhash.hashes import (
    from_words32,
    from_words64,
    is_equal,
    is_less_or_equal,
    words32,
    words64,
)


@given(st.binary(min_size=0, max_size=64).filter(lambda b: len(b) % 4 == 0))
def test_words32_round_trip(data):
    assert from_words32(words32(data)) == data


@given(st.binary(min_size=0, max_size=64).filter(lambda b: len(b) % 8 == 0))
def test_words64_round_trip(data):
    assert from_words64(words64(data)) == data


@given(st.lists(st.integers(min_value=0, max_value=0xFFFFFFFF), max_size=16))
def test_from_words32_round_trip(words):
    assert list(words32(from_words32(words))) == words


def test_words_are_little_endian():
    data = bytes([1, 0, 0, 0, 0, 0, 0, 2])
    assert words32(data) == (1, 0x02000000)
    assert words64(data) == (0x0200000000000001,)


def test_words32_and_words64_agree():
    data = bytes(range(32))
    w32 = words32(data)
    w64 = words64(data)
    assert all(w64[i] == w32[2 * i] | (w32[2 * i + 1] << 32) for i in range(4))


def test_words32_bad_length():
    with pytest.raises(ValueError):
        words32(b"\x00\x01\x02")


def test_words64_bad_length():
    with pytest.raises(ValueError):
        words64(bytes(12))


def test_from_words32_out_of_range():
    with pytest.raises(ValueError):
        from_words32([1 << 32])


def test_from_words64_negative():
    with pytest.raises(ValueError):
        from_words64([-1])


def test_is_less_or_equal_big_endian_order():
    small = b"\x00" + b"\xff" * 31
    large = b"\x01" + b"\x00" * 31
    assert is_less_or_equal(small, large)
    assert not is_less_or_equal(large, small)


def test_is_less_or_equal_equal_values():
    h = bytes(range(32))
    assert is_less_or_equal(h, h)


@given(st.binary(min_size=32, max_size=32), st.binary(min_size=32, max_size=32))
def test_is_less_or_equal_total_order(a, b):
    assert is_less_or_equal(a, b) or is_less_or_equal(b, a)
    if is_less_or_equal(a, b) and is_less_or_equal(b, a):
        assert is_equal(a, b)


def test_zero_is_below_everything():
    assert is_less_or_equal(bytes(32), b"\x00" * 31 + b"\x01")


def test_is_equal():
    a = bytes(range(32))
    assert is_equal(a, bytes(a))
    assert not is_equal(a, bytes(32))


def test_size_mismatch_raises():
    with pytest.raises(ValueError):
        is_less_or_equal(bytes(32), bytes(64))
    with pytest.raises(ValueError):
        is_equal(bytes(32), bytes(31))