"""Fixed-size hash values as little-endian byte strings, and helpers to view them as words."""

import struct
from typing import Iterable, Tuple

VERSION = "0.4.3"
"""The hashing library version."""

HASH256_SIZE = 32
HASH512_SIZE = 64
HASH1024_SIZE = 128
HASH2048_SIZE = 256


def words32(data: bytes) -> Tuple[int, ...]:
    """View ``data`` as a tuple of little-endian 32-bit words."""
    data = bytes(data)
    if len(data) % 4:
        raise ValueError(f"length {len(data)} is not a multiple of 4 bytes")
    return struct.unpack(f"<{len(data) // 4}I", data)


def words64(data: bytes) -> Tuple[int, ...]:
    """View ``data`` as a tuple of little-endian 64-bit words."""
    data = bytes(data)
    if len(data) % 8:
        raise ValueError(f"length {len(data)} is not a multiple of 8 bytes")
    return struct.unpack(f"<{len(data) // 8}Q", data)


def from_words32(words: Iterable[int]) -> bytes:
    """Pack 32-bit words into bytes, little-endian."""
    values = list(words)
    try:
        return struct.pack(f"<{len(values)}I", *values)
    except struct.error as exc:
        raise ValueError(f"word out of 32-bit range: {exc}") from None


def from_words64(words: Iterable[int]) -> bytes:
    """Pack 64-bit words into bytes, little-endian."""
    values = list(words)
    try:
        return struct.pack(f"<{len(values)}Q", *values)
    except struct.error as exc:
        raise ValueError(f"word out of 64-bit range: {exc}") from None


def _check_same_size(a: bytes, b: bytes) -> None:
    if len(a) != len(b):
        raise ValueError(f"hash sizes differ: {len(a)} and {len(b)}")


def is_less_or_equal(a: bytes, b: bytes) -> bool:
    """True if hash ``a`` read as a big-endian number is not greater than ``b``."""
    a, b = bytes(a), bytes(b)
    _check_same_size(a, b)
    return a <= b


def is_equal(a: bytes, b: bytes) -> bool:
    """True if the two hashes hold the same bytes."""
    a, b = bytes(a), bytes(b)
    _check_same_size(a, b)
    return a == b