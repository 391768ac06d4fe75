"""32-bit integer helpers: rotations, bit counts and FNV hashing."""

MASK32 = 0xFFFFFFFF

FNV_PRIME = 0x01000193
"""FNV 32-bit prime."""

FNV_OFFSET_BASIS = 0x811C9DC5
"""FNV 32-bit offset basis."""


def rotl32(n: int, c: int) -> int:
    """Rotate the 32-bit word ``n`` left by ``c`` bits (``c`` taken modulo 32)."""
    n &= MASK32
    c &= 31
    return ((n << c) | (n >> ((32 - c) & 31))) & MASK32


def rotr32(n: int, c: int) -> int:
    """Rotate the 32-bit word ``n`` right by ``c`` bits (``c`` taken modulo 32)."""
    n &= MASK32
    c &= 31
    return ((n >> c) | (n << ((32 - c) & 31))) & MASK32


def clz32(x: int) -> int:
    """Count leading zero bits of a 32-bit word; 32 for zero."""
    return 32 - (x & MASK32).bit_length()


def popcount32(x: int) -> int:
    """Count the set bits of a 32-bit word."""
    return (x & MASK32).bit_count()


def mul_hi32(x: int, y: int) -> int:
    """High 32 bits of the 64-bit product of two 32-bit words."""
    return ((x & MASK32) * (y & MASK32)) >> 32


def fnv1(u: int, v: int) -> int:
    """One step of the FNV-1 hash."""
    return ((u * FNV_PRIME) & MASK32) ^ (v & MASK32)


def fnv1a(u: int, v: int) -> int:
    """One step of the FNV-1a hash."""
    return (((u ^ v) & MASK32) * FNV_PRIME) & MASK32