"""The KISS pseudo-random number generator as specified in 1999, on 32-bit words."""

from .bits import MASK32

_DEFAULT_Z = 362436069
_DEFAULT_W = 521288629
_DEFAULT_JSR = 123456789
_DEFAULT_JCONG = 380116160


class Kiss99:
    """KISS generator; an iterator yielding an endless stream of 32-bit words."""

    __slots__ = ("z", "w", "jsr", "jcong")

    def __init__(
        self,
        z: int = _DEFAULT_Z,
        w: int = _DEFAULT_W,
        jsr: int = _DEFAULT_JSR,
        jcong: int = _DEFAULT_JCONG,
    ):
        self.z = z & MASK32
        self.w = w & MASK32
        self.jsr = jsr & MASK32
        self.jcong = jcong & MASK32

    def __repr__(self) -> str:
        return f"Kiss99(z={self.z}, w={self.w}, jsr={self.jsr}, jcong={self.jcong})"

    def __iter__(self) -> "Kiss99":
        return self

    def __next__(self) -> int:
        z = (36969 * (self.z & 0xFFFF) + (self.z >> 16)) & MASK32
        w = (18000 * (self.w & 0xFFFF) + (self.w >> 16)) & MASK32
        jcong = (69069 * self.jcong + 1234567) & MASK32

        jsr = self.jsr
        jsr ^= (jsr << 17) & MASK32
        jsr ^= jsr >> 13
        jsr ^= (jsr << 5) & MASK32

        self.z, self.w, self.jsr, self.jcong = z, w, jsr, jcong
        return (((((z << 16) + w) & MASK32) ^ jcong) + jsr) & MASK32