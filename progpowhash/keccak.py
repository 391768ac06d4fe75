"""Keccak-f permutations and the original-padding Keccak-256/512 hashes."""

import struct
from typing import Iterable, List

_NUM_LANES = 25


def _make_round_constants(count: int) -> List[int]:
    """Round constants from the Keccak LFSR (x^8 + x^6 + x^5 + x^4 + 1)."""
    constants = []
    lfsr = 1
    for _ in range(count):
        rc = 0
        for j in range(7):
            if lfsr & 1:
                rc |= 1 << ((1 << j) - 1)
            lfsr = ((lfsr << 1) & 0xFF) ^ (0x71 if lfsr & 0x80 else 0)
        constants.append(rc)
    return constants


def _make_pi_rho_table() -> List[tuple]:
    """(source lane, destination lane, rotation) for the combined rho/pi step."""
    offsets = {(0, 0): 0}
    x, y = 1, 0
    for t in range(24):
        offsets[(x, y)] = (t + 1) * (t + 2) // 2
        x, y = y, (2 * x + 3 * y) % 5
    return [
        (x + 5 * y, y + 5 * ((2 * x + 3 * y) % 5), offset)
        for (x, y), offset in offsets.items()
    ]


_ROUND_CONSTANTS = _make_round_constants(24)
_PI_RHO = _make_pi_rho_table()


def _permute(state: Iterable[int], width: int, rounds: int) -> List[int]:
    mask = (1 << width) - 1
    a = [v & mask for v in state]
    if len(a) != _NUM_LANES:
        raise ValueError(f"Keccak state must have {_NUM_LANES} lanes, got {len(a)}")

    def rot(v: int, s: int) -> int:
        s %= width
        return ((v << s) | (v >> (width - s))) & mask if s else v

    rho_pi = [(src, dst, off % width) for src, dst, off in _PI_RHO]
    for rc in _ROUND_CONSTANTS[:rounds]:
        c = [a[x] ^ a[x + 5] ^ a[x + 10] ^ a[x + 15] ^ a[x + 20] for x in range(5)]
        d = [c[(x - 1) % 5] ^ rot(c[(x + 1) % 5], 1) for x in range(5)]
        b = [0] * _NUM_LANES
        for src, dst, off in rho_pi:
            b[dst] = rot(a[src] ^ d[src % 5], off)
        a = [
            b[i] ^ (~b[(i % 5 + 1) % 5 + i - i % 5] & b[(i % 5 + 2) % 5 + i - i % 5] & mask)
            for i in range(_NUM_LANES)
        ]
        a[0] ^= rc & mask
    return a


def keccakf1600(state: Iterable[int]) -> List[int]:
    """Apply Keccak-f[1600] to 25 64-bit lanes and return the new lanes."""
    return _permute(state, 64, 24)


def keccakf800(state: Iterable[int]) -> List[int]:
    """Apply Keccak-f[800] to 25 32-bit lanes and return the new lanes."""
    return _permute(state, 32, 22)


def _keccak(data: bytes, bits: int) -> bytes:
    rate = (1600 - 2 * bits) // 8
    padded = bytearray(data)
    padded.append(0x01)
    padded.extend(bytes(-len(padded) % rate))
    padded[-1] |= 0x80

    words_per_block = rate // 8
    state = [0] * _NUM_LANES
    for offset in range(0, len(padded), rate):
        block = struct.unpack_from(f"<{words_per_block}Q", padded, offset)
        state = [lane ^ word for lane, word in zip(state, block)] + state[words_per_block:]
        state = keccakf1600(state)

    out_words = bits // 64
    return struct.pack(f"<{out_words}Q", *state[:out_words])


def keccak256(data: bytes) -> bytes:
    """Keccak-256 (original 0x01 padding) of ``data``; returns 32 bytes."""
    return _keccak(bytes(data), 256)


def keccak512(data: bytes) -> bytes:
    """Keccak-512 (original 0x01 padding) of ``data``; returns 64 bytes."""
    return _keccak(bytes(data), 512)