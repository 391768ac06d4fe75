"""ProgPoW: the programmable proof-of-work hash built on the Ethash dataset."""

import operator
from dataclasses import dataclass
from functools import lru_cache, reduce
from typing import Callable, List, Optional, Sequence, Tuple

from .bits import (
    FNV_OFFSET_BASIS,
    MASK32,
    clz32,
    fnv1a,
    mul_hi32,
    popcount32,
    rotl32,
    rotr32,
)
from .epoch import L1_CACHE_NUM_ITEMS, EpochContext, calculate_dataset_item_2048
from .ethash import Result, SearchResult
from .hashes import HASH256_SIZE, from_words32, is_equal, is_less_or_equal, words32
from .keccak import keccakf800
from .kiss99 import Kiss99

REVISION = "0.9.2"
"""The ProgPoW algorithm revision."""

PERIOD_LENGTH = 50
NUM_REGS = 32
NUM_LANES = 16
NUM_CACHE_ACCESSES = 12
NUM_MATH_OPERATIONS = 20
NUM_ROUNDS = 64

MASK64 = 0xFFFFFFFFFFFFFFFF

_ITEM_2048_WORDS = 64
_WORDS_PER_LANE = _ITEM_2048_WORDS // NUM_LANES
_HASH256_WORDS = HASH256_SIZE // 4

Lookup = Callable[[int], bytes]
Mix = List[List[int]]


def _check_hash256(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != HASH256_SIZE:
        raise ValueError(f"{name} must be {HASH256_SIZE} bytes, got {len(value)}")
    return value


def keccak_progpow_256(header_hash: bytes, nonce: int, mix_hash: bytes) -> bytes:
    """Keccak-f[800] over header, 64-bit nonce and mix hash, with no padding; 32 bytes out."""
    header_hash = _check_hash256(header_hash, "header hash")
    mix_hash = _check_hash256(mix_hash, "mix hash")
    nonce &= MASK64
    state = [*words32(header_hash), nonce & MASK32, nonce >> 32, *words32(mix_hash)]
    state.extend([0] * (25 - len(state)))
    return from_words32(keccakf800(state)[:_HASH256_WORDS])


def keccak_progpow_64(header_hash: bytes, nonce: int) -> int:
    """Top 64 bits (big-endian prefix) of ``keccak_progpow_256`` with a zero mix."""
    digest = keccak_progpow_256(header_hash, nonce, bytes(HASH256_SIZE))
    return int.from_bytes(digest[:8], "big")


class MixRngState:
    """Random source of a ProgPoW period: KISS99 plus shuffled register sequences."""

    def __init__(self, seed: int):
        seed &= MASK64
        seed_lo, seed_hi = seed & MASK32, seed >> 32
        z = fnv1a(FNV_OFFSET_BASIS, seed_lo)
        w = fnv1a(z, seed_hi)
        jsr = fnv1a(w, seed_lo)
        jcong = fnv1a(jsr, seed_hi)
        self.rng = Kiss99(z, w, jsr, jcong)

        dst_seq = list(range(NUM_REGS))
        src_seq = list(range(NUM_REGS))
        for i in range(NUM_REGS, 1, -1):
            j = next(self.rng) % i
            dst_seq[i - 1], dst_seq[j] = dst_seq[j], dst_seq[i - 1]
            j = next(self.rng) % i
            src_seq[i - 1], src_seq[j] = src_seq[j], src_seq[i - 1]

        self._dst_seq = tuple(dst_seq)
        self._src_seq = tuple(src_seq)
        self._dst_counter = 0
        self._src_counter = 0

    def next_dst(self) -> int:
        """Next destination register, cycling through a fixed permutation."""
        value = self._dst_seq[self._dst_counter % NUM_REGS]
        self._dst_counter += 1
        return value

    def next_src(self) -> int:
        """Next source register, cycling through a fixed permutation."""
        value = self._src_seq[self._src_counter % NUM_REGS]
        self._src_counter += 1
        return value

    def next_rand(self) -> int:
        """Next raw 32-bit random word."""
        return next(self.rng)


_MATH_OPS: Tuple[Callable[[int, int], int], ...] = (
    lambda a, b: clz32(a) + clz32(b),
    lambda a, b: popcount32(a) + popcount32(b),
    lambda a, b: (a + b) & MASK32,
    lambda a, b: (a * b) & MASK32,
    mul_hi32,
    min,
    rotl32,
    rotr32,
    operator.and_,
    operator.or_,
    operator.xor,
)


def random_math(a: int, b: int, selector: int) -> int:
    """Apply one of eleven operations to ``a`` and ``b``, chosen by ``selector``."""
    return _MATH_OPS[(selector & MASK32) % len(_MATH_OPS)](a & MASK32, b & MASK32)


def random_merge(a: int, b: int, selector: int) -> int:
    """Merge ``b`` into ``a`` in an entropy-keeping way chosen by ``selector``; returns new ``a``."""
    a &= MASK32
    b &= MASK32
    selector &= MASK32
    shift = (selector >> 16) % 31 + 1
    kind = selector % 4
    if kind == 0:
        return (a * 33 + b) & MASK32
    if kind == 1:
        return ((a ^ b) * 33) & MASK32
    if kind == 2:
        return rotl32(a, shift) ^ b
    return rotr32(a, shift) ^ b


@dataclass(frozen=True)
class _CacheOp:
    src: int
    dst: int
    sel: int

    def apply(self, mix: Mix, l1_cache: Sequence[int]) -> None:
        for lane in mix:
            word = l1_cache[lane[self.src] % L1_CACHE_NUM_ITEMS]
            lane[self.dst] = random_merge(lane[self.dst], word, self.sel)


@dataclass(frozen=True)
class _MathOp:
    src1: int
    src2: int
    sel1: int
    dst: int
    sel2: int

    def apply(self, mix: Mix, l1_cache: Sequence[int]) -> None:
        for lane in mix:
            data = random_math(lane[self.src1], lane[self.src2], self.sel1)
            lane[self.dst] = random_merge(lane[self.dst], data, self.sel2)


@dataclass(frozen=True)
class _Program:
    ops: tuple
    dag_dsts: Tuple[int, ...]
    dag_sels: Tuple[int, ...]


@lru_cache(maxsize=8)
def _build_program(period_seed: int) -> _Program:
    """The operation sequence of a period; every round of the period runs the same one."""
    state = MixRngState(period_seed)
    ops = []
    for i in range(max(NUM_CACHE_ACCESSES, NUM_MATH_OPERATIONS)):
        if i < NUM_CACHE_ACCESSES:
            src = state.next_src()
            dst = state.next_dst()
            sel = state.next_rand()
            ops.append(_CacheOp(src, dst, sel))
        if i < NUM_MATH_OPERATIONS:
            src_rnd = state.next_rand() % (NUM_REGS * (NUM_REGS - 1))
            src1 = src_rnd % NUM_REGS
            src2 = src_rnd // NUM_REGS
            if src2 >= src1:
                src2 += 1
            sel1 = state.next_rand()
            dst = state.next_dst()
            sel2 = state.next_rand()
            ops.append(_MathOp(src1, src2, sel1, dst, sel2))

    dsts = []
    sels = []
    for i in range(_WORDS_PER_LANE):
        dsts.append(0 if i == 0 else state.next_dst())
        sels.append(state.next_rand())
    return _Program(tuple(ops), tuple(dsts), tuple(sels))


def init_mix(seed: int) -> Mix:
    """Initial registers: ``NUM_LANES`` lanes of ``NUM_REGS`` words each."""
    seed &= MASK64
    z = fnv1a(FNV_OFFSET_BASIS, seed & MASK32)
    w = fnv1a(z, seed >> 32)
    mix = []
    for lane in range(NUM_LANES):
        jsr = fnv1a(w, lane)
        jcong = fnv1a(jsr, lane)
        rng = Kiss99(z, w, jsr, jcong)
        mix.append([next(rng) for _ in range(NUM_REGS)])
    return mix


def _round(
    num_items: int,
    r: int,
    mix: Mix,
    program: _Program,
    l1_cache: Sequence[int],
    lookup: Lookup,
) -> None:
    item = words32(lookup(mix[r % NUM_LANES][0] % num_items))
    for op in program.ops:
        op.apply(mix, l1_cache)

    for lane_index, lane in enumerate(mix):
        offset = ((lane_index ^ r) % NUM_LANES) * _WORDS_PER_LANE
        for i, (dst, sel) in enumerate(zip(program.dag_dsts, program.dag_sels)):
            lane[dst] = random_merge(lane[dst], item[offset + i], sel)


def hash_mix(
    context: EpochContext, block_number: int, seed: int, lookup: Optional[Lookup] = None
) -> bytes:
    """The 32-byte mix hash of ``seed``; ``lookup`` maps an index to a 2048-bit dataset item.

    Without ``lookup`` the items are derived from the light cache each time.
    """
    if block_number < 0:
        raise ValueError(f"block number must not be negative, got {block_number}")
    num_items = context.full_dataset_num_items // 2
    if num_items < 1:
        raise ValueError("context dataset is too small for 2048-bit items")
    if lookup is None:
        def lookup(index: int) -> bytes:
            return calculate_dataset_item_2048(context, index)

    mix = init_mix(seed)
    program = _build_program(block_number // PERIOD_LENGTH)
    l1_cache = context.l1_cache
    for r in range(NUM_ROUNDS):
        _round(num_items, r, mix, program, l1_cache, lookup)

    lane_hashes = [reduce(fnv1a, lane, FNV_OFFSET_BASIS) for lane in mix]
    mix_hash = [FNV_OFFSET_BASIS] * _HASH256_WORDS
    for lane_index, lane_hash in enumerate(lane_hashes):
        slot = lane_index % _HASH256_WORDS
        mix_hash[slot] = fnv1a(mix_hash[slot], lane_hash)
    return from_words32(mix_hash)


def progpow_hash(
    context: EpochContext, block_number: int, header_hash: bytes, nonce: int
) -> Result:
    """ProgPoW final hash and mix hash of ``header_hash`` and ``nonce`` at ``block_number``.

    A full context keeps the dataset items it computes; a light one derives them each time.
    """
    header_hash = _check_hash256(header_hash, "header hash")
    seed = keccak_progpow_64(header_hash, nonce)
    mix_hash = hash_mix(context, block_number, seed, context.full_item_2048)
    return Result(keccak_progpow_256(header_hash, seed, mix_hash), mix_hash)


def verify(
    context: EpochContext,
    block_number: int,
    header_hash: bytes,
    mix_hash: bytes,
    nonce: int,
    boundary: bytes,
) -> bool:
    """Check the final hash against ``boundary`` and recompute the mix hash."""
    header_hash = _check_hash256(header_hash, "header hash")
    mix_hash = _check_hash256(mix_hash, "mix hash")
    boundary = _check_hash256(boundary, "boundary")
    seed = keccak_progpow_64(header_hash, nonce)
    final_hash = keccak_progpow_256(header_hash, seed, mix_hash)
    if not is_less_or_equal(final_hash, boundary):
        return False
    expected = hash_mix(context, block_number, seed)
    return is_equal(expected, mix_hash)


def _search(
    context: EpochContext,
    block_number: int,
    header_hash: bytes,
    boundary: bytes,
    start_nonce: int,
    iterations: int,
    lookup: Lookup,
) -> SearchResult:
    header_hash = _check_hash256(header_hash, "header hash")
    boundary = _check_hash256(boundary, "boundary")
    if iterations < 0:
        raise ValueError(f"iterations must not be negative, got {iterations}")
    start = start_nonce & MASK64
    end = (start + iterations) & MASK64
    for nonce in range(start, end):
        seed = keccak_progpow_64(header_hash, nonce)
        mix_hash = hash_mix(context, block_number, seed, lookup)
        result = Result(keccak_progpow_256(header_hash, seed, mix_hash), mix_hash)
        if is_less_or_equal(result.final_hash, boundary):
            return SearchResult.found(result, nonce)
    return SearchResult()


def search_light(
    context: EpochContext,
    block_number: int,
    header_hash: bytes,
    boundary: bytes,
    start_nonce: int,
    iterations: int,
) -> SearchResult:
    """Try ``iterations`` nonces from ``start_nonce``, deriving dataset items each time."""
    def lookup(index: int) -> bytes:
        return calculate_dataset_item_2048(context, index)

    return _search(
        context, block_number, header_hash, boundary, start_nonce, iterations, lookup
    )


def search(
    context: EpochContext,
    block_number: int,
    header_hash: bytes,
    boundary: bytes,
    start_nonce: int,
    iterations: int,
) -> SearchResult:
    """Try ``iterations`` nonces from ``start_nonce`` using a full context's dataset."""
    if not context.full:
        raise ValueError("search needs a context with the full dataset")
    return _search(
        context,
        block_number,
        header_hash,
        boundary,
        start_nonce,
        iterations,
        context.full_item_2048,
    )