"""The Ethash proof-of-work hash, its verification and nonce search."""

from dataclasses import dataclass
from typing import Callable

from .bits import MASK32, fnv1
from .epoch import NUM_DATASET_ACCESSES, EpochContext, calculate_dataset_item_1024
from .hashes import (
    HASH256_SIZE,
    HASH512_SIZE,
    from_words32,
    is_equal,
    is_less_or_equal,
    words32,
)
from .keccak import keccak256, keccak512

MASK64 = 0xFFFFFFFFFFFFFFFF

_Lookup = Callable[[int], bytes]


@dataclass(frozen=True)
class Result:
    """Final hash and mix hash of one nonce."""

    final_hash: bytes
    mix_hash: bytes


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a nonce search; ``solution_found`` is False when nothing matched."""

    solution_found: bool = False
    nonce: int = 0
    final_hash: bytes = bytes(HASH256_SIZE)
    mix_hash: bytes = bytes(HASH256_SIZE)

    @classmethod
    def found(cls, result: Result, nonce: int) -> "SearchResult":
        return cls(True, nonce, result.final_hash, result.mix_hash)


def _check_hash256(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != HASH256_SIZE:
        raise ValueError(f"{name} must be {HASH256_SIZE} bytes, got {len(value)}")
    return value


def _hash_seed(header_hash: bytes, nonce: int) -> bytes:
    return keccak512(header_hash + (nonce & MASK64).to_bytes(8, "little"))


def _hash_final(seed: bytes, mix_hash: bytes) -> bytes:
    return keccak256(seed + mix_hash)


def _hash_kernel(context: EpochContext, seed: bytes, lookup: _Lookup) -> bytes:
    index_limit = context.full_dataset_num_items
    seed_words = words32(seed)
    seed_init = seed_words[0]
    mix = list(seed_words) * 2
    num_words = len(mix)

    for i in range(NUM_DATASET_ACCESSES):
        p = fnv1(i ^ seed_init, mix[i % num_words]) % index_limit
        newdata = words32(lookup(p))
        mix = [fnv1(a, b) for a, b in zip(mix, newdata)]

    compressed = [
        fnv1(fnv1(fnv1(a, b), c), d)
        for a, b, c, d in zip(mix[0::4], mix[1::4], mix[2::4], mix[3::4])
    ]
    return from_words32(w & MASK32 for w in compressed)


def _light_lookup(context: EpochContext) -> _Lookup:
    return lambda index: calculate_dataset_item_1024(context, index)


def ethash_hash(context: EpochContext, header_hash: bytes, nonce: int) -> Result:
    """Compute the Ethash final hash and mix hash of ``header_hash`` and ``nonce``.

    A full context keeps the dataset items it computes; a light one derives them each time.
    """
    header_hash = _check_hash256(header_hash, "header hash")
    seed = _hash_seed(header_hash, nonce)
    assert len(seed) == HASH512_SIZE
    mix_hash = _hash_kernel(context, seed, context.full_item_1024)
    return Result(_hash_final(seed, mix_hash), mix_hash)


def verify_final_hash(
    header_hash: bytes, mix_hash: bytes, nonce: int, boundary: bytes
) -> bool:
    """Check only that the final hash built from ``mix_hash`` meets ``boundary``."""
    header_hash = _check_hash256(header_hash, "header hash")
    mix_hash = _check_hash256(mix_hash, "mix hash")
    boundary = _check_hash256(boundary, "boundary")
    seed = _hash_seed(header_hash, nonce)
    return is_less_or_equal(_hash_final(seed, mix_hash), boundary)


def verify(
    context: EpochContext, header_hash: bytes, mix_hash: bytes, nonce: int, boundary: bytes
) -> bool:
    """Check the final hash against ``boundary`` and recompute the mix hash."""
    header_hash = _check_hash256(header_hash, "header hash")
    mix_hash = _check_hash256(mix_hash, "mix hash")
    boundary = _check_hash256(boundary, "boundary")
    seed = _hash_seed(header_hash, nonce)
    if not is_less_or_equal(_hash_final(seed, mix_hash), boundary):
        return False
    expected = _hash_kernel(context, seed, _light_lookup(context))
    return is_equal(expected, mix_hash)


def _nonces(start_nonce: int, iterations: int) -> range:
    start = start_nonce & MASK64
    end = (start + iterations) & MASK64
    return range(start, end)


def _search(
    context: EpochContext,
    header_hash: bytes,
    boundary: bytes,
    start_nonce: int,
    iterations: int,
    lookup: _Lookup,
) -> SearchResult:
    header_hash = _check_hash256(header_hash, "header hash")
    boundary = _check_hash256(boundary, "boundary")
    if iterations < 0:
        raise ValueError(f"iterations must not be negative, got {iterations}")
    for nonce in _nonces(start_nonce, iterations):
        seed = _hash_seed(header_hash, nonce)
        mix_hash = _hash_kernel(context, seed, lookup)
        result = Result(_hash_final(seed, mix_hash), mix_hash)
        if is_less_or_equal(result.final_hash, boundary):
            return SearchResult.found(result, nonce)
    return SearchResult()


def search_light(
    context: EpochContext,
    header_hash: bytes,
    boundary: bytes,
    start_nonce: int,
    iterations: int,
) -> SearchResult:
    """Try ``iterations`` nonces from ``start_nonce``, deriving dataset items each time."""
    return _search(
        context, header_hash, boundary, start_nonce, iterations, _light_lookup(context)
    )


def search(
    context: EpochContext,
    header_hash: bytes,
    boundary: bytes,
    start_nonce: int,
    iterations: int,
) -> SearchResult:
    """Try ``iterations`` nonces from ``start_nonce`` using a full context's dataset."""
    if not context.full:
        raise ValueError("search needs a context with the full dataset")
    return _search(
        context, header_hash, boundary, start_nonce, iterations, context.full_item_1024
    )