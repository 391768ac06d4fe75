"""Ethash epoch parameters, light cache building and dataset item generation."""

import threading
from functools import cached_property
from typing import Callable, Iterable, Optional, Tuple

from .bits import FNV_PRIME, MASK32, fnv1
from .hashes import HASH256_SIZE, HASH512_SIZE, from_words32, words32
from .keccak import keccak256, keccak512
from .primes import find_largest_prime

REVISION = "23"
"""The Ethash algorithm revision."""

EPOCH_LENGTH = 30000
LIGHT_CACHE_ITEM_SIZE = 64
FULL_DATASET_ITEM_SIZE = 128
NUM_DATASET_ACCESSES = 64

L1_CACHE_SIZE = 16 * 1024
L1_CACHE_NUM_ITEMS = L1_CACHE_SIZE // 4

_LIGHT_CACHE_INIT_SIZE = 1 << 24
_LIGHT_CACHE_GROWTH = 1 << 17
_LIGHT_CACHE_ROUNDS = 3
_FULL_DATASET_INIT_SIZE = 1 << 30
_FULL_DATASET_GROWTH = 1 << 23
_FULL_DATASET_ITEM_PARENTS = 256
_ITEM_2048_SIZE = 256

_NUM_FIND_TRIES = 30000

HashFn = Callable[[bytes], bytes]


class EpochContext:
    """Light cache of an epoch plus, optionally, a lazily filled full dataset."""

    def __init__(
        self,
        epoch_number: int,
        light_cache: Iterable[bytes],
        full_dataset_num_items: int,
        full: bool = False,
    ):
        items = tuple(bytes(item) for item in light_cache)
        if not items:
            raise ValueError("light cache must not be empty")
        if any(len(item) != LIGHT_CACHE_ITEM_SIZE for item in items):
            raise ValueError(f"light cache items must be {LIGHT_CACHE_ITEM_SIZE} bytes")
        if full_dataset_num_items < 1:
            raise ValueError("full dataset must have at least one item")
        self.epoch_number = epoch_number
        self.light_cache = items
        self.light_cache_words = tuple(words32(item) for item in items)
        self.full_dataset_num_items = full_dataset_num_items
        self._full_dataset: Optional[dict] = {} if full else None

    def __repr__(self) -> str:
        return (
            f"EpochContext(epoch_number={self.epoch_number}, "
            f"light_cache_num_items={self.light_cache_num_items}, "
            f"full_dataset_num_items={self.full_dataset_num_items}, full={self.full})"
        )

    @property
    def light_cache_num_items(self) -> int:
        return len(self.light_cache)

    @property
    def full(self) -> bool:
        """True if full dataset items are kept once computed."""
        return self._full_dataset is not None

    @cached_property
    def l1_cache(self) -> Tuple[int, ...]:
        """The first 16 KiB of the dataset as 32-bit words."""
        words = []
        for index in range(L1_CACHE_SIZE // _ITEM_2048_SIZE):
            words.extend(words32(self.full_item_2048(index)))
        return tuple(words)

    def full_item_1024(self, index: int) -> bytes:
        """Dataset item of 1024 bits, kept for reuse when the context is full."""
        if self._full_dataset is None:
            return calculate_dataset_item_1024(self, index)
        item = self._full_dataset.get(index)
        if item is None:
            item = calculate_dataset_item_1024(self, index)
            self._full_dataset[index] = item
        return item

    def full_item_2048(self, index: int) -> bytes:
        """Dataset item of 2048 bits: two consecutive 1024-bit items."""
        return self.full_item_1024(2 * index) + self.full_item_1024(2 * index + 1)


def calculate_epoch_seed(epoch_number: int) -> bytes:
    """Seed hash of an epoch: Keccak-256 applied ``epoch_number`` times to zeros."""
    seed = bytes(HASH256_SIZE)
    for _ in range(epoch_number):
        seed = keccak256(seed)
    return seed


def calculate_light_cache_num_items(epoch_number: int) -> int:
    """Number of 64-byte items in the light cache of an epoch."""
    init = _LIGHT_CACHE_INIT_SIZE // LIGHT_CACHE_ITEM_SIZE
    growth = _LIGHT_CACHE_GROWTH // LIGHT_CACHE_ITEM_SIZE
    return find_largest_prime(init + epoch_number * growth)


def calculate_full_dataset_num_items(epoch_number: int) -> int:
    """Number of 128-byte items in the full dataset of an epoch."""
    init = _FULL_DATASET_INIT_SIZE // FULL_DATASET_ITEM_SIZE
    growth = _FULL_DATASET_GROWTH // FULL_DATASET_ITEM_SIZE
    return find_largest_prime(init + epoch_number * growth)


def get_epoch_number(block_number: int) -> int:
    """Epoch of a block."""
    return block_number // EPOCH_LENGTH


def get_light_cache_size(num_items: int) -> int:
    """Light cache size in bytes."""
    return num_items * LIGHT_CACHE_ITEM_SIZE


def get_full_dataset_size(num_items: int) -> int:
    """Full dataset size in bytes."""
    return num_items * FULL_DATASET_ITEM_SIZE


_seed_cache = threading.local()


def find_epoch_number(seed: bytes) -> int:
    """Recover the epoch number from its seed hash; -1 if not found.

    The last match is remembered per thread, so sequential lookups are cheap.
    """
    seed = bytes(seed)
    if len(seed) != HASH256_SIZE:
        raise ValueError(f"seed must be {HASH256_SIZE} bytes, got {len(seed)}")
    seed_part = seed[:4]
    epoch = getattr(_seed_cache, "epoch", 0)
    cached = getattr(_seed_cache, "seed", bytes(HASH256_SIZE))

    if cached[:4] == seed_part:
        return epoch

    candidate = keccak256(cached)
    if candidate[:4] == seed_part:
        _seed_cache.seed, _seed_cache.epoch = candidate, epoch + 1
        return epoch + 1

    candidate = bytes(HASH256_SIZE)
    for number in range(_NUM_FIND_TRIES):
        if candidate[:4] == seed_part:
            _seed_cache.seed, _seed_cache.epoch = candidate, number
            return number
        candidate = keccak256(candidate)
    return -1


def _xor(a: bytes, b: bytes) -> bytes:
    return (int.from_bytes(a, "little") ^ int.from_bytes(b, "little")).to_bytes(
        len(a), "little"
    )


def build_light_cache(num_items: int, seed: bytes, hash_fn: HashFn = keccak512) -> list:
    """Build the light cache: a list of ``num_items`` 64-byte items."""
    if num_items < 1:
        raise ValueError("light cache needs at least one item")
    item = hash_fn(bytes(seed))
    cache = [item]
    for _ in range(1, num_items):
        item = hash_fn(item)
        cache.append(item)

    for _ in range(_LIGHT_CACHE_ROUNDS):
        for i in range(num_items):
            v = words32(cache[i][:4])[0] % num_items
            w = (num_items + i - 1) % num_items
            cache[i] = hash_fn(_xor(cache[v], cache[w]))
    return cache


def _dataset_item(context: EpochContext, index: int) -> bytes:
    cache = context.light_cache_words
    num_items = len(cache)
    seed = index & MASK32

    mix = list(cache[index % num_items])
    mix[0] ^= seed
    mix = words32(keccak512(from_words32(mix)))

    num_words = len(mix)
    for rnd in range(_FULL_DATASET_ITEM_PARENTS):
        parent = cache[fnv1(seed ^ rnd, mix[rnd % num_words]) % num_items]
        mix = [((a * FNV_PRIME) & MASK32) ^ b for a, b in zip(mix, parent)]
    return keccak512(from_words32(mix))


def calculate_dataset_item_512(context: EpochContext, index: int) -> bytes:
    """One 512-bit dataset item derived from the light cache."""
    return _dataset_item(context, index)


def calculate_dataset_item_1024(context: EpochContext, index: int) -> bytes:
    """A 1024-bit full dataset item: 512-bit items ``2i`` and ``2i + 1``."""
    return b"".join(_dataset_item(context, 2 * index + k) for k in range(2))


def calculate_dataset_item_2048(context: EpochContext, index: int) -> bytes:
    """A 2048-bit dataset item: 512-bit items ``4i`` to ``4i + 3``."""
    return b"".join(_dataset_item(context, 4 * index + k) for k in range(4))


def create_epoch_context(epoch_number: int, full: bool = False) -> EpochContext:
    """Build the context of an epoch, with its L1 cache computed."""
    if epoch_number < 0:
        raise ValueError(f"epoch number must not be negative, got {epoch_number}")
    light_cache = build_light_cache(
        calculate_light_cache_num_items(epoch_number), calculate_epoch_seed(epoch_number)
    )
    context = EpochContext(
        epoch_number,
        light_cache,
        calculate_full_dataset_num_items(epoch_number),
        full=full,
    )
    _ = context.l1_cache
    return context


__all__ = [
    "EpochContext",
    "HASH512_SIZE",
    "build_light_cache",
    "calculate_dataset_item_1024",
    "calculate_dataset_item_2048",
    "calculate_dataset_item_512",
    "calculate_epoch_seed",
    "calculate_full_dataset_num_items",
    "calculate_light_cache_num_items",
    "create_epoch_context",
    "find_epoch_number",
    "get_epoch_number",
    "get_full_dataset_size",
    "get_light_cache_size",
]