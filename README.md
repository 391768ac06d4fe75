# progpowhash

Pure Python implementations of the Ethash and ProgPoW proof-of-work hashes,
together with the building blocks they rest on. The package has no runtime
dependencies.

Hashes are passed around as `bytes`: 32 bytes for 256-bit values, 64 bytes for
512-bit values, 128 and 256 bytes for dataset items. Nonces are plain integers
taken modulo 2**64. Functions that take a 256-bit hash raise `ValueError` when
given a value of another length.

## Modules

- `progpowhash.bits`: 32-bit helpers `rotl32`, `rotr32`, `clz32`, `popcount32`,
  `mul_hi32`, and the FNV steps `fnv1` and `fnv1a` (with `FNV_PRIME` and
  `FNV_OFFSET_BASIS`).
- `progpowhash.primes`: `find_largest_prime(upper_bound)` returns the largest
  prime not greater than the bound, or 0 when the bound is below 2.
- `progpowhash.keccak`: the permutations `keccakf1600(state)` and
  `keccakf800(state)`, each taking 25 lanes and returning the new lanes as a list,
  and the original-padding (pre-SHA-3) hashes `keccak256(data)` and
  `keccak512(data)`.
- `progpowhash.hashes`: `words32`, `words64`, `from_words32`, `from_words64` to
  view hashes as little-endian words and back; `is_less_or_equal` compares two
  hashes as big-endian numbers, `is_equal` compares their bytes. `VERSION` holds
  the library version string.
- `progpowhash.epoch`: epoch parameters (`calculate_epoch_seed`,
  `calculate_light_cache_num_items`, `calculate_full_dataset_num_items`,
  `get_epoch_number`, `get_light_cache_size`, `get_full_dataset_size`),
  `find_epoch_number(seed)` (returns -1 when no epoch below 30000 matches),
  `build_light_cache`, the dataset item functions
  `calculate_dataset_item_512/1024/2048`, and `EpochContext`. A context holds the
  light cache, the dataset size and a lazily computed 16 KiB `l1_cache`; a context
  made with `full=True` keeps every 1024-bit dataset item it computes.
  `create_epoch_context(epoch_number, full)` builds one.
- `progpowhash.ethash`: `ethash_hash`, `verify_final_hash`, `verify`,
  `search_light` and `search`, returning `Result` and `SearchResult` values.
  `search` requires a full context and raises `ValueError` otherwise.
- `progpowhash.progpow`: `progpow_hash`, `verify`, `search_light` and `search`,
  plus the pieces they are made of: `keccak_progpow_256`, `keccak_progpow_64`,
  `MixRngState`, `random_math`, `random_merge`, `init_mix` and `hash_mix`.
- `progpowhash.managed`: `get_global_epoch_context` and
  `get_global_epoch_context_full` keep one shared context of each kind, rebuilt
  when another epoch is asked for, with a per-thread reference to it.
- `progpowhash.kiss99`: `Kiss99`, the KISS pseudo-random generator of 1999, as an
  endless iterator of 32-bit words.

## Installation

```
pip install .
```

## Usage

```python
from progpowhash.keccak import keccak256
from progpowhash.epoch import get_epoch_number
from progpowhash.managed import get_global_epoch_context
from progpowhash import progpow

print(keccak256(b"").hex())

block_number = 30000
context = get_global_epoch_context(get_epoch_number(block_number))

header_hash = bytes(32)
nonce = 0x0123456789ABCDEF
result = progpow.progpow_hash(context, block_number, header_hash, nonce)
print(result.final_hash.hex(), result.mix_hash.hex())

boundary = b"\xff" * 32
assert progpow.verify(context, block_number, header_hash, result.mix_hash, nonce, boundary)
```

Building a real epoch context computes a light cache of several megabytes, and
every dataset item needs hundreds of Keccak calls, so in pure Python this takes a
long time. For experiments a small context can be made by hand:

```python
from progpowhash.epoch import EpochContext, build_light_cache, calculate_epoch_seed
from progpowhash import ethash

context = EpochContext(0, build_light_cache(17, calculate_epoch_seed(0)), 8, full=True)
found = ethash.search(context, bytes(32), b"\x0f" + b"\xff" * 31, 0, 100)
print(found.solution_found, found.nonce)
```

## What it does not do

This is a hashing library. It has no command-line program, does not mine, does
not drive CPUs or GPUs, does not talk to pools, and keeps nothing on disk. It is
meant for verifying results and for reference.

## Running the tests

```
pip install .[test]
pytest
```