import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from progpowhash.bits import clz32, mul_hi32, popcount32, rotl32, rotr32
from progpowhash.epoch import EpochContext, build_light_cache, calculate_epoch_seed
from progpowhash.progpow import (
    NUM_LANES,
    NUM_REGS,
    MixRngState,
    hash_mix,
    init_mix,
    keccak_progpow_256,
    keccak_progpow_64,
    progpow_hash,
    random_math,
    random_merge,
    search,
    search_light,
    verify,
)

MASK32 = 0xFFFFFFFF
WORD = st.integers(min_value=0, max_value=MASK32)
HEADER = bytes(range(32))
MAX_BOUNDARY = b"\xff" * 32
ZERO_BOUNDARY = bytes(32)


@pytest.fixture(scope="module")
def light_cache():
    return build_light_cache(17, calculate_epoch_seed(0))


@pytest.fixture(scope="module")
def light_context(light_cache):
    return EpochContext(0, light_cache, 11)


@pytest.fixture(scope="module")
def full_context(light_cache):
    return EpochContext(0, light_cache, 11, full=True)


def _zero_lookup(index):
    return bytes(256)


def test_keccak_progpow_64_is_big_endian_prefix():
    digest = keccak_progpow_256(HEADER, 42, bytes(32))
    assert len(digest) == 32
    assert keccak_progpow_64(HEADER, 42) == int.from_bytes(digest[:8], "big")


def test_keccak_progpow_256_depends_on_inputs():
    base = keccak_progpow_256(HEADER, 1, bytes(32))
    assert base == keccak_progpow_256(HEADER, 1, bytes(32))
    assert base != keccak_progpow_256(HEADER, 2, bytes(32))
    assert base != keccak_progpow_256(HEADER, 1, b"\x01" + bytes(31))


def test_keccak_progpow_nonce_wraps_to_64_bits():
    assert keccak_progpow_64(HEADER, 5 + (1 << 64)) == keccak_progpow_64(HEADER, 5)


@pytest.mark.parametrize("bad", [bytes(31), bytes(33)])
def test_keccak_progpow_rejects_bad_sizes(bad):
    with pytest.raises(ValueError):
        keccak_progpow_256(bad, 0, bytes(32))
    with pytest.raises(ValueError):
        keccak_progpow_256(HEADER, 0, bad)


@pytest.mark.parametrize(
    "case, expected",
    [
        (0, lambda a, b: clz32(a) + clz32(b)),
        (1, lambda a, b: popcount32(a) + popcount32(b)),
        (2, lambda a, b: (a + b) & MASK32),
        (3, lambda a, b: (a * b) & MASK32),
        (4, mul_hi32),
        (5, min),
        (6, rotl32),
        (7, rotr32),
        (8, lambda a, b: a & b),
        (9, lambda a, b: a | b),
        (10, lambda a, b: a ^ b),
    ],
)
@given(a=WORD, b=WORD, k=st.integers(min_value=0, max_value=1000))
def test_random_math_selects_operation(case, expected, a, b, k):
    assert random_math(a, b, k * 11 + case) == expected(a, b)


@given(a=WORD, b=WORD, high=st.integers(min_value=0, max_value=0xFFFF))
def test_random_merge_cases(a, b, high):
    shift = high % 31 + 1
    base = high << 16
    assert random_merge(a, b, base) == (a * 33 + b) & MASK32
    assert random_merge(a, b, base + 1) == ((a ^ b) * 33) & MASK32
    assert random_merge(a, b, base + 2) == rotl32(a, shift) ^ b
    assert random_merge(a, b, base + 3) == rotr32(a, shift) ^ b


@given(a=WORD, b=WORD, sel=WORD)
def test_random_merge_stays_32_bit(a, b, sel):
    assert 0 <= random_merge(a, b, sel) <= MASK32


@given(st.integers(min_value=0, max_value=(1 << 64) - 1))
@settings(max_examples=25)
def test_mix_rng_sequences_are_permutations(seed):
    state = MixRngState(seed)
    dsts = [state.next_dst() for _ in range(NUM_REGS)]
    srcs = [state.next_src() for _ in range(NUM_REGS)]
    assert sorted(dsts) == list(range(NUM_REGS))
    assert sorted(srcs) == list(range(NUM_REGS))
    assert state.next_dst() == dsts[0]
    assert state.next_src() == srcs[0]


def test_mix_rng_is_reproducible():
    a = MixRngState(123)
    b = MixRngState(123)
    assert [a.next_rand() for _ in range(10)] == [b.next_rand() for _ in range(10)]
    assert [a.next_dst() for _ in range(5)] == [b.next_dst() for _ in range(5)]


def test_init_mix_shape_and_determinism():
    mix = init_mix(0x1234_5678_9ABC_DEF0)
    assert len(mix) == NUM_LANES
    assert all(len(lane) == NUM_REGS for lane in mix)
    assert all(0 <= v <= MASK32 for lane in mix for v in lane)
    assert mix == init_mix(0x1234_5678_9ABC_DEF0)
    assert len({tuple(lane) for lane in mix}) == NUM_LANES


def test_hash_mix_depends_on_period(light_context):
    first = hash_mix(light_context, 0, 99, _zero_lookup)
    assert len(first) == 32
    assert hash_mix(light_context, 49, 99, _zero_lookup) == first
    assert hash_mix(light_context, 50, 99, _zero_lookup) != first


def test_hash_mix_depends_on_seed(light_context):
    a = hash_mix(light_context, 0, 1, _zero_lookup)
    b = hash_mix(light_context, 0, 2, _zero_lookup)
    assert a == hash_mix(light_context, 0, 1, _zero_lookup)
    assert a != b


def test_hash_mix_rejects_tiny_dataset(light_cache):
    context = EpochContext(0, light_cache, 1)
    with pytest.raises(ValueError):
        hash_mix(context, 0, 0, _zero_lookup)


def test_hash_mix_rejects_negative_block(light_context):
    with pytest.raises(ValueError):
        hash_mix(light_context, -1, 0, _zero_lookup)


def test_full_and_light_hash_agree(light_context, full_context):
    full = progpow_hash(full_context, 30, HEADER, 7)
    light = progpow_hash(light_context, 30, HEADER, 7)
    assert full == light
    assert len(full.final_hash) == 32 and len(full.mix_hash) == 32


def test_verify_accepts_computed_result(full_context, light_context):
    result = progpow_hash(full_context, 30, HEADER, 7)
    assert verify(light_context, 30, HEADER, result.mix_hash, 7, MAX_BOUNDARY) is True


def test_verify_rejects_boundary_and_wrong_mix(full_context, light_context):
    result = progpow_hash(full_context, 30, HEADER, 7)
    assert verify(light_context, 30, HEADER, result.mix_hash, 7, ZERO_BOUNDARY) is False
    wrong_mix = bytes(b ^ 0xFF for b in result.mix_hash)
    assert verify(light_context, 30, HEADER, wrong_mix, 7, MAX_BOUNDARY) is False


def test_search_finds_first_nonce_with_max_boundary(full_context):
    found = search(full_context, 30, HEADER, MAX_BOUNDARY, 100, 5)
    expected = progpow_hash(full_context, 30, HEADER, 100)
    assert found.solution_found is True
    assert found.nonce == 100
    assert found.final_hash == expected.final_hash
    assert found.mix_hash == expected.mix_hash


def test_search_without_solution(full_context):
    found = search(full_context, 30, HEADER, ZERO_BOUNDARY, 0, 2)
    assert found.solution_found is False
    assert found.nonce == 0
    assert found.final_hash == bytes(32)


def test_search_light_finds_first_nonce(light_context, full_context):
    found = search_light(light_context, 30, HEADER, MAX_BOUNDARY, 3, 1)
    assert found.solution_found is True
    assert found.nonce == 3
    assert found.mix_hash == progpow_hash(full_context, 30, HEADER, 3).mix_hash


def test_search_needs_full_context(light_context):
    with pytest.raises(ValueError):
        search(light_context, 0, HEADER, MAX_BOUNDARY, 0, 1)


def test_search_rejects_negative_iterations(full_context):
    with pytest.raises(ValueError):
        search(full_context, 0, HEADER, MAX_BOUNDARY, 0, -1)


def test_zero_iterations_finds_nothing(light_context):
    found = search_light(light_context, 0, HEADER, MAX_BOUNDARY, 0, 0)
    assert found.solution_found is False