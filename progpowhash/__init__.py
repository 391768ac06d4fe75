"""Ethash and ProgPoW proof-of-work hashing, Keccak and KISS99, in pure Python."""

__version__ = "0.4.3"

__all__ = [
    "bits",
    "primes",
    "keccak",
    "hashes",
    "epoch",
    "ethash",
    "managed",
    "kiss99",
    "progpow",
]