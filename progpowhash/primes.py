"""Search for the largest prime below a bound."""

from math import isqrt


def _is_odd_prime(number: int) -> bool:
    """Primality test for odd numbers greater than 2."""
    return all(number % d for d in range(3, isqrt(number) + 1, 2))


def find_largest_prime(upper_bound: int) -> int:
    """Return the largest prime ``p <= upper_bound``, or 0 when ``upper_bound <= 1``."""
    if upper_bound < 2:
        return 0
    if upper_bound == 2:
        return 2
    n = upper_bound if upper_bound % 2 else upper_bound - 1
    while not _is_odd_prime(n):
        n -= 2
    return n