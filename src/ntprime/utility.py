# -----------------------------------------------------------------------------
#  Utility functions
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
import random
from numbers import Integral

import gmpy2


class UserInputError(Exception):
    pass


class InvalidInputError(UserInputError, ValueError):
    """Argument outside the domain an operation is defined on."""


class RandomnessError(RuntimeError):
    """The random source could not produce a value."""


class ProfileError(UserInputError):
    pass


_SYSTEM_RANDOM = random.SystemRandom()


def require_int(value: object, label: str = "n") -> int:
    """Return value as a plain int, rejecting bools, floats and strings."""
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidInputError(f"{label} must be an integer, got {type(value).__name__}.")
    return int(value)


def require_non_negative(value: object, label: str = "n") -> int:
    v = require_int(value, label)
    if v < 0:
        raise InvalidInputError(f"{label} must be non-negative, got {v}.")
    return v


def dec_digits(n: int) -> int:
    """Exact decimal digit count without str(); handles n >= 0."""
    n = abs(n)
    if n == 0:
        return 1
    # floor(log10(n)) ~= floor(bitlen*log10(2))
    bl = n.bit_length()
    est = int((bl * 30103) // 100000)
    # bring into correct decade with at most a couple of steps
    p10 = 10 ** est
    if n < p10:
        while n < p10:
            est -= 1
            p10 //= 10
    else:
        p10 *= 10
        while n >= p10:
            est += 1
            p10 *= 10
    return est + 1


def isqrt(n: int) -> int:
    return int(gmpy2.isqrt(n))


def isqrt_ceil(n: int) -> int:
    """Smallest r with r*r >= n, for n >= 0."""
    r = isqrt(n)
    return r if r * r == n else r + 1


def ln_floor(n: int) -> int:
    """⌊ln n⌋ for n >= 1. math.log accepts ints of any size."""
    if n < 1:
        raise InvalidInputError(f"logarithm undefined for {n}.")
    return int(math.floor(math.log(n)))


def random_int_in_range(low: int, high: int, rng: random.Random | None = None) -> int:
    """
    Uniform integer with low <= a < high.

    The default source is the OS entropy pool. A failing source raises
    RandomnessError; callers must not fall back to a fixed value.
    """
    if high <= low:
        raise InvalidInputError(f"empty range [{low}, {high}).")
    src = rng if rng is not None else _SYSTEM_RANDOM
    try:
        return src.randrange(low, high)
    except (NotImplementedError, OSError) as e:
        raise RandomnessError(f"random source failed: {e.__class__.__name__}: {e}") from e


def random_sample(population: list, k: int, rng: random.Random | None = None) -> list:
    """k distinct items drawn uniformly; all of them when k >= len(population)."""
    src = rng if rng is not None else _SYSTEM_RANDOM
    k = min(k, len(population))
    try:
        return src.sample(population, k)
    except (NotImplementedError, OSError) as e:
        raise RandomnessError(f"random source failed: {e.__class__.__name__}: {e}") from e


def sieve_primes(limit: int) -> list[int]:
    """All primes <= limit, Eratosthenes over a bytearray."""
    if limit < 2:
        return []
    sieve = bytearray(b"\x01") * (limit + 1)
    sieve[0:2] = b"\x00\x00"
    p = 2
    while p * p <= limit:
        if sieve[p]:
            sieve[p * p:limit + 1:p] = b"\x00" * (((limit - p * p) // p) + 1)
        p += 1
    return [q for q in range(2, limit + 1) if sieve[q]]


def typename(v: object) -> str:
    return type(v).__name__


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    out: dict[str, object] = {}
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out
