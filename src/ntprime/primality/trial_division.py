# -----------------------------------------------------------------------------
#  trial_division.py
#  Deterministic primality by trial division up to ⌈√n⌉
# -----------------------------------------------------------------------------

from __future__ import annotations

from ntprime.parallel import parallel_find_first, should_parallelize, worker_count
from ntprime.registry import PrimalityMethod, primality_test
from ntprime.utility import InvalidInputError, isqrt, require_int


def _small_case(n: int) -> bool | None:
    """Verdict for n <= 3 and multiples of 2 or 3, else None."""
    if n < 0:
        raise InvalidInputError(f"primality is not defined for negative n ({n}).")
    if n <= 3:
        return n > 1
    if n % 2 == 0 or n % 3 == 0:
        return False
    return None


def _upper_bound(n: int) -> int:
    return isqrt(n) + 1  # +1 covers the ceiling of √n


def _find_divisor(n: int, lo: int, hi: int) -> int | None:
    """
    Smallest divisor of n among 6k±1 candidates in [lo, hi], where lo ≡ 5 (mod 6).
    """
    i = lo
    while i <= hi:
        if n % i == 0:
            return i
        if i + 2 <= hi and n % (i + 2) == 0:
            return i + 2
        i += 6
    return None


@primality_test(
    method=PrimalityMethod.TRIAL_DIVISION,
    label="Trial division",
    description="Divides by 2, 3 and every 6k±1 up to ⌈√n⌉; stops at the first divisor.",
)
def is_prime_trial_division(n: int) -> bool:
    n = require_int(n)
    small = _small_case(n)
    if small is not None:
        return small
    return _find_divisor(n, 5, _upper_bound(n)) is None


@primality_test(
    method=PrimalityMethod.TRIAL_DIVISION_PARALLEL,
    label="Trial division (parallel)",
    description="Same candidates as trial division, split into blocks searched by a worker pool.",
)
def is_prime_trial_division_parallel(n: int) -> bool:
    """
    Parallel variant: the candidate range is cut into blocks aligned on 6,
    one task per block, and the first divisor reported by any worker decides.
    Small inputs run the sequential scan in-process.
    """
    n = require_int(n)
    small = _small_case(n)
    if small is not None:
        return small

    hi = _upper_bound(n)
    candidates = max(0, (hi - 5) // 3 + 1)
    if not should_parallelize(candidates):
        return _find_divisor(n, 5, hi) is None

    # ~4 blocks per worker so early finishers pick up more work
    blocks = worker_count() * 4
    step = max(6, ((hi - 5) // blocks // 6 + 1) * 6)
    arg_sets = [(n, lo, min(lo + step - 1, hi)) for lo in range(5, hi + 1, step)]
    return parallel_find_first(_find_divisor, arg_sets) is None


def next_prime(n: int) -> int:
    """Smallest prime >= n (2 for every n <= 2)."""
    n = require_int(n)
    if n <= 2:
        return 2
    m = n if n % 2 else n + 1
    while not is_prime_trial_division_parallel(m):
        m += 2
    return m
