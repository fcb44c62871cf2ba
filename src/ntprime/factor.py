# -----------------------------------------------------------------------------
#  factor.py
#  Incremental factorization over a caller-owned cache of small primes
# -----------------------------------------------------------------------------

from __future__ import annotations

from bisect import bisect_right
from collections import Counter
from collections.abc import Iterable, Iterator
from functools import partial

from ntprime.context import Factorization
from ntprime.parallel import parallel_filter
from ntprime.primality.miller_rabin import miller_rabin_primality, resolve_trials
from ntprime.primality.trial_division import is_prime_trial_division
from ntprime.runtime import CFG, trace
from ntprime.utility import InvalidInputError, isqrt, isqrt_ceil, require_int, sieve_primes

# adopted caches are checked against a sieve up to this value
AUDIT_SIEVE_LIMIT = 10**7


class PrimeCache:
    """
    Ascending, duplicate-free list of primes starting at 2, plus the largest
    integer it is known to cover: every prime <= covered_to is in the list.

    The cache only grows. Pass the same instance to every factor() call of
    a session (e.g. one range scan) so the prime search is done once.
    A plain list given to the constructor is adopted, not copied, and is
    updated in place by extend(). Every entry must be prime; a list with
    gaps is accepted but only counts as covering up to its first missing
    prime. Auditing a large list costs a sieve, so long-running callers
    should hold on to the PrimeCache rather than pass the raw list again.
    """

    def __init__(self, primes: Iterable[int] | None = None):
        if primes is None:
            self._primes: list[int] = [2]
            self._covered_to = 2
            return
        lst = primes if isinstance(primes, list) else list(primes)
        if not lst:
            lst.append(2)
        _validate(lst)
        self._covered_to = _audit(lst)
        self._primes = lst

    # --- read access ---------------------------------------------------------

    def __len__(self) -> int:
        return len(self._primes)

    def __iter__(self) -> Iterator[int]:
        return iter(self._primes)

    def __getitem__(self, i):
        return self._primes[i]

    def __contains__(self, p: object) -> bool:
        if not isinstance(p, int):
            return False
        i = bisect_right(self._primes, p)
        return i > 0 and self._primes[i - 1] == p

    def __repr__(self) -> str:
        return f"PrimeCache(len={len(self._primes)}, max={self._primes[-1]}, covered_to={self._covered_to})"

    @property
    def max(self) -> int:
        return self._primes[-1]

    @property
    def covered_to(self) -> int:
        return self._covered_to

    @property
    def primes(self) -> tuple[int, ...]:
        return tuple(self._primes)

    def primes_up_to(self, x: int) -> list[int]:
        return self._primes[:bisect_right(self._primes, x)]

    def contains_up_to(self, n: int) -> bool:
        """True when every prime <= n is already cached."""
        return n <= self._covered_to

    # --- growth ----------------------------------------------------------------

    def extend(self, up_to: int, *, trials: int | None = None) -> list[int]:
        """
        Test every integer in (covered_to, up_to] and append the primes.
        Returns the newly added primes; a no-op when already covered.

        Candidates up to FACTOR.TRIAL_DIVISION_LIMIT are proven by trial
        division, larger ones accepted by Miller–Rabin.
        """
        up_to = require_int(up_to, "up_to")
        if self.contains_up_to(up_to):
            return []

        lo = self._covered_to + 1
        trace("factor", f"extending prime cache {lo}..{up_to}")
        candidates = [c for c in range(lo, up_to + 1) if c in (2, 3) or c % 6 in (1, 5)]

        trials = resolve_trials(trials)
        cut = bisect_right(candidates, _trial_division_limit())
        found = parallel_filter(is_prime_trial_division, candidates[:cut])
        if cut < len(candidates):
            found += parallel_filter(partial(miller_rabin_primality, trials=trials), candidates[cut:])

        # ordering comes from the sort, not from worker completion
        self._primes[:] = sorted(set(self._primes).union(found))
        self._covered_to = up_to
        return sorted(found)


def _validate(primes: list[int]) -> None:
    prev = None
    for p in primes:
        p = require_int(p, "cached prime")
        if p < 2:
            raise InvalidInputError(f"prime cache holds {p}, which is below 2.")
        if prev is not None and p <= prev:
            raise InvalidInputError(f"prime cache must be strictly ascending ({prev} before {p}).")
        prev = p
    if primes[0] != 2:
        raise InvalidInputError(f"prime cache must start at 2, not {primes[0]}.")


def _trial_division_limit() -> int:
    return int(CFG("FACTOR.TRIAL_DIVISION_LIMIT", 10**12))


def _audit(primes: list[int]) -> int:
    """
    Reject non-prime entries of a validated list and return the largest x
    such that every prime <= x is present.
    """
    bound = min(primes[-1], AUDIT_SIEVE_LIMIT)
    reference = sieve_primes(bound)
    head = bisect_right(primes, bound)
    known = set(reference)
    for p in primes[:head]:
        if p not in known:
            raise InvalidInputError(f"prime cache holds {p}, which is not prime.")

    # head is an ascending subset of reference; the first mismatch is a gap
    covered = bound
    for i, p in enumerate(reference):
        if i >= head or primes[i] != p:
            covered = p - 1
            break

    limit = _trial_division_limit()
    trials = resolve_trials(None)
    for p in primes[head:]:
        ok = is_prime_trial_division(p) if p <= limit else miller_rabin_primality(p, trials)
        if not ok:
            raise InvalidInputError(f"prime cache holds {p}, which is not prime.")
    if covered < primes[-1]:
        trace("factor", f"prime cache is complete only up to {covered}")
    return covered


def _divides(m: int, p: int) -> bool:
    return m % p == 0


def as_cache(cache: PrimeCache | list[int] | None) -> PrimeCache:
    if cache is None:
        return PrimeCache()
    if isinstance(cache, PrimeCache):
        return cache
    if isinstance(cache, list):
        return PrimeCache(cache)
    raise InvalidInputError(f"cache must be a PrimeCache or a list of primes, got {type(cache).__name__}.")


def factor(n: int, cache: PrimeCache | list[int] | None = None, *,
           trials: int | None = None) -> Factorization:
    """
    Prime factorization of n >= 2 as (prime, multiplicity) pairs.

    Steps:
      1. If n is (probably) prime, return [(n, 1)].
      2. Make sure the cache covers every prime up to √n, growing it when
         needed. This is the only side effect and the reason the cache is
         caller-owned: a range scan pays for each prime once.
      3. Passes: collect the cached primes dividing the remainder, divide
         the remainder by their product; stop once the remainder is 1 or
         itself prime. Every pass at least halves the remainder, so there
         are at most log2(n) passes.
      4. Count multiplicities and sort by prime.

    A plain list passed as `cache` is grown in place.
    """
    n = require_int(n)
    if n < 2:
        raise InvalidInputError(f"factorization needs n >= 2, got {n}.")
    trials = resolve_trials(trials)
    pc = as_cache(cache)

    if miller_rabin_primality(n, trials):
        return Factorization(n, ((n, 1),))

    root = isqrt(n)
    if not pc.contains_up_to(root):
        pc.extend(isqrt_ceil(n) + 1, trials=trials)

    def final_prime(m: int) -> bool:
        if pc.contains_up_to(m):
            return m in pc
        return miller_rabin_primality(m, trials)

    found: list[int] = []
    remaining = n
    candidates = pc.primes_up_to(root)
    max_passes = n.bit_length()
    passes = 0

    while remaining > 1:
        if passes >= max_passes:
            raise ArithmeticError(f"factorization of {n} made no progress after {passes} passes")
        divisors = parallel_filter(partial(_divides, remaining), candidates)
        if not divisors:
            raise ArithmeticError(f"no cached prime divides {remaining}; cache does not cover √{n}")
        found.extend(divisors)
        d = 1
        for p in divisors:
            d *= p
        remaining //= d
        passes += 1
        # only primes that divided once can divide again
        candidates = divisors
        if remaining > 1 and final_prime(remaining):
            found.append(remaining)
            break

    counts = Counter(found)
    result = Factorization(n, tuple(sorted(counts.items())))
    if result.product != n:
        raise ArithmeticError(f"factors {result} do not multiply back to {n}")
    trace("factor", f"{n} = {result} in {passes} pass(es)")
    return result


def is_semiprime_pq(n: int, cache: PrimeCache | list[int] | None = None) -> tuple[bool, list[tuple[int, int]]]:
    """(True, [(p, 1), (q, 1)]) when n = p·q with distinct primes, else (False, [])."""
    n = require_int(n)
    if n < 2:
        return False, []
    fac = factor(n, cache)
    if len(fac) == 2 and fac.is_squarefree:
        return True, list(fac)
    return False, []
