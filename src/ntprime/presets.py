# -----------------------------------------------------------------------------
#  presets.py
#  Range searches built from per-number calls into the core
# -----------------------------------------------------------------------------

from __future__ import annotations

import random
from functools import partial

from ntprime.context import Factorization
from ntprime.factor import PrimeCache, as_cache, factor, is_semiprime_pq
from ntprime.fmt import abbr_int_fast
from ntprime.parallel import parallel_map
from ntprime.progress import Progress
from ntprime.primality.miller_rabin import gcd_test, miller_rabin_primality, resolve_trials
from ntprime.registry import PrimalityMethod, get_test
from ntprime.runtime import trace
from ntprime.utility import InvalidInputError, random_sample, require_int


def _check_range(start: int, end: int) -> tuple[int, int]:
    start = require_int(start, "start")
    end = require_int(end, "end")
    if start > end:
        raise InvalidInputError(f"empty range: start={start} > end={end}.")
    return start, end


def find_primes_in_range(start: int, end: int,
                         method: PrimalityMethod | str = PrimalityMethod.MILLER_RABIN
                         ) -> tuple[list[int], list[int]]:
    """
    Split [start, end] into (primes, composites), both ascending.
    Values below 2 count as composites.
    """
    start, end = _check_range(start, end)
    kind = PrimalityMethod.parse(method)
    test = get_test(kind)
    if kind is PrimalityMethod.MILLER_RABIN:
        # workers may not share this runtime; fix the trial count here
        test = partial(miller_rabin_primality, trials=resolve_trials(None))
    low = list(range(start, min(end, 1) + 1))
    candidates = list(range(max(start, 2), end + 1))

    # the parallel trial-division variant already runs its own pool
    if kind is PrimalityMethod.TRIAL_DIVISION_PARALLEL:
        verdicts = [test(n) for n in candidates]
    else:
        verdicts = parallel_map(test, candidates)

    primes = [n for n, ok in zip(candidates, verdicts) if ok]
    composites = low + [n for n, ok in zip(candidates, verdicts) if not ok]
    trace("range", f"{start}..{end}: {len(primes)} primes, {len(composites)} composites")
    return primes, composites


def prime_factors_in_range(start: int, end: int, cache: PrimeCache | list[int] | None = None,
                           *, progress: bool = False) -> list[tuple[int, Factorization]]:
    """
    Factor every n >= 2 in [start, end] with one shared prime cache, so
    each prime up to √end is found once for the whole scan.
    """
    start, end = _check_range(start, end)
    pc = as_cache(cache)
    out: list[tuple[int, Factorization]] = []
    first = max(start, 2)
    with Progress(end - first + 1, enabled=progress) as bar:
        for n in range(first, end + 1):
            out.append((n, factor(n, pc)))
            bar.update(n - first + 1, abbr_int_fast(n))
    return out


def composites_pq_in_range(start: int, end: int, cache: PrimeCache | list[int] | None = None,
                           *, progress: bool = False) -> list[tuple[int, list[tuple[int, int]]]]:
    """Numbers n = p·q (distinct primes) in [start, end] with their factors."""
    start, end = _check_range(start, end)
    pc = as_cache(cache)
    out = []
    first = max(start, 2)
    with Progress(end - first + 1, enabled=progress) as bar:
        for n in range(first, end + 1):
            ok, pairs = is_semiprime_pq(n, pc)
            if ok:
                out.append((n, pairs))
            bar.update(n - first + 1, abbr_int_fast(n))
    return out


def gcd_test_range(start: int, end: int, picks: int = 3, trials: int = 10, *,
                   cache: PrimeCache | list[int] | None = None,
                   rng: random.Random | None = None
                   ) -> list[tuple[int, list[tuple[int, int]], list[tuple[int, int]]]]:
    """
    Pick `picks` random p·q composites from [start, end] and run
    gcd_test(n, trials) on each.

    Rows are (n, [(p, 1), (q, 1)], [(a, gcd(a, n)), ...]) in ascending n;
    fewer rows when the range holds fewer such composites.
    """
    picks = require_int(picks, "picks")
    if picks < 1:
        raise InvalidInputError(f"picks must be at least 1, got {picks}.")
    pq = composites_pq_in_range(start, end, cache)
    chosen = sorted(random_sample(pq, picks, rng))
    return [(n, pairs, gcd_test(n, trials, rng=rng)) for n, pairs in chosen]
