# tests/test_factor.py
from __future__ import annotations

import importlib

import pytest
from sympy import factorint

from ntprime.context import Factorization
from ntprime.factor import PrimeCache, factor, is_semiprime_pq
from ntprime.utility import InvalidInputError

KNOWN = [
    (2, [(2, 1)]),
    (4, [(2, 2)]),
    (12, [(2, 2), (3, 1)]),
    (25, [(5, 2)]),
    (97, [(97, 1)]),
    (100, [(2, 2), (5, 2)]),
    (1363, [(29, 1), (47, 1)]),
    (1024, [(2, 10)]),
    (510510, [(2, 1), (3, 1), (5, 1), (7, 1), (11, 1), (13, 1), (17, 1)]),
    (2 * 999_983, [(2, 1), (999_983, 1)]),
    (9973 * 10007, [(9973, 1), (10007, 1)]),
    (2**5 * 3**3 * 101**2, [(2, 5), (3, 3), (101, 2)]),
]


@pytest.mark.parametrize("n,expected", KNOWN, ids=[str(n) for n, _ in KNOWN])
def test_known_factorizations(n, expected):
    got = factor(n)
    assert got == expected
    assert got.product == n


def test_agrees_with_sympy_using_one_cache(shared_cache):
    for n in range(2, 5000):
        got = factor(n, shared_cache)
        assert got.as_dict() == factorint(n), n


def test_result_is_sorted_with_positive_multiplicities():
    fac = factor(2**3 * 7 * 13**2 * 9973)
    primes = [p for p, _ in fac]
    assert primes == sorted(primes)
    assert all(e >= 1 for _, e in fac)
    assert str(fac) == "2³ × 7 × 13² × 9973"


def test_plain_list_cache_grows_in_place():
    primes = [2]
    factor(100, primes)
    assert primes[:4] == [2, 3, 5, 7]
    assert primes == sorted(set(primes))


def test_second_call_does_not_touch_sufficient_cache():
    cache = PrimeCache()
    first = factor(9991, cache)          # 97 * 103
    snapshot = cache.primes
    second = factor(9991, cache)
    assert first == second
    assert cache.primes == snapshot


def test_cache_too_small_near_square_root():
    # with [2, 3] a "within 2 of √n" check would accept the cache for 25
    cache = PrimeCache([2, 3])
    assert factor(25, cache) == [(5, 2)]
    assert 5 in cache


def test_prime_input_skips_cache_growth():
    cache = PrimeCache()
    assert factor(1_000_003, cache) == [(1_000_003, 1)]
    assert cache.primes == (2,)


def test_cache_extension_with_pool(force_pool):
    cache = PrimeCache()
    n = 1009 * 1013 * 2
    assert factor(n, cache) == [(2, 1), (1009, 1), (1013, 1)]
    assert cache.covered_to >= 1423


def test_large_cofactor_recognised_as_prime():
    p = 1_000_003
    assert factor(6 * p) == [(2, 1), (3, 1), (p, 1)]


@pytest.mark.parametrize("n", [1, 0, -12], ids=str)
def test_rejects_n_below_two(n):
    with pytest.raises(InvalidInputError):
        factor(n)


@pytest.mark.parametrize(
    "primes",
    [[3, 5], [2, 5, 3], [2, 3, 3], [1, 2], [2, 4.0], [2, 3, 9]],
    ids=["no-two", "unsorted", "duplicate", "below-two", "float", "composite"],
)
def test_malformed_cache_rejected(primes):
    with pytest.raises(InvalidInputError):
        PrimeCache(primes)


def test_bad_cache_type():
    with pytest.raises(InvalidInputError):
        factor(100, (2, 3))


# --- PrimeCache ---------------------------------------------------------------------

def test_extend_returns_new_primes_only():
    cache = PrimeCache([2, 3, 5, 7])
    assert cache.extend(30) == [11, 13, 17, 19, 23, 29]
    assert cache.extend(30) == []
    assert cache.contains_up_to(30)
    assert not cache.contains_up_to(31)
    assert cache.max == 29
    assert len(cache) == 10


def test_extend_uses_miller_rabin_above_limit(runtime_settings):
    runtime_settings({"FACTOR": {"TRIAL_DIVISION_LIMIT": 10}})
    cache = PrimeCache()
    cache.extend(60, trials=20)
    assert list(cache) == [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59]


def test_gappy_cache_covers_only_its_complete_prefix():
    cache = PrimeCache([2, 7])
    assert cache.covered_to == 2
    assert factor(15, cache) == [(3, 1), (5, 1)]
    assert cache.primes == (2, 3, 5, 7)


def test_adopted_list_with_gap_is_filled_in_place():
    primes = [2, 3, 11]
    assert factor(35, primes) == [(5, 1), (7, 1)]
    assert primes == [2, 3, 5, 7, 11]


def test_composite_entry_rejected():
    with pytest.raises(InvalidInputError, match="not prime"):
        factor(16, PrimeCache([2, 4]))


def test_entries_past_the_sieve_are_checked_one_by_one(monkeypatch):
    # the package namespace re-exports factor(), so fetch the module itself
    monkeypatch.setattr(importlib.import_module("ntprime.factor"), "AUDIT_SIEVE_LIMIT", 10)
    assert PrimeCache([2, 3, 5, 7, 11, 13]).covered_to == 10
    with pytest.raises(InvalidInputError):
        PrimeCache([2, 3, 5, 7, 11, 15])


def test_membership_and_slices():
    cache = PrimeCache([2, 3, 5, 7, 11])
    assert 7 in cache and 9 not in cache and "7" not in cache
    assert cache.primes_up_to(6) == [2, 3, 5]
    assert cache[-1] == 11


# --- p·q form -----------------------------------------------------------------------

@pytest.mark.parametrize(
    "n,expected",
    [
        (15, (True, [(3, 1), (5, 1)])),
        (1363, (True, [(29, 1), (47, 1)])),
        (49, (False, [])),
        (30, (False, [])),
        (13, (False, [])),
        (1, (False, [])),
    ],
    ids=str,
)
def test_is_semiprime_pq(n, expected):
    assert is_semiprime_pq(n) == expected


def test_factorization_model():
    fac = Factorization(360, ((2, 3), (3, 2), (5, 1)))
    assert fac.omega == 3
    assert fac.big_omega == 6
    assert not fac.is_squarefree
    assert not fac.is_prime
    assert fac.primes == (2, 3, 5)
    assert Factorization(7, ((7, 1),)).is_prime


def test_prepopulated_cache_up_to_square_root():
    cache = PrimeCache([p for p in range(2, 100) if all(p % d for d in range(2, p))])
    assert factor(9991, cache) == [(97, 1), (103, 1)]
    assert factor(97 * 97, cache) == [(97, 2)]


def test_cache_trials_are_resolved_before_the_pool_starts(spawned_pool):
    spawned_pool(MILLER_RABIN={"TRIALS": 0}, FACTOR={"TRIAL_DIVISION_LIMIT": 10})
    with pytest.raises(InvalidInputError):
        PrimeCache().extend(60)


def test_cache_growth_with_spawned_workers(spawned_pool):
    spawned_pool(FACTOR={"TRIAL_DIVISION_LIMIT": 10})
    pc = PrimeCache()
    pc.extend(60)
    assert pc.primes == (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59)
