# tests/test_aks.py
from __future__ import annotations

import pytest
from sympy import isprime

from ntprime.primality import aks as aks_mod
from ntprime.primality.aks import (
    AksGate,
    Verdict,
    aks,
    aks_report,
    find_r,
    is_perfect_power,
    is_prime_aks,
    order_bound,
    r_search_limit,
)
from ntprime.utility import InvalidInputError

GATES = [
    (0, Verdict.COMPOSITE, AksGate.TRIVIAL),
    (1, Verdict.COMPOSITE, AksGate.TRIVIAL),
    (2, Verdict.PRIME, AksGate.SMALL_N),
    (3, Verdict.PRIME, AksGate.SMALL_N),
    (4, Verdict.COMPOSITE, AksGate.PERFECT_POWER),
    (6, Verdict.COMPOSITE, AksGate.SMALL_FACTOR),
    (49, Verdict.COMPOSITE, AksGate.PERFECT_POWER),
    (243, Verdict.COMPOSITE, AksGate.PERFECT_POWER),
    (31, Verdict.PRIME, AksGate.POLYNOMIAL),
    (1009, Verdict.PRIME, AksGate.POLYNOMIAL),
]


@pytest.mark.parametrize("n,verdict,gate", GATES, ids=[str(n) for n, _, _ in GATES])
def test_deciding_gate(n, verdict, gate):
    rep = aks_report(n)
    assert rep.verdict is verdict
    assert rep.gate is gate
    assert aks(n) is verdict


def test_perfect_power_report_names_the_base():
    rep = aks_report(49)
    assert rep.witness == 7


def test_order_search_for_31():
    rep = aks_report(31)
    assert rep.r == 17
    assert rep.is_prime


def test_negative_input_raises():
    with pytest.raises(InvalidInputError):
        aks(-31)


def test_agrees_with_sympy_on_small_range():
    for n in range(0, 600):
        assert is_prime_aks(n) == isprime(n), n


@pytest.mark.parametrize(
    "n",
    [7919, 65537, 104729, 561, 1105, 7917, 65535, 104727, 2**13 - 1, 3 * 5 * 7 * 11 * 13 * 17],
    ids=str,
)
def test_selected_numbers(n):
    assert (aks(n) is Verdict.PRIME) == isprime(n)


@pytest.mark.parametrize(
    "n,expected",
    [
        (1, (False, None, None)),
        (12, (False, None, None)),
        (8, (True, 2, 3)),
        (2**64, (True, 2, 64)),
        (3**5, (True, 3, 5)),
        (10**6, (True, 1000, 2)),
        (7**13, (True, 7, 13)),
        (3**6, (True, 27, 2)),
        (2**61 - 1, (False, None, None)),
    ],
    ids=["1", "12", "8", "2^64", "3^5", "10^6", "7^13", "3^6", "M61"],
)
def test_is_perfect_power(n, expected):
    assert is_perfect_power(n) == expected


@pytest.mark.parametrize("n", [5, 31, 97, 1009, 65537, 10**9 + 7, 2**61 - 1], ids=str)
def test_find_r_order_exceeds_bound(n):
    r = find_r(n)
    assert 2 <= r <= r_search_limit(n)
    x = 1
    for _ in range(order_bound(n)):
        x = x * n % r
        assert x not in (0, 1)


def test_find_r_raises_past_search_limit(monkeypatch):
    monkeypatch.setattr(aks_mod, "r_search_limit", lambda n: 2)
    with pytest.raises(ArithmeticError):
        find_r(31)
