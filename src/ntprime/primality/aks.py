# -----------------------------------------------------------------------------
#  aks.py
#  Agrawal–Kayal–Saxena deterministic primality test
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import gcd

from sympy import integer_nthroot, totient

from ntprime.modular import poly_binomial_residual
from ntprime.registry import PrimalityMethod, primality_test
from ntprime.runtime import trace
from ntprime.utility import InvalidInputError, isqrt, ln_floor, require_int, sieve_primes


class Verdict(Enum):
    PRIME = "prime"
    COMPOSITE = "composite"


class AksGate(Enum):
    TRIVIAL = "trivial"                  # n < 2
    PERFECT_POWER = "perfect power"
    SMALL_FACTOR = "small factor"
    SMALL_N = "n <= r"
    POLYNOMIAL = "polynomial congruence"


@dataclass(frozen=True)
class AksReport:
    n: int
    verdict: Verdict
    gate: AksGate
    r: int | None = None
    witness: int | None = None     # factor (small-factor gate) or a (polynomial gate)

    @property
    def is_prime(self) -> bool:
        return self.verdict is Verdict.PRIME


def is_perfect_power(n: int) -> tuple[bool, int | None, int | None]:
    """
    (True, base, exp) when n = base**exp with base > 1 and exp > 1,
    else (False, None, None).

    Dividing n by each base b <= √n for as long as it divides asks whether
    n = b**j for some j >= 2. The same holds iff n has an exact integer q-th
    root for some prime q <= log2(n): any n = b**j has one for every prime
    q dividing j, and the root is at least 2 so q cannot exceed log2(n).
    Roots come from sympy.integer_nthroot, so no floats are involved.
    The reported exponent is the smallest such prime, except for powers
    of two, whose full exponent is read off the bit length.
    """
    if n <= 1:
        return False, None, None

    if n & (n - 1) == 0:
        k = n.bit_length() - 1
        return (True, 2, k) if k > 1 else (False, None, None)

    for q in sieve_primes(n.bit_length() - 1):
        root, exact = integer_nthroot(n, q)
        if exact:
            return True, int(root), q

    return False, None, None


def order_bound(n: int) -> int:
    """⌊ln n⌋², the multiplicative order n must exceed modulo r."""
    return ln_floor(n) ** 2


def r_search_limit(n: int) -> int:
    """Upper bound on the r returned by find_r: max(3, ⌈log₂ n⌉⁵)."""
    return max(3, (n - 1).bit_length() ** 5)


def find_r(n: int) -> int:
    """
    Smallest r >= 2 such that n^k mod r is neither 0 nor 1 for every
    k = 1 .. ⌊ln n⌋², i.e. ord_r(n) exceeds that bound.
    """
    bound = order_bound(n)
    limit = r_search_limit(n)
    for r in range(2, limit + 1):
        x = 1
        ok = True
        for _ in range(bound):
            x = (x * n) % r
            if x in (0, 1):
                ok = False
                break
        if ok:
            return r
    raise ArithmeticError(f"no r <= {limit} with ord_r({n}) > {bound}")


def _small_factor(n: int, r: int) -> int | None:
    for a in range(2, min(r, n) + 1):
        g = gcd(a, n)
        if 1 < g < n:
            return g
    return None


def polynomial_limit(n: int, r: int) -> int:
    """⌊√φ(r)⌋·⌊ln n⌋, the largest a checked by the polynomial gate."""
    return isqrt(int(totient(r))) * ln_floor(n)


def aks_report(n: int) -> AksReport:
    """Run the AKS gates in order and report the deciding one."""
    n = require_int(n)
    if n < 0:
        raise InvalidInputError(f"primality is not defined for negative n ({n}).")
    if n < 2:
        return AksReport(n, Verdict.COMPOSITE, AksGate.TRIVIAL)

    # 1) n = b^k
    pp, base, exp = is_perfect_power(n)
    if pp:
        trace("aks", f"{n} = {base}^{exp}")
        return AksReport(n, Verdict.COMPOSITE, AksGate.PERFECT_POWER, witness=base)

    # 2) order-finding
    r = find_r(n)
    trace("aks", f"n={n} r={r}")

    # 3) gcd with every a <= min(r, n)
    g = _small_factor(n, r)
    if g is not None:
        return AksReport(n, Verdict.COMPOSITE, AksGate.SMALL_FACTOR, r=r, witness=g)

    # 4)
    if n <= r:
        return AksReport(n, Verdict.PRIME, AksGate.SMALL_N, r=r)

    # 5) (x + a)^n ≡ x^n + a  (mod x^r - 1, n)
    limit = polynomial_limit(n, r)
    trace("aks", f"checking a = 1..{limit}")
    for a in range(1, limit + 1):
        if any(poly_binomial_residual(a, n, r)):
            return AksReport(n, Verdict.COMPOSITE, AksGate.POLYNOMIAL, r=r, witness=a)

    return AksReport(n, Verdict.PRIME, AksGate.POLYNOMIAL, r=r)


def aks(n: int) -> Verdict:
    return aks_report(n).verdict


@primality_test(
    method=PrimalityMethod.AKS,
    label="AKS",
    description="Deterministic polynomial-time test: perfect powers, order of n mod r, (x+a)^n ≡ x^n+a.",
)
def is_prime_aks(n: int) -> bool:
    return aks_report(n).is_prime

