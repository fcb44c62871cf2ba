# -----------------------------------------------------------------------------
#  miller_rabin.py
#  Miller–Rabin probabilistic primality test and its step trace
# -----------------------------------------------------------------------------

from __future__ import annotations

import random
from dataclasses import dataclass
from functools import partial
from math import gcd

from ntprime.fmt import abbr_int_fast, superscript
from ntprime.modular import modpow
from ntprime.parallel import parallel_filter
from ntprime.registry import PrimalityMethod, primality_test
from ntprime.runtime import CFG
from ntprime.utility import InvalidInputError, random_int_in_range, require_int

MSG_PROBABLY_PRIME = "is probably prime"
MSG_COMPOSITE = "is composite"
MSG_SEARCH = "search for other square roots of 1"


def decompose(n: int) -> tuple[int, int]:
    """Return (m, s) with n - 1 = m·2ˢ and m odd, for n >= 2."""
    m = n - 1
    s = 0
    while m > 0 and m % 2 == 0:
        m //= 2
        s += 1
    return m, s


def default_trials() -> int:
    return int(CFG("MILLER_RABIN.TRIALS", 5))


def resolve_trials(trials: int | None) -> int:
    """
    Trial count to use: the explicit value, else MILLER_RABIN.TRIALS.
    Resolve in the parent before handing work to a process pool; workers
    started by spawn or forkserver do not see the runtime settings.
    """
    t = default_trials() if trials is None else require_int(trials, "trials")
    if t < 1:
        raise InvalidInputError(f"trials must be at least 1, got {t}.")
    return t


def _trivial_verdict(n: int) -> bool | None:
    if n < 0:
        raise InvalidInputError(f"primality is not defined for negative n ({n}).")
    if n <= 1 or n == 4:
        return False
    if n <= 3:
        return True
    return None


def _single_trial(n: int, m: int, s: int, a: int) -> bool:
    """True when base a fails to witness compositeness of n."""
    x = modpow(a, m, n)
    if x == 1 or x == n - 1:
        return True
    # at most s-1 squarings: a^(m·2^k) for k = 1 .. s-1
    for _ in range(s - 1):
        x = (x * x) % n
        if x == n - 1:
            return True
        if x == 1:
            # nontrivial square root of 1 seen before -1
            return False
    return False


@primality_test(
    method=PrimalityMethod.MILLER_RABIN,
    label="Miller–Rabin",
    description="Random-base strong-pseudoprime test; false positive rate ≤ 4^-trials.",
    deterministic=False,
)
def miller_rabin_primality(n: int, trials: int | None = None, *, rng: random.Random | None = None) -> bool:
    """
    Probabilistic primality test.

    Runs `trials` independent rounds (default MILLER_RABIN.TRIALS, 5),
    each with a fresh uniform base 1 < a < n-1. Any witness ends the test
    as composite. `rng` replaces the OS entropy source, e.g. for seeded tests.
    """
    n = require_int(n)
    trivial = _trivial_verdict(n)
    if trivial is not None:
        return trivial
    trials = resolve_trials(trials)

    m, s = decompose(n)
    for _ in range(trials):
        a = random_int_in_range(2, n - 1, rng)
        if not _single_trial(n, m, s, a):
            return False
    return True


# --- Diagnostic trace ---------------------------------------------------------

@dataclass(frozen=True)
class MillerRabinStep:
    """One exponentiation step: x = aᵉ mod n with e = m·2ᵏ."""
    n: int
    m: int
    s: int
    a: int
    k: int
    e: int
    x: int

    @property
    def congruent_one(self) -> bool:
        return self.x == 1

    @property
    def congruent_minus_one(self) -> bool:
        return self.x == self.n - 1

    @property
    def n_minus_one_form(self) -> str:
        return f"{abbr_int_fast(self.n - 1)} = {abbr_int_fast(self.m)}·2{superscript(self.s)}"

    @property
    def message(self) -> str:
        n_txt = abbr_int_fast(self.n)
        last = max(self.s - 1, 0)
        if self.k == 0:
            if self.congruent_one or self.congruent_minus_one:
                return f"{n_txt} {MSG_PROBABLY_PRIME}"
            return f"{n_txt} {MSG_COMPOSITE}" if self.k >= last else MSG_SEARCH
        if self.congruent_minus_one:
            return f"{n_txt} {MSG_PROBABLY_PRIME}"
        if self.congruent_one or self.k >= last:
            return f"{n_txt} {MSG_COMPOSITE}"
        return MSG_SEARCH

    def as_dict(self) -> dict[str, object]:
        return {
            "n": self.n,
            "n - 1 = m.2^s": self.n_minus_one_form,
            "s": self.s,
            "a": self.a,
            "k": self.k,
            "e = m.2^k": self.e,
            "x = a^e": self.x,
            "x ≡ 1 (mod n)": self.congruent_one,
            "x ≡ -1 (mod n)": self.congruent_minus_one,
            "message": self.message,
        }


def miller_rabin_test(n: int, base: int | None = None, *,
                      rng: random.Random | None = None) -> tuple[bool, list[MillerRabinStep]]:
    """
    Single-base run that records every exponentiation step.

    The verdict is the same as one round of miller_rabin_primality with
    that base. When base is None a random 1 < a < n-1 is drawn.
    Trivial inputs (n <= 4) return their verdict with an empty trace.
    """
    n = require_int(n)
    trivial = _trivial_verdict(n)
    if trivial is not None:
        return trivial, []

    if base is None:
        a = random_int_in_range(2, n - 1, rng)
    else:
        a = require_int(base, "base")
        if not 1 < a < n - 1:
            raise InvalidInputError(f"base must satisfy 1 < a < n-1, got {a}.")

    m, s = decompose(n)
    steps: list[MillerRabinStep] = []

    x = modpow(a, m, n)
    steps.append(MillerRabinStep(n=n, m=m, s=s, a=a, k=0, e=m, x=x))
    if x == 1 or x == n - 1:
        return True, steps

    for k in range(1, s):
        e = m << k
        x = (x * x) % n
        steps.append(MillerRabinStep(n=n, m=m, s=s, a=a, k=k, e=e, x=x))
        if x == n - 1:
            return True, steps
        if x == 1:
            return False, steps

    return False, steps


# --- Liars and gcd probes -----------------------------------------------------

def miller_rabin_liars(n: int) -> list[int]:
    """
    Strong liars of a composite n: bases 1 < a < n-1 that do not witness
    compositeness. Empty for primes and for n <= 4.
    """
    n = require_int(n)
    trivial = _trivial_verdict(n)
    if trivial is not None:
        return []
    m, s = decompose(n)
    bases = range(2, n - 1)
    liars = parallel_filter(partial(_single_trial, n, m, s), bases)
    if len(liars) == len(bases):
        # every base passed: n is prime (strong liars cap at n/4 for composites)
        return []
    return liars


def gcd_test(n: int, trials: int, *, rng: random.Random | None = None) -> list[tuple[int, int]]:
    """`trials` random bases 1 < a < n-1 paired with gcd(a, n)."""
    n = require_int(n)
    trials = require_int(trials, "trials")
    if n < 4:
        raise InvalidInputError(f"gcd test needs n >= 4, got {n}.")
    if trials < 1:
        raise InvalidInputError(f"trials must be at least 1, got {trials}.")
    out = []
    for _ in range(trials):
        a = random_int_in_range(2, n - 1, rng)
        out.append((a, gcd(a, n)))
    return out
