from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from ntprime.fmt import format_factorization


@dataclass(frozen=True)
class Factorization:
    # --- non-default fields FIRST ---
    n: int
    factors: tuple[tuple[int, int], ...]   # (prime, multiplicity), prime ascending

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(self.factors)

    def __len__(self) -> int:
        return len(self.factors)

    def __getitem__(self, i: int) -> tuple[int, int]:
        return self.factors[i]

    def __eq__(self, other: object) -> bool:
        # compare equal to a plain list of pairs as well
        if isinstance(other, Factorization):
            return self.n == other.n and self.factors == other.factors
        if isinstance(other, (list, tuple)):
            return list(self.factors) == [tuple(p) for p in other]
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.n, self.factors))

    def __str__(self) -> str:
        return format_factorization(self.factors)

    @property
    def product(self) -> int:
        v = 1
        for p, e in self.factors:
            v *= p ** e
        return v

    @property
    def primes(self) -> tuple[int, ...]:
        return tuple(p for p, _ in self.factors)

    @property
    def omega(self) -> int:
        """Number of distinct prime factors."""
        return len(self.factors)

    @property
    def big_omega(self) -> int:
        """Number of prime factors counted with multiplicity."""
        return sum(e for _, e in self.factors)

    @property
    def is_prime(self) -> bool:
        return self.factors == ((self.n, 1),)

    @property
    def is_squarefree(self) -> bool:
        return all(e == 1 for _, e in self.factors)

    def as_dict(self) -> dict[int, int]:
        return dict(self.factors)
