# -----------------------------------------------------------------------------
#  modular.py
#  Modular exponentiation and polynomial arithmetic in Z_n[x]/(x^r - 1)
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Sequence

import gmpy2

from ntprime.utility import InvalidInputError, require_int, require_non_negative


def modpow(base: int, exponent: int, modulus: int) -> int:
    """
    Return base**exponent mod modulus, reduced into [0, modulus).

    Binary square-and-multiply, scanning the exponent from its least
    significant bit and reducing after every multiplication so operands
    never exceed modulus**2.
    """
    base = require_int(base, "base")
    exponent = require_non_negative(exponent, "exponent")
    modulus = require_int(modulus, "modulus")
    if modulus <= 0:
        raise InvalidInputError(f"modulus must be positive, got {modulus}.")

    result = 1 % modulus
    s = base % modulus
    e = exponent
    while e > 0:
        if e & 1:
            result = (result * s) % modulus
        s = (s * s) % modulus
        e >>= 1
    return result


# --- Polynomials modulo (x^r - 1, n) ------------------------------------------
# A polynomial is a dense list of r coefficients; index i holds the
# coefficient of x^i. Coefficients are kept in [0, n).


def poly_reduce(coeffs: Sequence[int], r: int, n: int) -> list[int]:
    """Fold exponents modulo r and coefficients modulo n."""
    out = [0] * r
    for i, c in enumerate(coeffs):
        out[i % r] += c
    return [c % n for c in out]


def _pack(coeffs: Sequence[int], width: int) -> int:
    # little-endian, one fixed-width slot per coefficient
    return int.from_bytes(b"".join(c.to_bytes(width, "little") for c in coeffs), "little")


def _unpack(value: int, width: int, count: int) -> list[int]:
    raw = value.to_bytes(width * count, "little")
    return [int.from_bytes(raw[i:i + width], "little") for i in range(0, width * count, width)]


def poly_mulmod(a: Sequence[int], b: Sequence[int], r: int, n: int) -> list[int]:
    """
    Product of two reduced polynomials in Z_n[x]/(x^r - 1).

    Kronecker substitution: both operands are packed into one big integer
    with slots wide enough for any coefficient of the full product
    (< r * n**2), multiplied once with gmpy2, then unpacked and folded.
    """
    if r < 1:
        raise InvalidInputError(f"r must be positive, got {r}.")
    bits = 2 * (n - 1).bit_length() + r.bit_length() + 1
    width = (bits + 7) // 8
    count = 2 * r - 1

    product = int(gmpy2.mpz(_pack(a, width)) * gmpy2.mpz(_pack(b, width)))
    full = _unpack(product, width, count)

    out = full[:r]
    for i in range(r, count):
        out[i - r] += full[i]
    return [c % n for c in out]


def poly_powmod(base: Sequence[int], exponent: int, r: int, n: int) -> list[int]:
    """base**exponent in Z_n[x]/(x^r - 1) by repeated squaring."""
    exponent = require_non_negative(exponent, "exponent")
    result = poly_reduce([1], r, n)
    s = poly_reduce(base, r, n)
    e = exponent
    while e > 0:
        if e & 1:
            result = poly_mulmod(result, s, r, n)
        e >>= 1
        if e:
            s = poly_mulmod(s, s, r, n)
    return result


def poly_binomial_residual(a: int, n: int, r: int) -> list[int]:
    """
    (x + a)^n - (x^n + a) reduced modulo (x^r - 1, n).

    All coefficients are zero when n is prime.
    """
    lhs = poly_powmod(poly_reduce([a, 1], r, n), n, r, n)
    rhs = poly_reduce([a], r, n)
    rhs[n % r] = (rhs[n % r] + 1) % n
    return [(x - y) % n for x, y in zip(lhs, rhs)]
