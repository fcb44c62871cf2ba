# src/ntprime/fmt.py
from __future__ import annotations

from collections.abc import Iterable

from ntprime.utility import dec_digits

_SUPERSCRIPT = str.maketrans("0123456789-", "⁰¹²³⁴⁵⁶⁷⁸⁹⁻")


def abbr_int_fast(n: int, head: int = 10, tail: int = 10, threshold: int = 35, ellipsis: str = "…") -> str:
    """Abbreviate very large ints as first<head>…last<tail> without str(n)."""
    # Keep non-ints and small ints simple
    if not isinstance(n, int):
        return str(n)
    if n == 0:
        return "0"

    sign = "-" if n < 0 else ""
    a = -n if n < 0 else n

    # If not long enough, fall back to normal str()
    d = dec_digits(a)
    if d <= threshold or head + tail >= d:
        return sign + str(a)

    # compute first/last blocks exactly
    first = a // 10 ** (d - head)
    last = a % 10 ** tail
    return f"{sign}{first}{ellipsis}{last:0{tail}d}"


def superscript(k: int) -> str:
    return str(k).translate(_SUPERSCRIPT)


def format_factorization(pairs: Iterable[tuple[int, int]], *, sep: str = " × ") -> str:
    """'2² × 5²' style product; exponent 1 is omitted."""
    parts = []
    for p, e in pairs:
        parts.append(abbr_int_fast(p) + (superscript(e) if e != 1 else ""))
    return sep.join(parts) if parts else "1"
