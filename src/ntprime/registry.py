# src/ntprime/registry.py
from __future__ import annotations

import inspect
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from functools import cache
from importlib import import_module
from importlib.resources import files as pkg_files

from ntprime.utility import InvalidInputError


class PrimalityMethod(Enum):
    TRIAL_DIVISION = "trial-division"
    TRIAL_DIVISION_PARALLEL = "trial-division-parallel"
    MILLER_RABIN = "miller-rabin"
    AKS = "aks"

    @classmethod
    def parse(cls, value: PrimalityMethod | str) -> PrimalityMethod:
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "-")
        for m in cls:
            if m.value == key:
                return m
        choices = ", ".join(m.value for m in cls)
        raise InvalidInputError(f"unknown primality method '{value}' (choose from: {choices}).")


# --------------------- Discovery → Index (immutable) ----------------------

@dataclass
class Index:
    funcs: dict[PrimalityMethod, Callable[[int], bool]]
    labels: dict[PrimalityMethod, str] = field(default_factory=dict)
    descriptions: dict[PrimalityMethod, str] = field(default_factory=dict)
    deterministic: dict[PrimalityMethod, bool] = field(default_factory=dict)


def _is_primality_test(obj) -> bool:
    return callable(obj) and getattr(obj, "__is_primality_test__", False)


def _collect_from_module(mod) -> list[Callable[[int], bool]]:
    return [o for _, o in inspect.getmembers(mod) if _is_primality_test(o)]


# ---------- Decorator (only tags the function; no side effects) ----------


def primality_test(*, method: PrimalityMethod, label: str, description: str = "",
                   deterministic: bool = True):
    def deco(fn: Callable[[int], bool]):
        fn.__is_primality_test__ = True
        fn.method = method
        fn.label = label
        fn.description = description
        fn.deterministic = deterministic
        return fn
    return deco


@cache
def discover() -> Index:
    """Collect the tagged tests from the ntprime.primality package, one per method."""
    funcs: OrderedDict[PrimalityMethod, Callable[[int], bool]] = OrderedDict()
    labels: dict[PrimalityMethod, str] = {}
    desc: dict[PrimalityMethod, str] = {}
    det: dict[PrimalityMethod, bool] = {}

    pkg_dir = pkg_files("ntprime") / "primality"
    names = sorted(
        entry.name[:-3] for entry in pkg_dir.iterdir()
        if entry.name.endswith(".py") and entry.name != "__init__.py"
    )
    for stem in names:
        mod = import_module(f"ntprime.primality.{stem}")
        for fn in _collect_from_module(mod):
            if fn.method in funcs:
                raise RuntimeError(f"duplicate primality test for {fn.method.value}: "
                                   f"{funcs[fn.method].__name__} and {fn.__name__}")
            funcs[fn.method] = fn
            labels[fn.method] = fn.label
            desc[fn.method] = fn.description
            det[fn.method] = fn.deterministic

    missing = [m.value for m in PrimalityMethod if m not in funcs]
    if missing:
        raise RuntimeError(f"no primality test registered for: {', '.join(missing)}")

    return Index(funcs=dict(funcs), labels=labels, descriptions=desc, deterministic=det)


def get_test(method: PrimalityMethod | str) -> Callable[[int], bool]:
    return discover().funcs[PrimalityMethod.parse(method)]


def is_prime(n: int, method: PrimalityMethod | str = PrimalityMethod.MILLER_RABIN) -> bool:
    """Single entry point over every primality variant; always a bool."""
    return bool(get_test(method)(n))
