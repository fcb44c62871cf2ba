from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("ntprime")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .config import configure, has_profile, list_profiles, load_settings
from .context import Factorization
from .factor import PrimeCache, factor, is_semiprime_pq
from .modular import modpow
from .presets import composites_pq_in_range, find_primes_in_range, gcd_test_range, prime_factors_in_range
from .primality.aks import Verdict, aks, aks_report
from .primality.miller_rabin import gcd_test, miller_rabin_liars, miller_rabin_primality, miller_rabin_test
from .primality.trial_division import is_prime_trial_division, is_prime_trial_division_parallel, next_prime
from .registry import PrimalityMethod, discover, is_prime
from .runtime import APPLY, CFG
from .utility import InvalidInputError, ProfileError, RandomnessError, UserInputError
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "Factorization",
    "InvalidInputError",
    "PrimalityMethod",
    "PrimeCache",
    "ProfileError",
    "RandomnessError",
    "UserInputError",
    "Verdict",
    "__version__",
    "aks",
    "aks_report",
    "composites_pq_in_range",
    "configure",
    "discover",
    "factor",
    "find_primes_in_range",
    "gcd_test",
    "gcd_test_range",
    "has_profile",
    "is_prime",
    "is_prime_trial_division",
    "is_prime_trial_division_parallel",
    "is_semiprime_pq",
    "list_profiles",
    "load_settings",
    "miller_rabin_liars",
    "miller_rabin_primality",
    "miller_rabin_test",
    "modpow",
    "next_prime",
    "prime_factors_in_range",
    "workspace_dir",
]
