# tests/conftest.py
from __future__ import annotations

import random

import pytest

from ntprime.factor import PrimeCache
from ntprime.runtime import APPLY, current


STRICT = {"MILLER_RABIN": {"TRIALS": 40}}


@pytest.fixture(autouse=True)
def strict_trials():
    """Run every test with 40 Miller–Rabin trials unless it applies its own settings."""
    rt = current()
    saved = (rt.profile_name, dict(rt.settings), rt.debug)
    APPLY(STRICT)
    yield
    rt.profile_name, rt.settings, rt.debug = saved


@pytest.fixture
def runtime_settings():
    """
    Apply temporary runtime settings for one test:

        runtime_settings({"PARALLEL": {"WORKERS": 2, "MIN_ITEMS": 1}})

    The previous runtime state is restored afterwards.
    """
    rt = current()
    saved = (rt.profile_name, dict(rt.settings), rt.debug)
    yield APPLY
    rt.profile_name, rt.settings, rt.debug = saved


@pytest.fixture
def force_pool(runtime_settings):
    """Make every parallel helper start a two-process pool, even for tiny inputs."""
    runtime_settings({**STRICT, "PARALLEL": {"WORKERS": 2, "MIN_ITEMS": 1, "CHUNK_SIZE": 8}})


@pytest.fixture
def seeded_rng():
    return random.Random(20240601)


@pytest.fixture(scope="session")
def shared_cache():
    """One cache grown across the session, like a long range scan."""
    return PrimeCache()


@pytest.fixture
def spawned_pool(runtime_settings):
    """
    Two-process pool started with "spawn", whose workers import ntprime
    afresh and never see this process's runtime settings.
    """
    def apply(**sections):
        settings = {**STRICT, "PARALLEL": {"WORKERS": 2, "MIN_ITEMS": 1, "CHUNK_SIZE": 8, "START_METHOD": "spawn"}}
        settings.update(sections)
        runtime_settings(settings)
    return apply
