# tests/test_config.py
from __future__ import annotations

import pytest

from ntprime.config import configure, describe_settings, has_profile, list_profiles, load_settings
from ntprime.factor import PrimeCache, factor
from ntprime.runtime import CFG, current
from ntprime.utility import ProfileError


def test_default_profile():
    s = load_settings()
    assert s.name == "default"
    assert "_PROFILE_" not in s.data
    assert s.data["MILLER_RABIN"]["TRIALS"] == 5
    assert s.data["FACTOR"]["TRIAL_DIVISION_LIMIT"] == 10**12


def test_packaged_profiles_listed():
    names = [name for name, _ in list_profiles()]
    for expected in ("default", "sequential", "thorough"):
        assert expected in names
    assert has_profile("thorough")
    assert not has_profile("no-such-profile")


def test_unknown_profile():
    with pytest.raises(FileNotFoundError):
        load_settings("no-such-profile")


def test_user_profile_shadows_packaged(tmp_path, monkeypatch):
    pdir = tmp_path / "profiles"
    pdir.mkdir()
    (pdir / "default.toml").write_text(
        '[_PROFILE_]\nname = "mine"\n\n[MILLER_RABIN]\nTRIALS = 9\n', encoding="utf-8"
    )
    monkeypatch.setenv("NTPRIME_HOME", str(tmp_path))
    s = load_settings("default.toml")
    assert s.name == "mine"
    assert s.data["MILLER_RABIN"]["TRIALS"] == 9


def test_malformed_profile(tmp_path, monkeypatch):
    pdir = tmp_path / "profiles"
    pdir.mkdir()
    (pdir / "broken.toml").write_text("[MILLER_RABIN\nTRIALS = 3\n", encoding="utf-8")
    monkeypatch.setenv("NTPRIME_HOME", str(tmp_path))
    with pytest.raises(ProfileError, match="line 1"):
        load_settings("broken")
    assert ("broken", "(unreadable profile)") in list_profiles()


def test_configure_applies_settings(runtime_settings):
    configure("thorough")
    assert current().profile_name == "thorough"
    assert CFG("MILLER_RABIN.TRIALS") == 20
    assert CFG("PARALLEL.MISSING", "fallback") == "fallback"
    rows = dict((k, v) for k, v, _ in describe_settings(load_settings("thorough")))
    assert rows["MILLER_RABIN.TRIALS"] == 20


def test_trace_goes_to_stderr_when_debug_is_on(runtime_settings, capsys):
    configure("sequential")
    factor(100, PrimeCache())
    captured = capsys.readouterr()
    assert "[factor]" in captured.err
    assert captured.out == ""


def test_no_trace_by_default(runtime_settings, capsys):
    runtime_settings({"BEHAVIOUR": {"DEBUG": False}})
    factor(100, PrimeCache())
    assert capsys.readouterr().err == ""
