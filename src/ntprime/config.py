from __future__ import annotations

import tomllib as toml
from dataclasses import dataclass
from importlib.resources import files as pkg_files
from pathlib import Path
from typing import Any

from ntprime.runtime import APPLY, CFG
from ntprime.utility import ProfileError, flatten_dotted, typename
from ntprime.workspace import user_profiles_dir


@dataclass
class Settings:
    """
    Wrap the full TOML dict (without the [_PROFILE_] section).
    .as_dict() feeds runtime.apply().

    Added fields:
      - name:        resolved profile name (FILE.stem if not provided in [_PROFILE_])
      - description: one-line description from [_PROFILE_] or "(no description)"
    """
    data: dict[str, Any]
    name: str
    description: str
    _source: Path | str | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


# --- Paths -----------------------------------------------------------------

def _packaged_profile_text(name: str) -> str | None:
    try:
        return (pkg_files("ntprime") / "profiles" / f"{name}.toml").read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return None


def _user_profile_path(name: str) -> Path | None:
    pdir = user_profiles_dir()
    if pdir is None:
        return None
    p = pdir / f"{name}.toml"
    return p if p.is_file() else None


# --- I/O -------------------------------------------------------------------

def _parse_toml(text: str, where: str) -> dict[str, Any]:
    try:
        return toml.loads(text)
    except toml.TOMLDecodeError as e:
        lineno = getattr(e, "lineno", None)
        colno = getattr(e, "colno", None)
        msg = getattr(e, "msg", str(e))
        parts = []
        if lineno is not None:
            parts.append(f"line {lineno}")
        if colno is not None:
            parts.append(f"column {colno}")
        loc = f" (at {', '.join(parts)})" if parts else ""
        # No traceback chaining
        raise ProfileError(f"reading {where}: {msg}{loc}.") from None


def _sanitize_oneline(s: str) -> str:
    return " ".join(str(s).split()) or "(no description)"


def _split_profile_data(raw: dict[str, Any], fallback_name: str) -> tuple[dict[str, Any], str, str]:
    """
    Extract [_PROFILE_] meta (name, description) and return:
      (settings_without_profile, resolved_name, resolved_description)
    """
    meta = raw.get("_PROFILE_") or {}
    if "_PROFILE_" in raw:
        raw = {k: v for k, v in raw.items() if k != "_PROFILE_"}

    name = str(meta.get("name") or fallback_name)
    description = _sanitize_oneline(str(meta.get("description") or ""))

    return raw, name, description


# --- Public API ------------------------------------------------------------

def list_profiles() -> list[tuple[str, str]]:
    """
    Return [(name, description), ...] for packaged and user profiles.
    User profiles shadow packaged ones with the same file stem.
    """
    stems: set[str] = set()
    for entry in (pkg_files("ntprime") / "profiles").iterdir():
        if entry.name.endswith(".toml"):
            stems.add(entry.name[:-5])
    pdir = user_profiles_dir()
    if pdir is not None:
        stems.update(p.stem for p in pdir.glob("*.toml"))

    items: list[tuple[str, str]] = []
    for stem in stems:
        try:
            s = load_settings(stem)
            items.append((s.name, s.description))
        except ProfileError:
            # Best-effort listing; fall back to filename
            items.append((stem, "(unreadable profile)"))
    return sorted(items, key=lambda t: t[0].lower())


def has_profile(name: str) -> bool:
    return _user_profile_path(name) is not None or _packaged_profile_text(name) is not None


def load_settings(name: str | None = None) -> Settings:
    """
    Load a profile by name (default 'default'). A file in
    $NTPRIME_HOME/profiles wins over the packaged copy.
    """
    if not name:
        name = "default"
    if name.lower().endswith(".toml"):
        name = name[:-5]

    user_path = _user_profile_path(name)
    if user_path is not None:
        text = user_path.read_text(encoding="utf-8-sig")
        source: Path | str = user_path
    else:
        packaged = _packaged_profile_text(name)
        if packaged is None:
            raise FileNotFoundError(f"Profile '{name}' not found")
        text = packaged
        source = f"package:ntprime.profiles/{name}.toml"

    raw = _parse_toml(text, f"{name}.toml")
    data, resolved_name, description = _split_profile_data(raw, name)

    return Settings(
        data=data,
        name=resolved_name,
        description=description,
        _source=source,
    )


def configure(name: str | None = None) -> Settings:
    """Load a profile and install it into the current runtime."""
    selected = load_settings(name)
    APPLY(selected)
    return selected


def describe_settings(settings: Settings) -> list[tuple[str, object, str]]:
    """Flattened (key, runtime value, type name) rows for the given profile."""
    flat = flatten_dotted(settings.as_dict())
    rows = []
    for k in sorted(flat.keys(), key=str.lower):
        v = CFG(k, None)
        rows.append((k, v, typename(v)))
    return rows
