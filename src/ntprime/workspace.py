from __future__ import annotations

import os
from pathlib import Path


def workspace_dir() -> Path | None:
    """User override directory from NTPRIME_HOME, or None when unset."""
    env = os.environ.get("NTPRIME_HOME")
    if env:
        return Path(env).expanduser().resolve()
    return None


def user_profiles_dir() -> Path | None:
    root = workspace_dir()
    if root is None:
        return None
    p = root / "profiles"
    return p if p.is_dir() else None
