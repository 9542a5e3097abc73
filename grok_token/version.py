"""
grok_token.version — package version and build provenance.

`__version__` is the single source for the version in deployment records and
`grok-token version`. `git_describe()` adds VCS provenance when a checkout is
available; set GROK_TOKEN_GIT_DESCRIBE to pin it (containers, CI artifacts).
"""

from __future__ import annotations

import os
import platform
import subprocess
from functools import lru_cache
from pathlib import Path
from typing import Dict

__version__ = "0.1.0"

_GIT_CMD = ("git", "describe", "--tags", "--dirty", "--always")


@lru_cache(maxsize=1)
def git_describe() -> str:
    """`git describe` of the package checkout, or '<version>+local'."""
    pinned = os.getenv("GROK_TOKEN_GIT_DESCRIBE", "").strip()
    if pinned:
        return pinned
    try:
        out = subprocess.run(
            _GIT_CMD,
            cwd=Path(__file__).resolve().parent,
            capture_output=True,
            check=True,
            text=True,
        ).stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        out = ""
    return out or f"{__version__}+local"


@lru_cache(maxsize=1)
def version_metadata() -> Dict[str, str]:
    """Version info as flat strings, for logs and `grok-token version`."""
    describe = git_describe()
    return {
        "package": "grok-token",
        "version": __version__,
        "describe": describe,
        "dirty": str("-dirty" in describe).lower(),
        "python": platform.python_version(),
    }


__all__ = ["__version__", "git_describe", "version_metadata"]
