"""User-level path utilities.

Locates the home directory, the shared temporary directory and the
default VS Code Server install location.
"""

from __future__ import annotations

import os
import tempfile
from functools import lru_cache
from pathlib import Path

__all__ = [
    "INSTALL_DIR_NAME",
    "clear_caches",
    "default_install_dir",
    "home",
    "temp_dir",
]

# Directory VS Code Remote looks for under $HOME
INSTALL_DIR_NAME = ".vscode-server"


@lru_cache(maxsize=1)
def home() -> Path:
    """Get user's home directory.

    Uses HOME when set (CI/container scenarios), otherwise falls back to
    Path.home().
    """
    home_env = os.environ.get("HOME")
    if home_env:
        return Path(home_env)
    return Path.home()


@lru_cache(maxsize=1)
def temp_dir() -> Path:
    """Get the shared temporary directory (``/tmp`` on most Unix hosts)."""
    return Path(tempfile.gettempdir())


def default_install_dir() -> Path:
    """Get the default install location: ``$HOME/.vscode-server``."""
    return home() / INSTALL_DIR_NAME


def clear_caches() -> None:
    """Clear all cached paths.

    Useful for testing when environment variables change.
    """
    home.cache_clear()
    temp_dir.cache_clear()
