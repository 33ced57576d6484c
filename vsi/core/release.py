"""Release naming: archive names, download URLs and local paths.

Everything here is pure string/path construction so it can be tested
without touching the network or the filesystem.
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "DEFAULT_BASE_URL",
    "PATCH_BINARY",
    "PATCH_FLAG",
    "STRIP_COMPONENTS",
    "archive_name",
    "download_url",
    "patch_binary",
    "patch_command",
    "tarball_path",
]

DEFAULT_BASE_URL = "https://github.com/MikeWang000000/vscode-server-centos7/releases/download"

PATCH_BINARY = "code-latest"
PATCH_FLAG = "--patch-now"

# Release tarballs wrap everything in a single top-level folder.
STRIP_COMPONENTS = 1


def archive_name(version: str) -> str:
    """Return the release asset file name for ``version``.

    Example: "1.89.1" -> "vscode-server_1.89.1_x64.tar.gz"
    """
    return f"vscode-server_{version}_x64.tar.gz"


def download_url(version: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Return the release asset URL for ``version``.

    A trailing slash on ``base_url`` is ignored.
    """
    return f"{base_url.rstrip('/')}/{version}/{archive_name(version)}"


def tarball_path(version: str, tmp_dir: Path) -> Path:
    """Return where the downloaded archive for ``version`` is stored."""
    return tmp_dir / archive_name(version)


def patch_binary(install_dir: Path) -> Path:
    return install_dir / PATCH_BINARY


def patch_command(install_dir: Path) -> list[str]:
    """Return the argv that applies the pending patch."""
    return [str(patch_binary(install_dir)), PATCH_FLAG]
