"""Archive extraction into an install directory.

This module provides an Installer class that:
- Extracts .tar.gz archives (the release format)
- Supports strip_components (removing leading path components), like
  ``tar --strip-components``
- Merges into an existing install directory instead of wiping it, replacing
  files with new inodes the way GNU tar does
- Refuses entries that would land outside the install directory
"""

from __future__ import annotations

import tarfile
import zlib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from vsi.core.result import Err, Ok, Result

__all__ = ["Installer", "InstallResult", "InstallError"]


@dataclass(frozen=True, slots=True)
class InstallError:
    """Extraction error details.

    Attributes:
        archive: Path to the archive that failed
        message: Human-readable error message
    """

    archive: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.archive}"


@dataclass(frozen=True, slots=True)
class InstallResult:
    """Result of an extraction.

    Attributes:
        install_dir: Directory the archive was extracted into
        files_count: Number of regular files extracted
    """

    install_dir: Path
    files_count: int


class Installer:
    """Tar archive extractor.

    Usage:
        result = Installer().install(archive_path, install_dir, strip_components=1)
        match result:
            case Ok(installed):
                print(f"Installed {installed.files_count} files")
    """

    def install(
        self,
        archive: Path,
        install_dir: Path,
        *,
        strip_components: int = 0,
    ) -> Result[InstallResult, InstallError]:
        """Extract archive into installation directory.

        The directory is created if missing. Entries already present are
        replaced; everything else in it is left alone.

        Args:
            archive: Path to a .tar.gz / .tgz file
            install_dir: Directory to extract to
            strip_components: Number of leading path components to remove

        Returns:
            Ok with InstallResult, or Err with InstallError
        """
        if not archive.exists():
            return Err(InstallError(archive=archive, message="Archive not found"))

        # NOTE: Path.suffixes is not reliable for versioned names like
        # "vscode-server_1.89.1_x64.tar.gz" because it splits on every dot.
        if not archive.name.lower().endswith((".tar.gz", ".tgz")):
            return Err(
                InstallError(
                    archive=archive, message=f"Unsupported archive format: {archive.suffix}"
                )
            )

        try:
            install_dir.mkdir(parents=True, exist_ok=True)
            with tarfile.open(archive, "r:gz") as tar:
                files_count = self._extract_members(tar, install_dir, strip_components)
        except tarfile.TarError as e:
            return Err(InstallError(archive=archive, message=f"Tar extraction failed: {e}"))
        except (EOFError, zlib.error) as e:
            return Err(InstallError(archive=archive, message=f"Corrupt archive: {e}"))
        except KeyError as e:
            return Err(InstallError(archive=archive, message=f"Broken hard link in archive: {e}"))
        except OSError as e:
            return Err(InstallError(archive=archive, message=f"IO error: {e}"))

        return Ok(InstallResult(install_dir=install_dir, files_count=files_count))

    def _safe_relative_path(self, member_name: str, strip_components: int) -> PurePosixPath | None:
        """Return the stripped relative path, or None if nothing is left or it is unsafe."""
        normalized = member_name.replace("\\", "/")
        if normalized.startswith("/"):
            return None

        parts = [p for p in PurePosixPath(normalized).parts if p != "."]
        if len(parts) <= strip_components:
            return None

        kept = parts[strip_components:]
        if any(part in {"", ".."} for part in kept):
            return None

        return PurePosixPath(*kept)

    def _extract_members(
        self, tar: tarfile.TarFile, install_dir: Path, strip_components: int
    ) -> int:
        """Extract every safe member under its stripped name.

        Members go through tarfile's ``data`` filter, which rejects absolute
        paths, links that escape the destination and device files.

        Returns:
            Number of regular files extracted
        """
        files_count = 0
        for member in tar:
            rel_path = self._safe_relative_path(member.name, strip_components)
            if rel_path is None:
                continue

            changes: dict[str, str] = {"name": str(rel_path)}
            if member.islnk():
                # Hard link targets are archive paths and need the same stripping
                target = self._safe_relative_path(member.linkname, strip_components)
                if target is None:
                    continue
                changes["linkname"] = str(target)

            _unlink_existing(install_dir / rel_path)
            tar.extract(member.replace(**changes, deep=False), path=install_dir, filter="data")

            if member.isreg():
                files_count += 1
        return files_count


def _unlink_existing(path: Path) -> None:
    """Remove a non-directory entry so extraction creates a fresh inode.

    Writing over the old file in place fails with ETXTBSY while it is being
    executed, and would change every hard link sharing it.
    """
    if path.is_symlink() or (path.exists() and not path.is_dir()):
        path.unlink()
