"""Release archive download with scoped cleanup.

This module provides:
- Downloader: fetches a URL to a given path, removing partial files on failure
- TemporaryArchive: context manager that deletes the archive on every exit path
- remove_archive: best-effort deletion returning a Result
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING

from vsi.core.result import Err, Ok, Result
from vsi.tools.http import HttpError

if TYPE_CHECKING:
    from vsi.tools.http import HttpClient

__all__ = [
    "CleanupError",
    "DownloadResult",
    "Downloader",
    "TemporaryArchive",
    "remove_archive",
]


@dataclass(frozen=True, slots=True)
class DownloadResult:
    """Result of a download operation.

    Attributes:
        path: Path to the downloaded file
        size: File size in bytes
    """

    path: Path
    size: int


@dataclass(frozen=True, slots=True)
class CleanupError:
    """Temporary file could not be removed."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.path}"


class Downloader:
    """Downloads a URL to an explicit destination path.

    Usage:
        downloader = Downloader(RealHttpClient())
        result = downloader.download(url, Path("/tmp/archive.tar.gz"))
        match result:
            case Ok(downloaded):
                print(f"{downloaded.size} bytes")
    """

    def __init__(self, http: HttpClient) -> None:
        self._http = http

    def download(self, url: str, dest: Path) -> Result[DownloadResult, HttpError]:
        """Download file from URL to ``dest``.

        An existing file at ``dest`` is overwritten.

        Args:
            url: URL to download
            dest: Destination file

        Returns:
            Ok with DownloadResult, or Err with HttpError
        """
        result = self._http.download(url, dest)

        if isinstance(result, Err):
            # Clean up partial download
            with contextlib.suppress(OSError):
                dest.unlink(missing_ok=True)
            return result

        try:
            size = dest.stat().st_size
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=f"Downloaded file unreadable: {e}"))
        return Ok(DownloadResult(path=dest, size=size))


def remove_archive(path: Path) -> Result[bool, CleanupError]:
    """Delete a temporary archive.

    Returns:
        Ok(True) if removed, Ok(False) if it did not exist, or
        Err(CleanupError) if deletion failed
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return Ok(False)
    except OSError as e:
        message = f"Failed to remove temporary file ({e.strerror or e})"
        return Err(CleanupError(path=path, message=message))
    return Ok(True)


class TemporaryArchive:
    """Scope in which a downloaded archive exists.

    The file is removed when the block exits, whether it completes, returns
    early, or raises. The outcome of the deletion is kept in ``cleanup`` so
    the caller can report a failure without aborting.

    Usage:
        with TemporaryArchive(tarball) as archive:
            downloader.download(url, archive.path)
            ...
        if isinstance(archive.cleanup, Err):
            console.warning(str(archive.cleanup.error))
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.cleanup: Result[bool, CleanupError] | None = None

    def __enter__(self) -> TemporaryArchive:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup = remove_archive(self.path)
