"""Download and extraction infrastructure.

This package provides:
- HTTP client for downloads (http.py)
- Scoped archive download (download.py)
- Archive extraction (installer.py)
"""

from vsi.tools.download import (
    CleanupError,
    Downloader,
    DownloadResult,
    TemporaryArchive,
    remove_archive,
)
from vsi.tools.http import (
    HttpClient,
    HttpError,
    MockHttpClient,
    RealHttpClient,
)
from vsi.tools.installer import Installer, InstallError, InstallResult

__all__ = [
    # HTTP
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    # Download
    "CleanupError",
    "Downloader",
    "DownloadResult",
    "TemporaryArchive",
    "remove_archive",
    # Install
    "Installer",
    "InstallError",
    "InstallResult",
]
