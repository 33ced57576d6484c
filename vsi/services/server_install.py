"""VS Code Server install procedure.

Downloads a release tarball, extracts it into the install directory
(dropping the archive's top-level folder), removes the tarball and runs
``code-latest --patch-now``. Each step must succeed before the next one
starts; the first failure ends the run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Protocol

from vsi.core.config import Config
from vsi.core.release import (
    STRIP_COMPONENTS,
    download_url,
    patch_binary,
    patch_command,
    tarball_path,
)
from vsi.core.result import Err, Ok, Result
from vsi.output.console import ConsoleProtocol
from vsi.platform.process import ProcessError, run_silent
from vsi.tools.download import Downloader, TemporaryArchive
from vsi.tools.http import HttpClient, RealHttpClient
from vsi.tools.installer import Installer

__all__ = [
    "FailureKind",
    "InstallFailure",
    "InstallReport",
    "PatchRunner",
    "ServerInstallService",
]


class FailureKind(Enum):
    """Why an install stopped."""

    USAGE = auto()
    DOWNLOAD = auto()
    FILESYSTEM = auto()
    EXTRACT = auto()
    MISSING_BINARY = auto()
    PATCH = auto()

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")


@dataclass(frozen=True, slots=True)
class InstallFailure:
    """A fatal install error.

    Attributes:
        kind: Failure category
        message: One-line message for the user
        detail: Extra diagnostics (error response body, low-level cause)
    """

    kind: FailureKind
    message: str
    detail: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class InstallReport:
    """Summary of a successful install."""

    version: str
    url: str
    install_dir: Path
    archive_size: int
    files_count: int
    cleanup_warning: str | None = None


class PatchRunner(Protocol):
    def __call__(self, cmd: list[str], cwd: Path) -> Result[None, ProcessError]: ...


def _run_patch(cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
    return run_silent(cmd, cwd=cwd)


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


class ServerInstallService:
    """Runs the download / extract / cleanup / patch sequence.

    Collaborators are injectable so the whole sequence can be exercised
    with a ``MockHttpClient`` and a fake patch runner.
    """

    def __init__(
        self,
        *,
        config: Config,
        console: ConsoleProtocol,
        http: HttpClient | None = None,
        installer: Installer | None = None,
        patch_runner: PatchRunner | None = None,
    ) -> None:
        self._config = config
        self._console = console
        self._downloader = Downloader(http or RealHttpClient(timeout=config.timeout))
        self._installer = installer or Installer()
        self._patch_runner = patch_runner or _run_patch

    def install(
        self, version: str | None, install_dir: Path | None = None
    ) -> Result[InstallReport, InstallFailure]:
        """Install and patch VS Code Server ``version``.

        Args:
            version: Release version (e.g. "1.89.1")
            install_dir: Target directory (defaults to ``config.install_dir``)

        Returns:
            Ok(InstallReport), or Err(InstallFailure) for the first failing step
        """
        version = (version or "").strip()
        if not version:
            return Err(
                InstallFailure(
                    FailureKind.USAGE,
                    "VS Code Server version not provided. Usage: vsi <VERSION> [INSTALL_DIR]",
                )
            )

        target = install_dir or self._config.install_dir
        url = download_url(version, self._config.base_url)
        tarball = tarball_path(version, self._config.tmp_dir)

        self._console.info(f"Downloading VS Code Server {version} from {url}")
        self._console.debug(f"archive: {tarball}")

        with TemporaryArchive(tarball) as archive:
            staged = self._download_and_extract(url, archive.path, target)
            self._console.info(f"Cleaning up temporary file: {tarball}")

        cleanup_warning = self._report_cleanup(archive)
        if isinstance(staged, Err):
            return staged

        binary = patch_binary(target)
        if not _is_executable(binary):
            return Err(
                InstallFailure(
                    FailureKind.MISSING_BINARY,
                    f"VS Code Server executable not found or not executable at {binary}",
                )
            )

        self._console.info("VS Code Server installation complete. Patching now...")
        cmd = patch_command(target)
        self._console.debug(" ".join(cmd))
        pres = self._patch_runner(cmd, target)
        if isinstance(pres, Err):
            return Err(
                InstallFailure(
                    FailureKind.PATCH,
                    "Failed to patch VS Code Server.",
                    detail=str(pres.error),
                )
            )

        self._console.success("VS Code Server is ready!")
        archive_size, files_count = staged.value
        return Ok(
            InstallReport(
                version=version,
                url=url,
                install_dir=target,
                archive_size=archive_size,
                files_count=files_count,
                cleanup_warning=cleanup_warning,
            )
        )

    def _download_and_extract(
        self, url: str, archive: Path, target: Path
    ) -> Result[tuple[int, int], InstallFailure]:
        """Fetch the archive and unpack it into ``target``.

        Returns:
            Ok((archive_size, files_count)), or Err(InstallFailure)
        """
        dres = self._downloader.download(url, archive)
        if isinstance(dres, Err):
            error = dres.error
            detail = f"{error}\n{error.body}" if error.body else str(error)
            return Err(
                InstallFailure(
                    FailureKind.DOWNLOAD,
                    "Failed to download VS Code Server. Check the version or URL.",
                    detail=detail,
                )
            )
        self._console.debug(f"downloaded {dres.value.size} bytes")

        self._console.info(f"Creating installation directory: {target}")
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Err(
                InstallFailure(
                    FailureKind.FILESYSTEM,
                    f"Failed to create installation directory: {target}",
                    detail=str(e),
                )
            )

        self._console.info(f"Extracting VS Code Server to {target}")
        ires = self._installer.install(archive, target, strip_components=STRIP_COMPONENTS)
        if isinstance(ires, Err):
            return Err(
                InstallFailure(
                    FailureKind.EXTRACT,
                    "Failed to extract VS Code Server archive.",
                    detail=str(ires.error),
                )
            )
        self._console.debug(f"extracted {ires.value.files_count} files")

        return Ok((dres.value.size, ires.value.files_count))

    def _report_cleanup(self, archive: TemporaryArchive) -> str | None:
        if isinstance(archive.cleanup, Err):
            message = f"{archive.cleanup.error}, continuing anyway."
            self._console.warning(message)
            return message
        return None
