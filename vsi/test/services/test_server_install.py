"""Tests for services/server_install.py - the install sequence."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from vsi.core.config import Config
from vsi.core.release import archive_name
from vsi.core.result import Err, Ok, Result
from vsi.output.console import MockConsole
from vsi.platform.process import ProcessError
from vsi.services.server_install import (
    FailureKind,
    InstallFailure,
    InstallReport,
    ServerInstallService,
)
from vsi.test.archives import release_tarball
from vsi.test.stub_server import StubServer
from vsi.tools import download as download_module
from vsi.tools.download import CleanupError
from vsi.tools.http import HttpError, MockHttpClient, RealHttpClient

BASE_URL = "https://example.com/releases"
VERSION = "1.89.1"
URL = f"{BASE_URL}/{VERSION}/vscode-server_{VERSION}_x64.tar.gz"


class FakePatchRunner:
    """Records patch invocations instead of running anything."""

    def __init__(self, result: Result[None, ProcessError] | None = None) -> None:
        self.result = result or Ok(None)
        self.calls: list[tuple[list[str], Path]] = []

    def __call__(self, cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
        self.calls.append((cmd, cwd))
        return self.result


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(
        base_url=BASE_URL,
        install_dir=tmp_path / "server",
        tmp_dir=tmp_path / "tmp",
    )


@pytest.fixture
def http() -> MockHttpClient:
    client = MockHttpClient()
    client.set_download(URL, release_tarball())
    return client


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()


@pytest.fixture
def runner() -> FakePatchRunner:
    return FakePatchRunner()


def make_service(
    config: Config,
    console: MockConsole,
    http: MockHttpClient | RealHttpClient,
    runner: FakePatchRunner | None = None,
) -> ServerInstallService:
    return ServerInstallService(config=config, console=console, http=http, patch_runner=runner)


def tarball(config: Config) -> Path:
    return config.tmp_dir / archive_name(VERSION)


def assert_failure(
    result: Result[InstallReport, InstallFailure], kind: FailureKind
) -> InstallFailure:
    assert isinstance(result, Err)
    assert result.error.kind == kind
    return result.error


class TestFailureTypes:
    def test_kind_str(self) -> None:
        assert str(FailureKind.MISSING_BINARY) == "missing binary"
        assert str(FailureKind.DOWNLOAD) == "download"

    def test_failure_str_is_message(self) -> None:
        failure = InstallFailure(FailureKind.PATCH, "Failed to patch VS Code Server.", detail="x")
        assert str(failure) == "Failed to patch VS Code Server."


class TestVersionArgument:
    @pytest.mark.parametrize("version", [None, "", "   "])
    def test_missing_version_is_usage_error(
        self,
        version: str | None,
        config: Config,
        console: MockConsole,
        http: MockHttpClient,
        runner: FakePatchRunner,
    ) -> None:
        """No network, filesystem or process activity without a version."""
        result = make_service(config, console, http, runner).install(version)

        failure = assert_failure(result, FailureKind.USAGE)
        assert "version not provided" in failure.message
        assert "Usage:" in failure.message
        assert http.calls == []
        assert runner.calls == []
        assert not config.install_dir.exists()

    def test_version_is_stripped(
        self, config: Config, console: MockConsole, http: MockHttpClient, runner: FakePatchRunner
    ) -> None:
        result = make_service(config, console, http, runner).install(f"  {VERSION}\n")

        assert isinstance(result, Ok)
        assert http.calls == [("download", URL)]


class TestSuccessfulInstall:
    def test_full_sequence(
        self, config: Config, console: MockConsole, http: MockHttpClient, runner: FakePatchRunner
    ) -> None:
        result = make_service(config, console, http, runner).install(VERSION)

        assert isinstance(result, Ok)
        report = result.value
        assert report.version == VERSION
        assert report.url == URL
        assert report.install_dir == config.install_dir
        assert report.files_count == 3
        assert report.archive_size == len(release_tarball())
        assert report.cleanup_warning is None

    def test_top_level_folder_is_stripped(
        self, config: Config, console: MockConsole, http: MockHttpClient, runner: FakePatchRunner
    ) -> None:
        make_service(config, console, http, runner).install(VERSION)

        target = config.install_dir
        assert (target / "code-latest").is_file()
        assert (target / "bin" / "code-server").is_file()
        assert (target / "product.json").is_file()
        assert not (target / "vscode-server").exists()

    def test_tarball_removed(
        self, config: Config, console: MockConsole, http: MockHttpClient, runner: FakePatchRunner
    ) -> None:
        make_service(config, console, http, runner).install(VERSION)
        assert not tarball(config).exists()

    def test_patch_command(
        self, config: Config, console: MockConsole, http: MockHttpClient, runner: FakePatchRunner
    ) -> None:
        make_service(config, console, http, runner).install(VERSION)

        target = config.install_dir
        assert runner.calls == [([str(target / "code-latest"), "--patch-now"], target)]

    def test_explicit_install_dir(
        self,
        tmp_path: Path,
        config: Config,
        console: MockConsole,
        http: MockHttpClient,
        runner: FakePatchRunner,
    ) -> None:
        target = tmp_path / "elsewhere"
        result = make_service(config, console, http, runner).install(VERSION, target)

        assert isinstance(result, Ok)
        assert result.value.install_dir == target
        assert (target / "code-latest").is_file()
        assert not config.install_dir.exists()

    def test_progress_messages(
        self, config: Config, console: MockConsole, http: MockHttpClient, runner: FakePatchRunner
    ) -> None:
        make_service(config, console, http, runner).install(VERSION)

        assert console.find(f"Downloading VS Code Server {VERSION} from {URL}")
        assert console.find(f"Extracting VS Code Server to {config.install_dir}")
        assert console.find("Cleaning up temporary file")
        assert console.find("Patching now")
        assert console.messages[-1] == "OK VS Code Server is ready!"
        assert not console.has_error()
        assert not console.has_warning()

    def test_rerun_keeps_existing_files(
        self, config: Config, console: MockConsole, http: MockHttpClient, runner: FakePatchRunner
    ) -> None:
        service = make_service(config, console, http, runner)
        assert isinstance(service.install(VERSION), Ok)

        user_data = config.install_dir / "data" / "User" / "settings.json"
        user_data.parent.mkdir(parents=True)
        user_data.write_text("{}")

        assert isinstance(service.install(VERSION), Ok)
        assert user_data.read_text() == "{}"
        assert len(runner.calls) == 2
        assert not tarball(config).exists()


class TestDownloadFailure:
    def test_http_error(
        self, config: Config, console: MockConsole, runner: FakePatchRunner
    ) -> None:
        http = MockHttpClient()
        http.set_download(
            URL, HttpError(url=URL, status=404, message="Not Found", body="no such release")
        )

        result = make_service(config, console, http, runner).install(VERSION)

        failure = assert_failure(result, FailureKind.DOWNLOAD)
        assert failure.message == "Failed to download VS Code Server. Check the version or URL."
        assert failure.detail is not None
        assert "HTTP 404" in failure.detail
        assert "no such release" in failure.detail
        assert runner.calls == []
        assert not config.install_dir.exists()
        assert not tarball(config).exists()

    def test_error_without_body(
        self, config: Config, console: MockConsole, runner: FakePatchRunner
    ) -> None:
        http = MockHttpClient()
        http.set_download(URL, HttpError(url=URL, status=0, message="Connection refused"))

        failure = assert_failure(
            make_service(config, console, http, runner).install(VERSION), FailureKind.DOWNLOAD
        )
        assert failure.detail == f"Connection refused ({URL})"

    @pytest.mark.parametrize("chunked", [False, True])
    def test_connection_dropped_mid_transfer(
        self,
        tmp_path: Path,
        chunked: bool,
        console: MockConsole,
        runner: FakePatchRunner,
        stub_server: StubServer,
    ) -> None:
        """A half-sent archive fails the download step, not extraction."""
        payload = release_tarball()
        stub_server.add(
            f"/releases/{VERSION}/{archive_name(VERSION)}",
            payload,
            cut_after=len(payload) // 2,
            chunked=chunked,
        )
        config = Config(
            base_url=stub_server.url("/releases"),
            install_dir=tmp_path / "server",
            tmp_dir=tmp_path / "tmp",
        )

        result = make_service(config, console, RealHttpClient(timeout=5.0), runner).install(
            VERSION
        )

        failure = assert_failure(result, FailureKind.DOWNLOAD)
        assert failure.detail is not None
        assert "Transfer closed" in failure.detail
        assert runner.calls == []
        assert not config.install_dir.exists()
        assert not tarball(config).exists()


class TestFilesystemFailure:
    def test_install_dir_cannot_be_created(
        self,
        tmp_path: Path,
        config: Config,
        console: MockConsole,
        http: MockHttpClient,
        runner: FakePatchRunner,
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        target = blocker / "server"

        result = make_service(config, console, http, runner).install(VERSION, target)

        failure = assert_failure(result, FailureKind.FILESYSTEM)
        assert str(target) in failure.message
        assert runner.calls == []
        assert not tarball(config).exists()


class TestExtractFailure:
    def test_corrupt_archive(
        self, config: Config, console: MockConsole, runner: FakePatchRunner
    ) -> None:
        http = MockHttpClient()
        http.set_download(URL, b"<html>rate limited</html>")

        result = make_service(config, console, http, runner).install(VERSION)

        failure = assert_failure(result, FailureKind.EXTRACT)
        assert failure.message == "Failed to extract VS Code Server archive."
        assert runner.calls == []
        assert not tarball(config).exists()


class TestBinaryCheck:
    def test_missing_binary(
        self, config: Config, console: MockConsole, runner: FakePatchRunner
    ) -> None:
        http = MockHttpClient()
        http.set_download(URL, release_tarball(with_binary=False))

        result = make_service(config, console, http, runner).install(VERSION)

        failure = assert_failure(result, FailureKind.MISSING_BINARY)
        assert str(config.install_dir / "code-latest") in failure.message
        assert runner.calls == []
        assert not tarball(config).exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_binary_not_executable(
        self, config: Config, console: MockConsole, runner: FakePatchRunner
    ) -> None:
        http = MockHttpClient()
        http.set_download(URL, release_tarball(executable=False))

        result = make_service(config, console, http, runner).install(VERSION)

        assert_failure(result, FailureKind.MISSING_BINARY)
        assert runner.calls == []


class TestPatchFailure:
    def test_patch_exit_code(
        self, config: Config, console: MockConsole, http: MockHttpClient
    ) -> None:
        target = config.install_dir
        error = ProcessError(command=(str(target / "code-latest"), "--patch-now"), returncode=3)
        runner = FakePatchRunner(Err(error))

        result = make_service(config, console, http, runner).install(VERSION)

        failure = assert_failure(result, FailureKind.PATCH)
        assert failure.message == "Failed to patch VS Code Server."
        assert failure.detail == str(error)
        assert not console.has_success()
        # Extraction is not rolled back
        assert (target / "product.json").exists()
        assert not tarball(config).exists()


class TestCleanupWarning:
    def test_cleanup_failure_is_not_fatal(
        self,
        config: Config,
        console: MockConsole,
        http: MockHttpClient,
        runner: FakePatchRunner,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(
            download_module,
            "remove_archive",
            lambda path: Err(CleanupError(path=path, message="Failed to remove temporary file")),
        )

        result = make_service(config, console, http, runner).install(VERSION)

        assert isinstance(result, Ok)
        assert result.value.cleanup_warning is not None
        assert "continuing anyway" in result.value.cleanup_warning
        assert console.has_warning()
        assert len(runner.calls) == 1

    def test_cleanup_warning_on_failed_install(
        self,
        config: Config,
        console: MockConsole,
        runner: FakePatchRunner,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(
            download_module,
            "remove_archive",
            lambda path: Err(CleanupError(path=path, message="Failed to remove temporary file")),
        )
        http = MockHttpClient()
        http.set_download(URL, b"garbage")

        result = make_service(config, console, http, runner).install(VERSION)

        assert_failure(result, FailureKind.EXTRACT)
        assert console.has_warning()


class TestEndToEnd:
    """Real HTTP client against a local endpoint."""

    def test_install_over_http(
        self,
        tmp_path: Path,
        console: MockConsole,
        runner: FakePatchRunner,
        stub_server: StubServer,
    ) -> None:
        stub_server.add(f"/releases/{VERSION}/{archive_name(VERSION)}", release_tarball())
        config = Config(
            base_url=stub_server.url("/releases/"),
            install_dir=tmp_path / "server",
            tmp_dir=tmp_path / "tmp",
            timeout=5.0,
        )

        result = make_service(config, console, RealHttpClient(timeout=5.0), runner).install(VERSION)

        assert isinstance(result, Ok)
        assert (config.install_dir / "code-latest").is_file()
        assert stub_server.requests == [f"/releases/{VERSION}/{archive_name(VERSION)}"]

    def test_unknown_version_over_http(
        self,
        tmp_path: Path,
        console: MockConsole,
        runner: FakePatchRunner,
        stub_server: StubServer,
    ) -> None:
        config = Config(
            base_url=stub_server.url("/releases"),
            install_dir=tmp_path / "server",
            tmp_dir=tmp_path / "tmp",
        )

        result = make_service(config, console, RealHttpClient(timeout=5.0), runner).install("0.0.0")

        failure = assert_failure(result, FailureKind.DOWNLOAD)
        assert failure.detail is not None
        assert "Not Found" in failure.detail
        assert not config.install_dir.exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="runs a shell script")
    def test_runs_shipped_patch_script(
        self, config: Config, console: MockConsole, http: MockHttpClient
    ) -> None:
        """Default patch runner executes code-latest from the install dir."""
        service = ServerInstallService(config=config, console=console, http=http)

        result = service.install(VERSION)

        assert isinstance(result, Ok)
        assert (config.install_dir / "patched.txt").read_text().strip() == "patched"
