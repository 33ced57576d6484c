from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from vsi import __version__
from vsi.core.config import Config, load_config
from vsi.core.errors import ErrorCode
from vsi.core.result import Err
from vsi.output.console import ConsoleProtocol, RichConsole, Style
from vsi.services.server_install import InstallFailure, ServerInstallService


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
    help="Download, install and patch a VS Code Server release.",
)


def _exit_with_failure(console: ConsoleProtocol, failure: InstallFailure) -> NoReturn:
    console.error(failure.message)
    if failure.detail:
        console.print(failure.detail, Style.DIM)
    raise typer.Exit(code=int(ErrorCode.USER_ERROR))


def _resolve_config(
    *,
    base_url: str | None,
    tmp_dir: Path | None,
    timeout: float | None,
    trace: bool | None,
) -> Config:
    config_result = load_config()
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if timeout is not None and timeout <= 0:
        typer.echo(f"error: --timeout must be positive, got {timeout}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return config_result.value.with_overrides(
        base_url=base_url,
        tmp_dir=tmp_dir,
        timeout=timeout,
        trace=trace,
    )


@app.command()
def install(
    version: str | None = typer.Argument(
        None,
        help="VS Code Server release version (e.g. 1.89.1).",
        show_default=False,
    ),
    install_dir: Path | None = typer.Argument(
        None,
        help="Install directory [default: $VSI_INSTALL_DIR or ~/.vscode-server]",
        show_default=False,
    ),
    base_url: str | None = typer.Option(
        None,
        "--base-url",
        help="Release download base URL (overrides VSI_BASE_URL).",
    ),
    tmp_dir: Path | None = typer.Option(
        None,
        "--tmp-dir",
        help="Directory for the temporary archive (overrides VSI_TMP_DIR).",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds (overrides VSI_HTTP_TIMEOUT).",
    ),
    trace: bool | None = typer.Option(
        None,
        "--trace/--no-trace",
        help="Print each URL, path and command before use (same as TRACE=1).",
        show_default=False,
    ),
    show_version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Download VS Code Server VERSION, extract it and run `code-latest --patch-now`."""
    if show_version:
        typer.echo(__version__)
        raise typer.Exit(code=int(ErrorCode.OK))

    config = _resolve_config(base_url=base_url, tmp_dir=tmp_dir, timeout=timeout, trace=trace)
    console = RichConsole(trace=config.trace)

    service = ServerInstallService(config=config, console=console)
    result = service.install(version, install_dir.expanduser() if install_dir else None)
    if isinstance(result, Err):
        _exit_with_failure(console, result.error)


def main() -> None:
    app()
