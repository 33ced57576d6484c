"""Typed installer settings.

Settings come from the environment only; there is no config file. CLI
options are layered on top with ``Config.with_overrides``.

Environment variables:
    VSI_BASE_URL      release download base URL
    VSI_INSTALL_DIR   install directory (default: $HOME/.vscode-server)
    VSI_TMP_DIR       directory for the temporary archive (default: system temp)
    VSI_HTTP_TIMEOUT  HTTP timeout in seconds (default: 60)
    TRACE             exactly "1" enables debug tracing; any other value is off
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from vsi.core.release import DEFAULT_BASE_URL
from vsi.core.result import Err, Ok, Result
from vsi.core.structured import get_float, get_str
from vsi.platform.paths import default_install_dir, temp_dir

__all__ = [
    "Config",
    "ConfigError",
    "DEFAULT_TIMEOUT",
    "ENV_BASE_URL",
    "ENV_INSTALL_DIR",
    "ENV_TIMEOUT",
    "ENV_TMP_DIR",
    "ENV_TRACE",
    "load_config",
]

ENV_BASE_URL = "VSI_BASE_URL"
ENV_INSTALL_DIR = "VSI_INSTALL_DIR"
ENV_TMP_DIR = "VSI_TMP_DIR"
ENV_TIMEOUT = "VSI_HTTP_TIMEOUT"
ENV_TRACE = "TRACE"

DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when a setting has an invalid value."""

    message: str
    key: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class Config:
    """Installer settings."""

    base_url: str = DEFAULT_BASE_URL
    install_dir: Path = field(default_factory=default_install_dir)
    tmp_dir: Path = field(default_factory=temp_dir)
    timeout: float = DEFAULT_TIMEOUT
    trace: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, object]) -> Config:
        """Create Config from an environment mapping.

        Raises:
            ValueError: If a value cannot be parsed.
        """
        timeout = get_float(environ, ENV_TIMEOUT)
        if timeout is not None and timeout <= 0:
            raise ValueError(f"{ENV_TIMEOUT} must be positive, got {timeout}")

        install_dir = get_str(environ, ENV_INSTALL_DIR)
        tmp_dir = get_str(environ, ENV_TMP_DIR)

        return cls(
            base_url=get_str(environ, ENV_BASE_URL) or DEFAULT_BASE_URL,
            install_dir=Path(install_dir).expanduser() if install_dir else default_install_dir(),
            tmp_dir=Path(tmp_dir).expanduser() if tmp_dir else temp_dir(),
            timeout=timeout if timeout is not None else DEFAULT_TIMEOUT,
            trace=get_str(environ, ENV_TRACE) == "1",
        )

    def with_overrides(
        self,
        *,
        base_url: str | None = None,
        install_dir: Path | None = None,
        tmp_dir: Path | None = None,
        timeout: float | None = None,
        trace: bool | None = None,
    ) -> Config:
        """Return a copy with every non-None argument applied."""
        return replace(
            self,
            base_url=base_url or self.base_url,
            install_dir=install_dir.expanduser() if install_dir else self.install_dir,
            tmp_dir=tmp_dir.expanduser() if tmp_dir else self.tmp_dir,
            timeout=timeout if timeout is not None else self.timeout,
            trace=trace if trace is not None else self.trace,
        )


def _key_for(message: str) -> str | None:
    for key in (ENV_BASE_URL, ENV_INSTALL_DIR, ENV_TMP_DIR, ENV_TIMEOUT, ENV_TRACE):
        if message.startswith(key):
            return key
    return None


def load_config(environ: Mapping[str, object] | None = None) -> Result[Config, ConfigError]:
    """Load settings from the environment.

    Args:
        environ: Mapping to read from (defaults to ``os.environ``)

    Returns:
        Ok(Config) on success, Err(ConfigError) on an invalid value
    """
    env: Mapping[str, object] = os.environ if environ is None else environ
    try:
        return Ok(Config.from_env(env))
    except ValueError as e:
        message = str(e)
        return Err(ConfigError(f"Invalid setting: {message}", key=_key_for(message)))
