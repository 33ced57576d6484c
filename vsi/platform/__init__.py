"""Platform abstraction layer.

Provides path lookup and subprocess execution with Result-based errors.
"""

from .paths import (
    INSTALL_DIR_NAME,
    clear_caches,
    default_install_dir,
    home,
    temp_dir,
)
from .process import ProcessError, run_silent

__all__ = [
    # paths
    "INSTALL_DIR_NAME",
    "clear_caches",
    "default_install_dir",
    "home",
    "temp_dir",
    # process
    "ProcessError",
    "run_silent",
]
