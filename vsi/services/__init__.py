# SPDX-License-Identifier: MIT
"""Application services for the installer CLI.

Services implement the install workflow, coordinating between the domain
layer (core/) and infrastructure (tools/, platform/).
"""

from vsi.services.server_install import (
    FailureKind,
    InstallFailure,
    InstallReport,
    PatchRunner,
    ServerInstallService,
)

__all__ = [
    "FailureKind",
    "InstallFailure",
    "InstallReport",
    "PatchRunner",
    "ServerInstallService",
]
