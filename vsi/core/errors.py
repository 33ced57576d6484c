"""Process exit codes for the installer CLI.

Every fatal condition exits with ``USER_ERROR`` (1). The failure kind is
reported in the message, not in the exit status.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the ``vsi`` command.

    These values are used as process exit codes and must remain stable.
    """

    OK = 0
    USER_ERROR = 1

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
