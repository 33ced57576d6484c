"""Subprocess execution with Result-based error handling.

Output is not captured; it streams to the terminal and only the exit
status is inspected.

Usage:
    result = run_silent(["/opt/code-latest", "--patch-now"], cwd=install_dir)
    match result:
        case Ok(None):
            print("patched")
        case Err(error):
            print(f"Failed: {error}")
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from vsi.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run_silent"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code of the process (-1 if it could not be started).
        stderr: Error details when the process could not be started.
    """

    command: tuple[str, ...]
    returncode: int
    stderr: str = ""

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if self.returncode == -1 and self.stderr:
            return f"{cmd_str} could not be started: {self.stderr}"
        return f"{cmd_str} failed (exit {self.returncode})"


def run_silent(cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
    """Execute a command, letting its output stream to the terminal.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.

    Returns:
        Ok(None) on success, Err(ProcessError) on non-zero exit or if the
        command could not be spawned.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), check=False)
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stderr=str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(command=tuple(cmd), returncode=proc.returncode))

    return Ok(None)
