"""Console output abstraction.

Services report progress through ``ConsoleProtocol`` instead of printing
directly, so that tests can capture output with ``MockConsole`` and the
CLI can render it with Rich. Errors, warnings and dimmed diagnostics go
to stderr, everything else to stdout. ``debug`` lines are only shown when
tracing is enabled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()  # Green, positive message
    ERROR = auto()  # Red, fatal error
    WARNING = auto()  # Yellow, non-fatal problem
    INFO = auto()  # Cyan, progress step
    DIM = auto()  # Muted detail / trace

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling.

        Args:
            message: The text to print
            style: The style to apply
        """
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def debug(self, message: str) -> None:
        """Print a trace line; a no-op unless tracing is enabled."""
        ...


class RichConsole:
    """Console implementation using the Rich library.

    Args:
        trace: Show ``debug`` lines (the ``TRACE=1`` toggle)
    """

    def __init__(self, *, trace: bool = False) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console
        from rich.text import Text

        self.trace = trace
        self._text = Text
        self._out = Console()
        self._err = Console(stderr=True)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
        }

    def _target(self, style: Style) -> Console:
        return self._err if style in (Style.ERROR, Style.WARNING, Style.DIM) else self._out

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        console = self._target(style)
        # Paths and URLs may contain "[", which Rich would parse as markup.
        if rich_style:
            console.print(message, style=rich_style, markup=False, highlight=False)
        else:
            console.print(message, markup=False, highlight=False)

    def success(self, message: str) -> None:
        self._out.print(self._text.assemble(("OK", "green"), " ", message))

    def error(self, message: str) -> None:
        self._err.print(self._text.assemble(("error:", "red bold"), " ", message))

    def warning(self, message: str) -> None:
        self._err.print(self._text.assemble(("warning:", "yellow"), " ", message))

    def info(self, message: str) -> None:
        self._out.print(self._text.assemble(("info:", "cyan"), " ", message))

    def debug(self, message: str) -> None:
        if self.trace:
            self._err.print(f"+ {message}", style="dim", markup=False, highlight=False)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing.

    Debug lines are always captured, regardless of ``trace``.
    """

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def debug(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"+ {message}", Style.DIM))

    # Test helper methods

    def clear(self) -> None:
        """Clear all captured output."""
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        """Get all output messages as a list of strings."""
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        """Get all output as a single newline-separated string."""
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def has_success(self) -> bool:
        return any(o.style == Style.SUCCESS for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]
