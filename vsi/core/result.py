"""Result type for explicit error handling.

Every step of an install can fail in a known way (bad version, HTTP error,
corrupt archive, failing subprocess). Instead of raising, infrastructure
functions return ``Ok(value)`` or ``Err(error)`` and the caller decides.

Usage:
    result = client.download(url, dest)
    match result:
        case Ok(path):
            print(f"saved to {path}")
        case Err(error):
            print(f"download failed: {error}")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome.

    Attributes:
        value: The success value.
    """

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome.

    Attributes:
        error: The error value.
    """

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
