"""HTTP client abstraction for release downloads.

This module provides:
- HttpClient: Protocol for HTTP downloads (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing

A download only succeeds when the whole body arrived. A connection that
drops mid-transfer is reported like any other transport failure, whether
the server sent a ``Content-Length`` or used chunked encoding.
"""

from __future__ import annotations

import http.client
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable

from vsi import __version__
from vsi.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "RealHttpClient",
    "MockHttpClient",
    "HttpError",
    "MAX_ERROR_BODY",
]

# Bytes of an error response body kept for diagnostics
MAX_ERROR_BODY = 2048

_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        body: Start of the response body for HTTP errors, if any
    """

    url: str
    status: int
    message: str
    body: str | None = None

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Anything that can fetch a URL into a file."""

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Download URL to ``dest``, following redirects.

        Returns:
            Ok with dest path, or Err with HttpError
        """
        ...


def _error_body(error: urllib.error.HTTPError) -> str | None:
    try:
        raw = error.read(MAX_ERROR_BODY)
    except (OSError, http.client.HTTPException):
        return None
    if not raw:
        return None
    return raw.decode("utf-8", errors="replace").strip() or None


def _expected_length(response: http.client.HTTPResponse) -> int | None:
    """Declared body size, or None for chunked / unknown-length responses."""
    value = response.headers.get("Content-Length")
    if value is None or not value.strip().isdigit():
        return None
    return int(value)


def _copy_body(response: http.client.HTTPResponse, out: BinaryIO) -> int:
    received = 0
    while chunk := response.read(_CHUNK_SIZE):
        out.write(chunk)
        received += len(chunk)
    return received


class RealHttpClient:
    """urllib-backed client.

    GitHub release assets answer with a redirect to a CDN; urllib follows
    it. TLS uses the system certificate store.
    """

    def __init__(self, timeout: float = 60.0, user_agent: str = f"vsi/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Stream ``url`` into ``dest``.

        Returns:
            Ok(dest) once the full body is on disk, or Err(HttpError) for an
            error status, a transport failure or a truncated body
        """
        try:
            request = urllib.request.Request(url, headers={"User-Agent": self.user_agent})
            with urllib.request.urlopen(
                request, timeout=self.timeout, context=self._ssl_context
            ) as response:
                expected = _expected_length(response)
                dest.parent.mkdir(parents=True, exist_ok=True)
                with dest.open("wb") as out:
                    received = _copy_body(response, out)
        except urllib.error.HTTPError as e:
            return Err(
                HttpError(url=url, status=e.code, message=str(e.reason), body=_error_body(e))
            )
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Download timed out"))
        except http.client.IncompleteRead as e:
            missing = f"{e.expected} bytes remaining" if e.expected else "more data expected"
            return Err(HttpError(url=url, status=0, message=f"Transfer closed with {missing}"))
        except http.client.HTTPException as e:
            return Err(HttpError(url=url, status=0, message=f"Transfer failed: {e!r}"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

        if expected is not None and received != expected:
            return Err(
                HttpError(
                    url=url,
                    status=0,
                    message=f"Transfer closed with {expected - received} bytes remaining",
                )
            )
        return Ok(dest)


class MockHttpClient:
    """In-memory client for tests.

    Usage:
        client = MockHttpClient()
        client.set_download("https://example.com/a.tar.gz", b"...")
        result = client.download("https://example.com/a.tar.gz", tmp_path / "a.tar.gz")
    """

    def __init__(self) -> None:
        self._responses: dict[str, bytes | HttpError] = {}
        self.calls: list[tuple[str, str]] = []

    def set_download(self, url: str, response: bytes | HttpError) -> None:
        """Serve ``response`` (content or failure) for ``url``."""
        self._responses[url] = response

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        self.calls.append(("download", url))

        match self._responses.get(url):
            case None:
                return Err(HttpError(url=url, status=404, message="Not Found (mock)"))
            case HttpError() as error:
                return Err(error)
            case bytes() as content:
                dest.parent.mkdir(parents=True, exist_ok=True)
                dest.write_bytes(content)
                return Ok(dest)
