from __future__ import annotations

from typing import Optional


class LifxError(Exception):
    """Base class for every error raised by the LIFX command layer."""


class ParseError(LifxError):
    """A command argument could not be converted to the expected type."""

    def __init__(self, argument: str, value: str, expected: str = "number"):
        self.argument = argument
        self.value = value
        self.expected = expected
        super().__init__(f"Can't parse {argument} {value!r} as a {expected}")


class UsageError(LifxError):
    """A known command was invoked with missing or malformed arguments."""


class UnsupportedCommandError(LifxError):
    def __init__(self, command: Optional[str]):
        self.command = command
        super().__init__(f"Unsupported command: {command!r}" if command else "No command given")


class TransportError(LifxError):
    """The HTTP exchange could not be completed (connectivity, DNS, TLS, timeout)."""

    def __init__(self, method: str, url: str, cause: Exception):
        self.method = method
        self.url = url
        self.cause = cause
        super().__init__(f"{method} {url} failed: {cause}")


class ServiceError(LifxError):
    """The service answered with a non-2xx status."""

    def __init__(self, status_code: int, body: bytes = b""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {self.text}")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace").strip()


class DecodeError(LifxError):
    """A response body did not have the expected shape."""

    def __init__(self, reason: str, body: bytes = b""):
        self.reason = reason
        self.body = body
        super().__init__(f"Can't decode response: {reason}")
