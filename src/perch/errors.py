"""Perch exception hierarchy.

Shared across the route table, server, static mounts, and sockets so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when server configuration or route registration is invalid."""


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by the route table, static mounts, or handlers. The ASGI
    handler catches these and turns them into a plain-text response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request method and path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class StaticFileMissing(NotFound):
    """404: a static mount matched the prefix but no file exists."""


class MalformedEnvelope(PerchError):
    """A WebSocket frame is not a JSON object of the envelope shape.

    The frame is dropped; the connection stays open.
    """


class TransportError(PerchError):
    """Sending to or receiving from a WebSocket connection failed.

    The connection is removed from its registry.
    """


class BindError(PerchError):
    """The listener could not bind the configured host and port."""

    def __init__(self, host: str, port: int, reason: str = "") -> None:
        self.host = host
        self.port = port
        super().__init__(f"cannot bind {host}:{port}" + (f" ({reason})" if reason else ""))
