"""HTTP response with a chainable ``.with_*()`` API.

Each transformation returns a new Response. Handlers may return a
Response directly, or a ``str``, ``bytes``, ``dict``/``list`` (JSON), or
``(body, status)`` tuple which ``to_response`` converts.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/plain; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> "Response":
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "Response":
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> "Response":
        return replace(self, headers=(*self.headers, *headers.items()))

    def with_content_type(self, content_type: str) -> "Response":
        return replace(self, content_type=content_type)

    @classmethod
    def json(cls, data: Any, status: int = 200) -> "Response":
        """Serialize *data* as a JSON response."""
        return cls(body=json.dumps(data), status=status, content_type="application/json")

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first header value named *name* (case-insensitive)."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return default

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


def to_response(result: Any) -> Response:
    """Convert a handler return value into a Response.

    Raises ``TypeError`` for values that have no HTTP representation.
    """
    if isinstance(result, Response):
        return result
    if isinstance(result, tuple) and len(result) == 2 and isinstance(result[1], int):
        return to_response(result[0]).with_status(result[1])
    if result is None:
        return Response(status=204)
    if isinstance(result, str):
        return Response(body=result)
    if isinstance(result, bytes):
        return Response(body=result, content_type="application/octet-stream")
    if isinstance(result, (dict, list)):
        return Response.json(result)
    msg = f"Cannot convert {type(result).__name__} to a response."
    raise TypeError(msg)
