"""Route frozen dataclass."""

from dataclasses import dataclass

from perch._internal.types import Handler

HTTP_METHODS: frozenset[str] = frozenset(
    {"GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD"}
)


@dataclass(frozen=True, slots=True)
class Route:
    """A (method, path, handler) binding.

    ``path`` is the fully-qualified path (mount prefix already applied).
    WebSocket upgrade routes carry ``websocket=True`` and method ``GET``;
    their handler receives the accepted connection instead of a Request.
    """

    method: str
    path: str
    handler: Handler
    websocket: bool = False

    def matches(self, method: str, path: str, *, websocket: bool = False) -> bool:
        """Exact, case-sensitive comparison: no parameters, no wildcards."""
        return self.websocket == websocket and self.method == method and self.path == path
