"""Ordered route table with exact-path matching.

Routes are appended during setup and frozen when the server starts.
Matching scans in registration order and the first hit wins, so the
order of ``Server.use()`` calls decides precedence for overlapping paths.
"""

from collections.abc import Iterable, Iterator

from perch.errors import NotFound
from perch.routing.route import Route


class RouteTable:
    """Ordered sequence of routes.

    Usage::

        table = RouteTable()
        table.register(Route("GET", "/users", list_users))
        table.compile()
        route = table.match("GET", "/users")
    """

    __slots__ = ("_compiled", "_routes")

    def __init__(self, routes: Iterable[Route] = ()) -> None:
        self._routes: list[Route] = list(routes)
        self._compiled = False

    def register(self, route: Route) -> None:
        """Append a route. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after the server has started."
            raise RuntimeError(msg)
        self._routes.append(route)

    def compile(self) -> None:
        """Freeze the table. No more routes can be added."""
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def match(self, method: str, path: str, *, websocket: bool = False) -> Route:
        """Return the first route registered for *method* and *path*.

        Raises ``NotFound`` if nothing matches. A path registered only
        for other methods is also ``NotFound``.
        """
        for route in self._routes:
            if route.matches(method, path, websocket=websocket):
                return route
        kind = "WEBSOCKET" if websocket else method
        raise NotFound(f"No route matches {kind} {path!r}")

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)
