"""Router: per-verb registration API over a RouteTable.

A Router binds handlers under one mount prefix. The effective path of
every route is ``prefix + path``, concatenated verbatim. Routers are
composed into a Server with ``server.use(router)``.
"""

from collections.abc import Callable

from perch._internal.types import Handler
from perch.errors import ConfigurationError
from perch.routing.route import HTTP_METHODS, Route
from perch.routing.table import RouteTable


class Router:
    """Mount-prefixed route registration.

    Every verb method works both as a direct call and as a decorator::

        api = Router("/api")

        api.get("/health", health)

        @api.post("/items")
        async def create_item(request):
            return {"created": await request.json()}
    """

    __slots__ = ("_table", "prefix")

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix
        self._table = RouteTable()

    def add(self, method: str, path: str, handler: Handler) -> Route:
        """Register *handler* for *method* at ``prefix + path``."""
        method = method.upper()
        if method not in HTTP_METHODS:
            msg = f"Unsupported HTTP method {method!r}."
            raise ConfigurationError(msg)
        route = Route(method=method, path=self.prefix + path, handler=handler)
        self._table.register(route)
        return route

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a handler for several methods via decorator.

        ``methods`` defaults to ``["GET"]``.
        """

        def decorator(func: Handler) -> Handler:
            for method in methods or ["GET"]:
                self.add(method, path, func)
            return func

        return decorator

    def _verb(self, method: str, path: str, handler: Handler | None) -> Handler | Callable[[Handler], Handler]:
        if handler is not None:
            self.add(method, path, handler)
            return handler
        return self.route(path, methods=[method])

    def get(self, path: str, handler: Handler | None = None):
        return self._verb("GET", path, handler)

    def post(self, path: str, handler: Handler | None = None):
        return self._verb("POST", path, handler)

    def put(self, path: str, handler: Handler | None = None):
        return self._verb("PUT", path, handler)

    def delete(self, path: str, handler: Handler | None = None):
        return self._verb("DELETE", path, handler)

    def patch(self, path: str, handler: Handler | None = None):
        return self._verb("PATCH", path, handler)

    def options(self, path: str, handler: Handler | None = None):
        return self._verb("OPTIONS", path, handler)

    def head(self, path: str, handler: Handler | None = None):
        return self._verb("HEAD", path, handler)

    def websocket(self, path: str, handler: Handler) -> Route:
        """Register a WebSocket upgrade route at ``prefix + path``.

        *handler* is awaited with the accepted
        :class:`~perch.realtime.websocket.WebSocket`.
        """
        route = Route(method="GET", path=self.prefix + path, handler=handler, websocket=True)
        self._table.register(route)
        return route

    def match(self, method: str, path: str, *, websocket: bool = False) -> Route:
        """Match against this router's own routes. Raises ``NotFound``."""
        return self._table.match(method, path, websocket=websocket)

    @property
    def routes(self) -> list[Route]:
        """Fully-qualified routes in registration order."""
        return self._table.routes

    def __repr__(self) -> str:
        return f"Router(prefix={self.prefix!r}, routes={len(self._table)})"
