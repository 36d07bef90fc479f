"""Tests for perch.routing: Route, RouteTable, Router."""

import pytest

from perch.errors import ConfigurationError, NotFound
from perch.routing.route import Route
from perch.routing.router import Router
from perch.routing.table import RouteTable


def _handler(request) -> str:
    return "ok"


def _other(request) -> str:
    return "other"


class TestRouteTable:
    def test_match_exact(self) -> None:
        table = RouteTable()
        table.register(Route("GET", "/users", _handler))
        assert table.match("GET", "/users").handler is _handler

    def test_first_registered_wins(self) -> None:
        table = RouteTable()
        table.register(Route("GET", "/", _handler))
        table.register(Route("GET", "/", _other))
        assert table.match("GET", "/").handler is _handler

    @pytest.mark.parametrize("path", ["/foo/", "/Foo", "/foo/bar", "/fo", ""])
    def test_exact_path_only(self, path: str) -> None:
        table = RouteTable([Route("GET", "/foo", _handler)])
        with pytest.raises(NotFound):
            table.match("GET", path)

    def test_method_isolation(self) -> None:
        table = RouteTable([Route("POST", "/x", _handler)])
        assert table.match("POST", "/x").handler is _handler
        with pytest.raises(NotFound):
            table.match("GET", "/x")

    def test_not_found_is_404(self) -> None:
        with pytest.raises(NotFound) as exc_info:
            RouteTable().match("GET", "/missing")
        assert exc_info.value.status == 404
        assert "/missing" in exc_info.value.detail

    def test_websocket_routes_separate_from_http(self) -> None:
        table = RouteTable([Route("GET", "/ws", _handler, websocket=True)])
        with pytest.raises(NotFound):
            table.match("GET", "/ws")
        assert table.match("GET", "/ws", websocket=True).handler is _handler

    def test_register_after_compile_raises(self) -> None:
        table = RouteTable()
        table.compile()
        assert table.compiled
        with pytest.raises(RuntimeError, match="after the server has started"):
            table.register(Route("GET", "/", _handler))

    def test_routes_keep_order(self) -> None:
        routes = [Route("GET", "/a", _handler), Route("POST", "/b", _other)]
        table = RouteTable(routes)
        assert table.routes == routes
        assert len(table) == 2


class TestRouter:
    def test_default_prefix_empty(self) -> None:
        router = Router()
        router.get("/", _handler)
        assert router.routes[0].path == "/"

    def test_prefix_applied(self) -> None:
        router = Router("/api")
        router.get("/users", _handler)
        assert router.routes == [Route("GET", "/api/users", _handler)]

    @pytest.mark.parametrize("verb", ["get", "post", "put", "delete", "patch", "options", "head"])
    def test_every_verb(self, verb: str) -> None:
        router = Router()
        getattr(router, verb)("/x", _handler)
        route = router.routes[0]
        assert route.method == verb.upper()
        assert router.match(verb.upper(), "/x") is route

    def test_decorator_form(self) -> None:
        router = Router("/api")

        @router.post("/items")
        def create(request):
            return "created"

        assert create(None) == "created"
        assert router.match("POST", "/api/items").handler is create

    def test_route_decorator_multiple_methods(self) -> None:
        router = Router()

        @router.route("/both", methods=["get", "POST"])
        def both(request):
            return "both"

        assert [r.method for r in router.routes] == ["GET", "POST"]

    def test_route_decorator_defaults_to_get(self) -> None:
        router = Router()
        router.route("/only")(_handler)
        assert router.routes[0].method == "GET"

    def test_unsupported_method(self) -> None:
        with pytest.raises(ConfigurationError, match="TRACE"):
            Router().add("TRACE", "/", _handler)

    def test_websocket_route(self) -> None:
        router = Router("/chat")
        route = router.websocket("", _handler)
        assert route.websocket is True
        assert route.path == "/chat"
        assert route.method == "GET"

    def test_routes_is_a_copy(self) -> None:
        router = Router()
        router.get("/", _handler)
        router.routes.clear()
        assert len(router.routes) == 1

    def test_route_is_frozen(self) -> None:
        route = Route("GET", "/", _handler)
        with pytest.raises(AttributeError):
            route.path = "/other"  # type: ignore[misc]

    def test_router_match(self) -> None:
        router = Router("/api")
        router.get("/a", _handler)
        assert router.match("GET", "/api/a").handler is _handler
        with pytest.raises(NotFound):
            router.match("GET", "/a")
