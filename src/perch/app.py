"""Perch server.

Aggregates routes from Routers and Sockets into one table, serves static
mounts as a fallback, and speaks ASGI 3.0 to the listener. Mutable during
setup; frozen once it handles traffic or starts listening.
"""

import asyncio
import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch._internal.types import Hook
from perch.config import ServerConfig
from perch.routing.route import Route
from perch.routing.table import RouteTable
from perch.server.handler import handle_request, handle_websocket
from perch.server.listener import Listener
from perch.static import StaticFiles

logger = logging.getLogger("perch.server")


class Server:
    """The perch server.

    Usage::

        api = Router("/api")
        api.get("/health", lambda request: "ok")

        chat = Socket("/chat")

        server = Server()
        server.use(api, chat)
        server.static("./public", "/")

        config = await server.start({"port": 8080})

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one caller compiles the route table.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_listener",
        "_shutdown_hooks",
        "_startup_hooks",
        "_static_mounts",
        "_table",
        "debug",
    )

    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug
        self._table = RouteTable()
        self._static_mounts: list[StaticFiles] = []
        self._startup_hooks: list[Hook] = []
        self._shutdown_hooks: list[Hook] = []
        self._listener: Listener | None = None
        self._frozen = False
        self._freeze_lock = threading.Lock()

    # -- Composition --

    def use(self, *sources: Any) -> "Server":
        """Append the routes of each Router, Socket, or iterable of Route.

        Order matters: for overlapping method+path pairs, routes from an
        earlier ``use`` call win.
        """
        self._check_not_frozen()
        for source in sources:
            routes = source.routes if hasattr(source, "routes") else source
            for route in routes:
                if not isinstance(route, Route):
                    msg = f"use() expects Routers, Sockets, or Routes, got {type(route).__name__}"
                    raise TypeError(msg)
                self._table.register(route)
        return self

    def static(self, local_dir: str | Path, url_prefix: str = "/static") -> StaticFiles:
        """Serve files from *local_dir* under *url_prefix*.

        Consulted only when no route matches. Mounts are tried in
        registration order.
        """
        self._check_not_frozen()
        mount = StaticFiles(local_dir, url_prefix)
        self._static_mounts.append(mount)
        return mount

    @property
    def routes(self) -> list[Route]:
        """The aggregated route table, in precedence order."""
        return self._table.routes

    @property
    def static_mounts(self) -> list[StaticFiles]:
        return list(self._static_mounts)

    # -- Lifecycle hooks --

    def on_startup(self, func: Hook) -> Hook:
        """Register a sync or async hook run before serving begins."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Hook) -> Hook:
        """Register a sync or async hook run after serving stops."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Listener --

    async def start(self, config: ServerConfig | Mapping[str, Any]) -> ServerConfig:
        """Bind the listener and return the effective config once serving.

        *config* may be a ServerConfig or a mapping with at least
        ``port``; unknown keys come back untouched in ``config.extra``.
        With ``port=0`` the returned config carries the bound port.

        Raises ``BindError`` if the address cannot be bound.
        """
        config = ServerConfig.coerce(config)
        if self._listener is not None and self._listener.running:
            msg = "Server is already listening."
            raise RuntimeError(msg)

        self._ensure_frozen()
        listener = Listener(self, config)
        effective = await listener.start()
        self._listener = listener
        return effective

    async def stop(self) -> None:
        """Stop listening and wait for the listener to exit."""
        if self._listener is not None:
            await self._listener.stop()
            self._listener = None

    async def serve(self, config: ServerConfig | Mapping[str, Any]) -> None:
        """Start, then serve until the listener exits (e.g. on SIGINT)."""
        await self.start(config)
        try:
            if self._listener is not None:
                await self._listener.wait()
        finally:
            await self.stop()

    def run(self, config: ServerConfig | Mapping[str, Any]) -> None:
        """Blocking form of ``serve()``."""
        asyncio.run(self.serve(config))

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        scope_type = scope["type"]
        if scope_type == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        if scope_type == "http":
            await handle_request(
                scope,
                receive,
                send,
                table=self._table,
                static_mounts=self._static_mounts,
                debug=self.debug,
            )
        elif scope_type == "websocket":
            await handle_websocket(scope, receive, send, table=self._table)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run startup/shutdown hooks for the ASGI lifespan protocol."""
        self._ensure_frozen()

        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    await self.run_startup_hooks()
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif message["type"] == "lifespan.shutdown":
                await self.run_shutdown_hooks()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def run_startup_hooks(self) -> None:
        for hook in self._startup_hooks:
            await invoke(hook)

    async def run_shutdown_hooks(self) -> None:
        for hook in self._shutdown_hooks:
            await invoke(hook)

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Freeze the route table exactly once (double-checked)."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._table.compile()
            self._frozen = True
            logger.debug(
                "Route table frozen: %d routes, %d static mounts",
                len(self._table),
                len(self._static_mounts),
            )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the server after it has started serving. "
                "Call use(), static(), and hook registration before start()."
            )
            raise RuntimeError(msg)
