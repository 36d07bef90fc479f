"""Listener: binds the socket and runs uvicorn with the perch Server.

The listening socket is bound here, before uvicorn sees it, so a port
conflict surfaces as ``BindError`` from ``start()`` instead of uvicorn's
``sys.exit``. ``Listener.start()`` returns once uvicorn reports it is
serving.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import socket

import uvicorn

from perch.config import ServerConfig
from perch.errors import BindError, PerchError

logger = logging.getLogger("perch.server")

_POLL_INTERVAL = 0.01


def bind_socket(host: str, port: int) -> socket.socket:
    """Create and bind a TCP socket. Raises ``BindError`` on failure."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        raise BindError(host, port, exc.strerror or str(exc)) from exc
    sock.set_inheritable(True)
    return sock


class Listener:
    """One running uvicorn server on a pre-bound socket."""

    __slots__ = ("_server", "_socket", "_task", "config")

    def __init__(self, app: object, config: ServerConfig) -> None:
        self.config = config
        self._socket: socket.socket | None = None
        self._task: asyncio.Task[None] | None = None
        self._server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=config.host,
                port=config.port,
                log_level=config.log_level,
                log_config=None,
                lifespan=config.lifespan,
                backlog=config.backlog,
            )
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> ServerConfig:
        """Bind, start serving, and return the effective config.

        Raises ``BindError`` if the address is unavailable and
        ``PerchError`` if uvicorn exits before it starts serving (for
        example a failed lifespan startup hook).
        """
        self._socket = bind_socket(self.config.host, self.config.port)
        bound_port = self._socket.getsockname()[1]
        self.config = self.config.with_port(bound_port)

        self._task = asyncio.create_task(self._serve(self._socket))
        while not self._server.started:
            if self._task.done():
                self._close_socket()
                exc = self._task.exception()
                msg = f"server exited during startup on {self.config.host}:{bound_port}"
                raise PerchError(msg) from exc
            await asyncio.sleep(_POLL_INTERVAL)

        logger.info("Listening on http://%s:%d", self.config.host, bound_port)
        return self.config

    async def _serve(self, sock: socket.socket) -> None:
        # uvicorn calls sys.exit() when lifespan startup fails
        try:
            await self._server.serve(sockets=[sock])
        except SystemExit as exc:
            msg = f"listener exited with status {exc.code}"
            raise PerchError(msg) from exc

    async def stop(self) -> None:
        """Ask uvicorn to exit and wait for open connections to finish."""
        if self._task is None:
            return
        self._server.should_exit = True
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self._close_socket()

    async def wait(self) -> None:
        """Block until the server exits."""
        if self._task is not None:
            await self._task

    def _close_socket(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None

