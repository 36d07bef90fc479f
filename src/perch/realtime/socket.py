"""Socket: event dispatch and broadcast for one WebSocket mount.

A Socket owns a Router holding a single WebSocket route, a
ConnectionRegistry, and a map of event handlers::

    chat = Socket("/chat")

    @chat.on("say")
    async def say(envelope, connection_id):
        await chat.emit("said", envelope.body, sender=connection_id)

    server.use(chat)

Each connection runs its own receive loop, so frames from one client are
handled strictly in order while other connections proceed independently.
"""

import logging
from collections.abc import Callable

from perch._internal.invoke import invoke
from perch._internal.types import EventHandler
from perch.errors import MalformedEnvelope, TransportError
from perch.realtime.envelope import Envelope
from perch.realtime.registry import ConnectionRegistry
from perch.realtime.websocket import WebSocket
from perch.routing.route import Route
from perch.routing.router import Router

logger = logging.getLogger("perch.socket")


class Socket:
    """Broadcast hub mounted at one WebSocket path."""

    __slots__ = ("_handlers", "_registry", "_router")

    def __init__(self, path: str) -> None:
        self._router = Router(path)
        self._router.websocket("", self._serve)
        self._registry: ConnectionRegistry[WebSocket] = ConnectionRegistry()
        self._handlers: dict[str, EventHandler] = {}

    @property
    def path(self) -> str:
        return self._router.prefix

    @property
    def routes(self) -> list[Route]:
        """The single upgrade route, for ``Server.use()``."""
        return self._router.routes

    @property
    def connections(self) -> ConnectionRegistry[WebSocket]:
        return self._registry

    # -- Handlers --

    def on(
        self,
        event: str,
        handler: EventHandler | None = None,
    ) -> EventHandler | Callable[[EventHandler], EventHandler]:
        """Register the handler for *event*, replacing any earlier one.

        Handlers are called as ``handler(envelope, connection_id)`` and
        may be sync or async. Works as a decorator when *handler* is
        omitted.
        """
        if handler is not None:
            self._handlers[event] = handler
            return handler

        def decorator(func: EventHandler) -> EventHandler:
            self._handlers[event] = func
            return func

        return decorator

    # -- Emit --

    async def emit(
        self,
        event: str,
        body: object = None,
        *,
        to: str | None = None,
        sender: str | None = None,
    ) -> int:
        """Send an envelope and return how many connections received it.

        With *to*, only that connection is addressed; an unknown id is a
        silent no-op. Without it, every registered connection receives
        the envelope, including the one named by *sender*.
        """
        envelope = Envelope(event=event, body=body, to=to, sender=sender)
        frame = envelope.encode()

        if to is not None:
            target = self._registry.get(to)
            if target is None:
                logger.debug("emit %r to unknown connection %s dropped", event, to)
                return 0
            targets = [(to, target)]
        else:
            targets = self._registry.all()

        delivered = 0
        for connection_id, websocket in targets:
            try:
                await websocket.send_text(frame)
            except TransportError as exc:
                logger.debug("send to %s failed: %s", connection_id, exc)
                self._registry.remove(connection_id)
                continue
            delivered += 1
        return delivered

    # -- Connection loop --

    async def _serve(self, websocket: WebSocket) -> None:
        """Accept, register, and pump frames until the peer goes away."""
        await websocket.accept()
        connection_id = self._registry.add(websocket)
        logger.debug("%s connected on %s", connection_id, self.path)
        try:
            while True:
                frame = await websocket.receive_frame()
                if frame is None:
                    break
                await self._dispatch(frame, connection_id)
        except TransportError as exc:
            logger.debug("%s transport error: %s", connection_id, exc)
        finally:
            self._registry.remove(connection_id)
            logger.debug("%s disconnected from %s", connection_id, self.path)

    async def _dispatch(self, frame: str | bytes, connection_id: str) -> None:
        try:
            envelope = Envelope.decode(frame)
        except MalformedEnvelope as exc:
            logger.warning("Dropping frame from %s: %s", connection_id, exc)
            return

        handler = self._handlers.get(envelope.event) if envelope.event is not None else None
        if handler is None:
            logger.debug("No handler for event %r on %s", envelope.event, self.path)
            return

        # Error boundary: one failing handler must not end the session
        try:
            await invoke(handler, envelope, connection_id)
        except Exception:
            logger.exception("Handler for event %r failed (%s)", envelope.event, connection_id)

    def __repr__(self) -> str:
        return f"Socket(path={self.path!r}, connections={len(self._registry)})"
