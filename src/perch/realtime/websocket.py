"""WebSocket connection over ASGI.

Thin wrapper around the ASGI ``websocket.*`` messages. The upgrade
handshake itself belongs to the ASGI server; this class only speaks the
message protocol::

    CONNECTING ── accept() ──> CONNECTED ── disconnect / close() ──> DISCONNECTED

Transport failures surface as ``TransportError`` so callers have a
single exception to catch.
"""

import contextlib
from enum import IntEnum

from perch._internal.asgi import Receive, Scope, Send
from perch.errors import TransportError
from perch.http.headers import Headers


class WebSocketState(IntEnum):
    CONNECTING = 0
    CONNECTED = 1
    DISCONNECTED = 2


class WebSocket:
    """One WebSocket connection, the transport handle kept by a registry."""

    __slots__ = ("_receive", "_send", "client", "headers", "path", "state")

    def __init__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "websocket":
            msg = f"Expected scope type 'websocket', got {scope.get('type')!r}"
            raise ValueError(msg)
        self._receive = receive
        self._send = send
        self.path: str = scope["path"]
        self.headers = Headers(tuple(scope.get("headers", ())))
        client = scope.get("client")
        self.client: tuple[str, int] | None = tuple(client) if client else None
        self.state = WebSocketState.CONNECTING

    async def accept(self) -> None:
        """Complete the handshake.

        Consumes ``websocket.connect`` and replies ``websocket.accept``.
        Raises ``TransportError`` if the client went away first.
        """
        if self.state is not WebSocketState.CONNECTING:
            msg = "accept() called twice"
            raise RuntimeError(msg)
        message = await self._receive()
        if message["type"] != "websocket.connect":
            self.state = WebSocketState.DISCONNECTED
            msg = f"expected websocket.connect, got {message['type']}"
            raise TransportError(msg)
        await self._transmit({"type": "websocket.accept"})
        self.state = WebSocketState.CONNECTED

    async def receive_frame(self) -> str | bytes | None:
        """Return the next frame payload, or ``None`` once disconnected."""
        if self.state is not WebSocketState.CONNECTED:
            return None
        try:
            message = await self._receive()
        except (OSError, RuntimeError) as exc:
            self.state = WebSocketState.DISCONNECTED
            raise TransportError(str(exc)) from exc

        if message["type"] == "websocket.disconnect":
            self.state = WebSocketState.DISCONNECTED
            return None
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def send_text(self, text: str) -> None:
        if self.state is not WebSocketState.CONNECTED:
            msg = "send on a closed connection"
            raise TransportError(msg)
        await self._transmit({"type": "websocket.send", "text": text})

    async def close(self, code: int = 1000) -> None:
        """Close the connection. No-op if already closed."""
        if self.state is WebSocketState.DISCONNECTED:
            return
        self.state = WebSocketState.DISCONNECTED
        # Peer may already be gone
        with contextlib.suppress(OSError, RuntimeError):
            await self._send({"type": "websocket.close", "code": code})

    async def _transmit(self, message: dict) -> None:
        try:
            await self._send(message)
        except (OSError, RuntimeError) as exc:
            self.state = WebSocketState.DISCONNECTED
            raise TransportError(str(exc)) from exc
