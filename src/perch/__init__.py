"""Perch: minimal HTTP and WebSocket routing with a broadcast hub.

Routers bind handlers by method and exact path under a mount prefix;
Sockets keep a registry of WebSocket connections and dispatch JSON
envelopes to event handlers.

Basic usage::

    from perch import Router, Server, Socket

    pages = Router()

    @pages.get("/")
    def index(request):
        return "Hello, World!"

    chat = Socket("/chat")

    @chat.on("say")
    async def say(envelope, connection_id):
        await chat.emit("said", envelope.body, sender=connection_id)

    server = Server().use(pages, chat)
    server.run({"port": 8080})
"""

__version__ = "0.1.0.dev0"
__all__ = [
    "BindError",
    "ConfigurationError",
    "ConnectionRegistry",
    "Envelope",
    "HTTPError",
    "MalformedEnvelope",
    "NotFound",
    "PerchError",
    "Request",
    "Response",
    "Route",
    "Router",
    "Server",
    "ServerConfig",
    "Socket",
    "StaticFileMissing",
    "TransportError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import perch`` fast and avoids importing uvicorn until a
    Server is needed.
    """
    if name == "Server":
        from perch.app import Server

        return Server

    if name == "ServerConfig":
        from perch.config import ServerConfig

        return ServerConfig

    if name in ("Router", "Route"):
        from perch.routing import route as _route
        from perch.routing import router as _router

        return getattr(_router if name == "Router" else _route, name)

    if name in ("Socket", "Envelope", "ConnectionRegistry"):
        from perch.realtime import envelope as _envelope
        from perch.realtime import registry as _registry
        from perch.realtime import socket as _socket

        module = {"Socket": _socket, "Envelope": _envelope, "ConnectionRegistry": _registry}[name]
        return getattr(module, name)

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name in (
        "BindError",
        "ConfigurationError",
        "HTTPError",
        "MalformedEnvelope",
        "NotFound",
        "PerchError",
        "StaticFileMissing",
        "TransportError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
