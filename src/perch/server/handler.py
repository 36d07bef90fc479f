"""ASGI handler: the single entry point for every connection.

The only component that touches raw ASGI scopes. HTTP scopes become a
Request and go route table → static mounts → 404; WebSocket scopes are
matched against upgrade routes and handed to their Socket.
"""

import logging
from collections.abc import Sequence

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch.errors import HTTPError, NotFound, StaticFileMissing, TransportError
from perch.http.request import Request
from perch.http.response import Response, to_response
from perch.realtime.websocket import WebSocket
from perch.routing.table import RouteTable
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.sender import send_response
from perch.static import StaticFiles

logger = logging.getLogger("perch.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    table: RouteTable,
    static_mounts: Sequence[StaticFiles] = (),
    debug: bool = False,
) -> None:
    """Process a single HTTP request."""
    request = Request.from_asgi(scope, receive)

    try:
        response = await dispatch(request, table=table, static_mounts=static_mounts)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)

    await send_response(response, send)


async def dispatch(
    request: Request,
    *,
    table: RouteTable,
    static_mounts: Sequence[StaticFiles] = (),
) -> Response:
    """Resolve *request* to a Response.

    Raises ``NotFound`` (or ``StaticFileMissing``) when neither a route
    nor a static file answers.
    """
    try:
        route = table.match(request.method, request.path)
    except NotFound as not_found:
        missing: NotFound = not_found
    else:
        return to_response(await invoke(route.handler, request))

    for mount in static_mounts:
        if not mount.handles(request):
            continue
        try:
            return await mount(request)
        except StaticFileMissing as exc:
            missing = exc
    raise missing


async def handle_websocket(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    table: RouteTable,
) -> None:
    """Hand a WebSocket scope to the upgrade route for its path.

    Unmatched paths are rejected before the handshake completes.
    """
    websocket = WebSocket(scope, receive, send)
    try:
        route = table.match("GET", websocket.path, websocket=True)
    except NotFound:
        logger.debug("WEBSOCKET %s rejected: no socket mounted", websocket.path)
        await websocket.close(code=1008)
        return

    try:
        await invoke(route.handler, websocket)
    except TransportError as exc:
        logger.debug("WEBSOCKET %s closed during handshake: %s", websocket.path, exc)
    except Exception:
        logger.exception("WEBSOCKET %s handler failed", websocket.path)
        await websocket.close(code=1011)
