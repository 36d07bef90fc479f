"""Error mapping for HTTP requests.

Maps HTTPError exceptions and unexpected failures to plain-text
responses. Errors never escape a single request.
"""

import logging

from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response

logger = logging.getLogger("perch.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError (404s included) to a Response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    response = Response(body=exc.detail or f"Error {exc.status}", status=exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(exc: Exception, request: Request, *, debug: bool = False) -> Response:
    """Handle an unexpected handler exception as a 500."""
    logger.exception("500 %s %s", request.method, request.path)
    if debug:
        return Response(body=f"Internal Server Error: {type(exc).__name__}: {exc}", status=500)
    return Response(body="Internal Server Error", status=500)
