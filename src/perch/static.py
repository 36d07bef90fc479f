"""Static file mounts.

A mount serves files from a directory for requests under a URL prefix.
The server consults mounts only after the route table has no match.
"""

import logging
import mimetypes
from pathlib import Path

from anyio import to_thread

from perch.errors import StaticFileMissing
from perch.http.request import Request
from perch.http.response import Response

logger = logging.getLogger("perch.static")


class StaticFiles:
    """Serve files from *directory* for paths under *prefix*.

    Security: resolves symlinks and verifies the final path is within the
    configured directory; anything outside gets a 403.

    Usage::

        server.static("./public", "/assets")
    """

    __slots__ = ("_cache_control", "_directory", "_index", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/static",
        *,
        index: str = "index.html",
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._index = index
        self._cache_control = cache_control

        # Leading slash, no trailing slash; the root prefix becomes ""
        stripped = "/" + prefix.strip("/")
        self._prefix = stripped if stripped != "/" else ""

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def prefix(self) -> str:
        return self._prefix or "/"

    def handles(self, request: Request) -> bool:
        """True if this mount is responsible for the request path."""
        if request.method not in ("GET", "HEAD"):
            return False
        if not self._prefix:
            return True
        return request.path == self._prefix or request.path.startswith(self._prefix + "/")

    async def __call__(self, request: Request) -> Response:
        """Serve the file for *request*.

        Raises ``StaticFileMissing`` if nothing exists at the mapped path.
        """
        relative = request.path[len(self._prefix) :].lstrip("/")
        try:
            file_path = (self._directory / relative).resolve() if relative else self._directory
            if not file_path.is_relative_to(self._directory):
                logger.warning("Refusing static path outside %s: %r", self._directory, request.path)
                return Response(body="Forbidden", status=403)
            if file_path.is_dir():
                file_path = file_path / self._index
            found = file_path.is_file()
        except (ValueError, OSError):
            # Embedded NUL bytes, names too long for the filesystem
            found = False
        if not found:
            raise StaticFileMissing(f"No file for {request.path!r} under {self._directory}")

        body = await to_thread.run_sync(file_path.read_bytes)
        content_type, _ = mimetypes.guess_type(str(file_path))
        response = Response(
            body=b"" if request.method == "HEAD" else body,
            content_type=content_type or "application/octet-stream",
        )
        return response.with_header("Cache-Control", self._cache_control)

    def __repr__(self) -> str:
        return f"StaticFiles({str(self._directory)!r}, prefix={self.prefix!r})"
