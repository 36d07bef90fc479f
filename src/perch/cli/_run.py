"""``perch run``: resolve a Server and serve it until interrupted."""

import argparse
import logging
import sys

from perch.cli._resolve import resolve_server
from perch.config import ServerConfig
from perch.errors import PerchError


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.server`` and run it with the CLI's host and port.

    Import errors and bind failures print to stderr and exit 1.
    """
    try:
        server = resolve_server(args.server)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logging.basicConfig(
        level=args.log_level.upper() if args.log_level != "trace" else logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ServerConfig(host=args.host, port=args.port, log_level=args.log_level)
    try:
        server.run(config)
    except PerchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
