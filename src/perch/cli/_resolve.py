"""Server import resolution: ``"module:attribute"`` → Server instance."""

import importlib

from perch.app import Server


def resolve_server(import_string: str) -> Server:
    """Resolve an import string to a perch Server.

    Accepts ``"module:attribute"``; the attribute defaults to ``"server"``.
    If the attribute is a callable other than a Server it is treated as a
    factory and called with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the result is not a perch ``Server``.
    """
    module_path, _, attr_name = import_string.partition(":")
    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name or "server")

    if callable(obj) and not isinstance(obj, Server):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Server):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a perch.Server"
        raise TypeError(msg)

    return obj
