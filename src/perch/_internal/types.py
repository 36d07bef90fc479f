"""Shared type aliases used across perch modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# HTTP route handler: receives the Request, returns a response value
Handler: TypeAlias = Callable[..., Any]

# Socket event handler: receives (envelope, connection_id)
EventHandler: TypeAlias = Callable[..., Any]

# Lifecycle hook: no arguments
Hook: TypeAlias = Callable[[], Any]
