"""Connection registry: live WebSocket connections for one socket mount.

Free-threading safety:
    - A Lock guards the id → connection mapping
    - ``all()`` returns a snapshot, so a broadcast never iterates the
      mapping while an accept or disconnect mutates it
"""

import threading
import uuid
from typing import Generic, TypeVar

T = TypeVar("T")


class ConnectionRegistry(Generic[T]):
    """Maps generated connection ids to transport handles.

    Ids are uuid4 hex strings. Iteration order is insertion order.
    """

    __slots__ = ("_connections", "_lock")

    def __init__(self) -> None:
        self._connections: dict[str, T] = {}
        self._lock = threading.Lock()

    def add(self, handle: T) -> str:
        """Store *handle* under a fresh id and return the id."""
        with self._lock:
            connection_id = uuid.uuid4().hex
            while connection_id in self._connections:
                connection_id = uuid.uuid4().hex
            self._connections[connection_id] = handle
        return connection_id

    def remove(self, connection_id: str) -> None:
        """Forget a connection. Removing an unknown id is a no-op."""
        with self._lock:
            self._connections.pop(connection_id, None)

    def get(self, connection_id: str) -> T | None:
        with self._lock:
            return self._connections.get(connection_id)

    def all(self) -> list[tuple[str, T]]:
        """Snapshot of ``(id, handle)`` pairs in insertion order."""
        with self._lock:
            return list(self._connections.items())

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._connections)

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._connections

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
