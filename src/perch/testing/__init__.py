"""Test utilities for perch servers.

::

    from perch.testing import TestClient
"""

from perch.testing.client import TestClient, WebSocketRejected, WebSocketSession

__all__ = [
    "TestClient",
    "WebSocketRejected",
    "WebSocketSession",
]
