"""Envelope: the JSON message exchanged over socket connections.

One envelope per WebSocket frame::

    {"event": "chat", "body": {"text": "hi"}, "to": "3f2a...", "from": "9c1b..."}

``event`` selects the handler. ``to`` addresses a single connection on
emit; without it the envelope is broadcast. ``from`` is carried as
metadata only and is exposed as ``sender`` (``from`` is a keyword).
"""

import json
from dataclasses import dataclass
from typing import Any

from perch.errors import MalformedEnvelope

_ADDRESS_FIELDS = ("event", "to", "from")


@dataclass(frozen=True, slots=True)
class Envelope:
    """A single socket message."""

    event: str | None = None
    body: Any = None
    to: str | None = None
    sender: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire form. ``None`` addressing fields are omitted."""
        data: dict[str, Any] = {}
        if self.event is not None:
            data["event"] = self.event
        data["body"] = self.body
        if self.to is not None:
            data["to"] = self.to
        if self.sender is not None:
            data["from"] = self.sender
        return data

    def encode(self) -> str:
        """Serialize to one JSON document."""
        return json.dumps(self.to_dict())

    @classmethod
    def decode(cls, raw: str | bytes) -> "Envelope":
        """Parse one frame.

        Raises ``MalformedEnvelope`` if the frame is not UTF-8 JSON, is
        not an object, or carries a non-string ``event``/``to``/``from``.
        """
        try:
            text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            data = json.loads(text)
        except (UnicodeDecodeError, ValueError) as exc:
            msg = f"frame is not valid JSON: {exc}"
            raise MalformedEnvelope(msg) from exc

        if not isinstance(data, dict):
            msg = f"frame must be a JSON object, got {type(data).__name__}"
            raise MalformedEnvelope(msg)
        for key in _ADDRESS_FIELDS:
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                msg = f"envelope field {key!r} must be a string"
                raise MalformedEnvelope(msg)

        return cls(
            event=data.get("event"),
            body=data.get("body"),
            to=data.get("to"),
            sender=data.get("from"),
        )
