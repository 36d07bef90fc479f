"""Tests for perch.realtime.envelope: Envelope wire format."""

import json

import pytest

from perch.errors import MalformedEnvelope
from perch.realtime.envelope import Envelope


class TestEncode:
    def test_minimal(self) -> None:
        assert json.loads(Envelope(event="event", body="hello").encode()) == {
            "event": "event",
            "body": "hello",
        }

    def test_addressing_uses_from_key(self) -> None:
        data = Envelope(event="e", body=1, to="abc", sender="xyz").to_dict()
        assert data["to"] == "abc"
        assert data["from"] == "xyz"
        assert "sender" not in data

    def test_body_always_present(self) -> None:
        assert Envelope(event="e").to_dict() == {"event": "e", "body": None}


class TestDecode:
    def test_full(self) -> None:
        raw = '{"event": "say", "body": {"text": "hi"}, "to": "a", "from": "b"}'
        envelope = Envelope.decode(raw)
        assert envelope == Envelope(event="say", body={"text": "hi"}, to="a", sender="b")

    def test_bytes_frame(self) -> None:
        assert Envelope.decode(b'{"event": "x"}').event == "x"

    def test_missing_event_is_not_malformed(self) -> None:
        envelope = Envelope.decode('{"body": 3}')
        assert envelope.event is None
        assert envelope.body == 3

    @pytest.mark.parametrize(
        "raw",
        ["not json", "", "[1, 2]", '"text"', "42", b"\xff\xfe", '{"event": 5}', '{"to": []}'],
    )
    def test_malformed(self, raw: str | bytes) -> None:
        with pytest.raises(MalformedEnvelope):
            Envelope.decode(raw)

    def test_frozen(self) -> None:
        envelope = Envelope(event="e")
        with pytest.raises(AttributeError):
            envelope.event = "other"  # type: ignore[misc]
