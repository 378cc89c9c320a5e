"""Tests for the server-sent event stream."""

import asyncio
import json

import pytest

from events import RoomPublisher
from web.routes.events import event_stream


class _Client:
    def __init__(self):
        self.gone = False

    async def is_disconnected(self):
        return self.gone


@pytest.mark.asyncio
async def test_stream_frames_and_cleanup():
    rooms = RoomPublisher()
    client = _Client()
    stream = event_stream(rooms, "u1", client.is_disconnected, keepalive=0.05)

    assert await stream.__anext__() == ": connected\n\n"
    assert rooms.subscriber_count("u1") == 1

    rooms.publish("u1", {"type": "node_added", "node": {"id": "Python"}})
    frame = await asyncio.wait_for(stream.__anext__(), timeout=1)
    assert frame.startswith("event: node_added\ndata: ")
    assert json.loads(frame.split("data: ", 1)[1])["node"] == {"id": "Python"}

    assert await asyncio.wait_for(stream.__anext__(), timeout=1) == ": keepalive\n\n"

    client.gone = True
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
    assert rooms.subscriber_count("u1") == 0


@pytest.mark.asyncio
async def test_stream_only_sees_own_room():
    rooms = RoomPublisher()
    stream = event_stream(rooms, "u1", _Client().is_disconnected, keepalive=0.05)
    await stream.__anext__()

    rooms.publish("u2", {"type": "node_added"})
    assert await asyncio.wait_for(stream.__anext__(), timeout=1) == ": keepalive\n\n"
    await stream.aclose()
    assert rooms.subscriber_count("u1") == 0


def test_stream_requires_auth(client):
    assert client.get("/api/events/stream").status_code == 401
    assert client.get("/api/events/stream?token=bogus").status_code == 401
