"""Live notifications of profile changes."""

from .broadcaster import EventBroadcaster, NullPublisher, Publisher, RoomPublisher

__all__ = ["EventBroadcaster", "NullPublisher", "Publisher", "RoomPublisher"]
