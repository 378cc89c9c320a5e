"""Server-sent event stream of a user's profile changes."""

import asyncio
import json
from typing import AsyncIterator, Awaitable, Callable

import structlog
from fastapi import APIRouter, Depends, Request
from starlette.responses import StreamingResponse

from events import RoomPublisher
from web.auth import get_stream_user
from web.deps import get_publisher

logger = structlog.get_logger()

router = APIRouter(prefix="/api/events", tags=["events"])

KEEPALIVE_SECONDS = 15.0


async def event_stream(
    publisher: RoomPublisher,
    user_id: str,
    is_disconnected: Callable[[], Awaitable[bool]],
    keepalive: float = KEEPALIVE_SECONDS,
) -> AsyncIterator[str]:
    """Yield SSE frames for one subscriber until the client goes away."""
    sub = publisher.subscribe(user_id)
    logger.info("events.stream_opened", user_id=user_id)
    try:
        yield ": connected\n\n"
        while not await is_disconnected():
            try:
                event = await asyncio.wait_for(sub.queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue
            yield f"event: {event['type']}\ndata: {json.dumps(event)}\n\n"
    finally:
        publisher.unsubscribe(sub)
        logger.info("events.stream_closed", user_id=user_id)


@router.get("/stream")
async def stream_events(request: Request, user: dict = Depends(get_stream_user)):
    return StreamingResponse(
        event_stream(get_publisher(), user["id"], request.is_disconnected),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
