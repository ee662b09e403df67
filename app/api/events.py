"""
Activity feed endpoints for the runtime status panel.
Returns recent generation, send and webhook events and streams new ones over
Server-Sent Events.
"""
import asyncio
import json
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.api.deps import get_activity_feed
from app.services.activity_feed import ActivityFeed

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/activity")
async def list_activity(feed: ActivityFeed = Depends(get_activity_feed)):
    """Recent activity, newest first"""
    return {"activity": [entry.to_dict() for entry in feed.entries()]}


@router.delete("/activity")
async def clear_activity(feed: ActivityFeed = Depends(get_activity_feed)):
    """Reset the feed to its seed entry"""
    feed.clear()
    return {"activity": [entry.to_dict() for entry in feed.entries()]}


@router.get("/activity/stream")
async def stream_activity(feed: ActivityFeed = Depends(get_activity_feed)):
    """
    Server-Sent Events endpoint for live activity.
    Each event is one activity entry as JSON.
    """

    async def event_generator():
        """Generate SSE events for this client"""
        queue = feed.connect()

        try:
            # Send initial connection event
            yield f"data: {json.dumps({'event': 'connected', 'message': 'SSE stream connected'})}\n\n"

            # Keep-alive ping every 30 seconds
            ping_interval = 30

            while True:
                try:
                    entry = await asyncio.wait_for(queue.get(), timeout=ping_interval)
                    yield f"data: {json.dumps(entry)}\n\n"
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"

        except asyncio.CancelledError:
            logger.info("SSE stream cancelled")
            raise
        finally:
            feed.disconnect(queue)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        }
    )
