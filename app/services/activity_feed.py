"""
Activity feed for the runtime status panel.

Keeps the most recent generation, send and webhook events in memory and fans
each new entry out to connected Server-Sent Events clients. Nothing is
persisted; the feed resets on restart.
"""
import asyncio
import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Literal

logger = logging.getLogger(__name__)

ActivityType = Literal["generation", "send", "webhook"]

ACTIVITY_TYPES = ("generation", "send", "webhook")
SEED_MESSAGE = "AI ramping prompt injected for onboarding sequence."
HEARTBEAT_MESSAGE = "Awaiting next automation run..."


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ActivityEntry:
    """One line in the activity feed"""
    type: ActivityType
    message: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class ActivityFeed:
    """Bounded, newest-first list of activity entries"""

    def __init__(self, max_entries: int = 10):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: List[ActivityEntry] = []
        self.active_connections: List[asyncio.Queue] = []
        self.clear()

    def entries(self) -> List[ActivityEntry]:
        return list(self._entries)

    def record(self, activity_type: ActivityType, message: str) -> ActivityEntry:
        """Prepend an entry, trim to the limit, and broadcast it"""
        if activity_type not in ACTIVITY_TYPES:
            raise ValueError(f"Unknown activity type: {activity_type}")

        entry = ActivityEntry(type=activity_type, message=message)
        self._entries = [entry, *self._entries][: self.max_entries]
        self._broadcast(entry)
        return entry

    def clear(self) -> None:
        """Reset the feed to its seed entry"""
        self._entries = [ActivityEntry(id="seed-1", type="generation", message=SEED_MESSAGE)]

    # SSE subscribers

    def connect(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self.active_connections.append(queue)
        logger.info(f"New SSE connection. Total connections: {len(self.active_connections)}")
        return queue

    def disconnect(self, queue: asyncio.Queue) -> None:
        if queue in self.active_connections:
            self.active_connections.remove(queue)
            logger.info(f"SSE connection closed. Total connections: {len(self.active_connections)}")

    def _broadcast(self, entry: ActivityEntry) -> None:
        for queue in self.active_connections:
            queue.put_nowait(entry.to_dict())


async def periodic_heartbeat_task(feed: ActivityFeed, interval_seconds: float = 30.0):
    """
    Append a heartbeat entry to the feed at a fixed interval.

    Runs until cancelled by the application lifespan.
    """
    logger.info(f"📅 Activity heartbeat started - runs every {interval_seconds}s")

    while True:
        await asyncio.sleep(interval_seconds)
        feed.record("generation", HEARTBEAT_MESSAGE)
