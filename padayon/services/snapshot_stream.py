"""Live collection channels that push full snapshots to every listener."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator

logger = logging.getLogger(__name__)

_QUEUE_SIZE = 16


def channel_key(app_id: str, collection: str) -> str:
    return f"{app_id}/{collection}"


def encode_event(payload: dict[str, Any]) -> str:
    """Serialize one stream event as a newline-terminated JSON line."""

    return json.dumps(payload, default=str) + "\n"


def snapshot_event(collection: str, documents: list[dict[str, Any]]) -> dict[str, Any]:
    return {"type": "snapshot", "collection": collection, "documents": documents}


def error_event(collection: str, detail: str) -> dict[str, Any]:
    return {"type": "error", "collection": collection, "detail": detail}


class CollectionStreamManager:
    """Track per-collection listeners and fan out snapshot events."""

    def __init__(self) -> None:
        self._channels: dict[str, set[asyncio.Queue[dict[str, Any]]]] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, channel: str) -> asyncio.Queue[dict[str, Any]]:
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=_QUEUE_SIZE)
        async with self._lock:
            self._channels.setdefault(channel, set()).add(queue)
        return queue

    async def unsubscribe(self, channel: str, queue: asyncio.Queue[dict[str, Any]]) -> None:
        async with self._lock:
            group = self._channels.get(channel)
            if group is None:
                return
            group.discard(queue)
            if not group:
                self._channels.pop(channel, None)

    async def listener_count(self, channel: str) -> int:
        async with self._lock:
            return len(self._channels.get(channel, ()))

    async def publish(self, channel: str, event: dict[str, Any]) -> None:
        async with self._lock:
            targets = list(self._channels.get(channel, ()))
        for queue in targets:
            if queue.full():
                # Each event carries the whole collection; drop the stale one.
                try:
                    queue.get_nowait()
                except asyncio.QueueEmpty:
                    pass
            queue.put_nowait(event)

    async def listen(
        self,
        channel: str,
        queue: asyncio.Queue[dict[str, Any]],
        initial: dict[str, Any],
    ) -> AsyncIterator[str]:
        """Yield ``initial`` followed by every event published to ``queue``.

        ``queue`` must already be subscribed when ``initial`` is read, so no
        write between the two is lost. The queue is released when the stream ends.
        """

        logger.info("Collection stream opened | channel=%s", channel)
        try:
            yield encode_event(initial)
            while True:
                event = await queue.get()
                yield encode_event(event)
        finally:
            await self.unsubscribe(channel, queue)
            logger.info("Collection stream closed | channel=%s", channel)


collection_stream_manager = CollectionStreamManager()


__all__ = [
    "CollectionStreamManager",
    "channel_key",
    "collection_stream_manager",
    "encode_event",
    "error_event",
    "snapshot_event",
]
