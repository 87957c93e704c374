"""Live subscriptions that mirror a whole collection into local, sorted state."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from .errors import ClientError
from .gateway import CollectionGateway

logger = logging.getLogger(__name__)

Document = dict[str, Any]
SortFunc = Callable[[Sequence[Document]], list[Document]]


def created_at_timestamp(document: Document) -> float:
    """Return the document's creation time in epoch seconds; missing or unreadable is ``0``."""

    value = document.get("created_at")
    if not value:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, datetime):
        moment = value
    else:
        try:
            moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return 0.0
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


def sort_posts(documents: Sequence[Document]) -> list[Document]:
    """Newest first. Equal timestamps keep snapshot order."""

    return sorted(documents, key=created_at_timestamp, reverse=True)


def sort_messages(documents: Sequence[Document]) -> list[Document]:
    """Oldest first, in chat order. Equal timestamps keep snapshot order."""

    return sorted(documents, key=created_at_timestamp)


class LiveCollectionSubscriber:
    """Hold one live subscription for as long as its screen is mounted.

    Every snapshot replaces :attr:`documents` wholesale. A failed subscription
    leaves the last list in place and publishes :attr:`error` until the
    subscriber is closed.
    """

    def __init__(
        self,
        gateway: CollectionGateway,
        collection: str,
        *,
        sort: SortFunc,
        error_message: str,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.collection = collection
        self.documents: list[Document] = []
        self.error: str | None = None
        self.snapshot_count = 0
        self._gateway = gateway
        self._sort = sort
        self._error_message = error_message
        self._on_change = on_change
        self._task: asyncio.Task[None] | None = None
        self._closed = False

    def open(self) -> None:
        if self._task is not None or self._closed:
            raise RuntimeError(f"Subscription to {self.collection} was already opened")
        self._task = asyncio.create_task(self._run(), name=f"subscribe:{self.collection}")

    async def _run(self) -> None:
        try:
            async for documents in self._gateway.subscribe(self.collection):
                self.documents = self._sort(documents)
                self.error = None
                self.snapshot_count += 1
                self._notify()
        except ClientError as exc:
            logger.error("Live subscription failed | collection=%s error=%s", self.collection, exc)
            self.error = self._error_message
            self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()

    async def close(self) -> None:
        """Release the subscription. Later calls do nothing."""

        if self._closed:
            return
        self._closed = True
        task = self._task
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug("Live subscription released | collection=%s", self.collection)


__all__ = [
    "LiveCollectionSubscriber",
    "created_at_timestamp",
    "sort_messages",
    "sort_posts",
]
