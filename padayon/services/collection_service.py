"""Glue between the document collections and their live snapshot channels."""
from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..constants import MESSAGES_COLLECTION, POSTS_COLLECTION
from .message_service import message_documents
from .post_service import post_documents
from .snapshot_stream import channel_key, collection_stream_manager, snapshot_event

logger = logging.getLogger(__name__)

_LOADERS: dict[str, Callable[..., list[dict[str, Any]]]] = {
    POSTS_COLLECTION: post_documents,
    MESSAGES_COLLECTION: message_documents,
}


def require_collection(collection: str) -> str:
    if collection not in _LOADERS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown collection")
    return collection


def collection_snapshot(db: Session, *, app_id: str, collection: str) -> dict[str, Any]:
    """Build one snapshot event holding every document of ``collection``."""

    loader = _LOADERS[require_collection(collection)]
    return snapshot_event(collection, loader(db, app_id=app_id))


async def publish_collection(db: Session, *, app_id: str, collection: str) -> None:
    """Push the current contents of ``collection`` to every live listener."""

    try:
        event = collection_snapshot(db, app_id=app_id, collection=collection)
        await collection_stream_manager.publish(channel_key(app_id, collection), event)
    except Exception:  # pragma: no cover - best effort logging
        logger.exception("Failed to publish snapshot | app_id=%s collection=%s", app_id, collection)


__all__ = ["collection_snapshot", "publish_collection", "require_collection"]
