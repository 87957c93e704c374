"""Live subscription endpoint that streams collection snapshots as NDJSON."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import SQLAlchemyError

from ..database import create_session
from ..services import channel_key, collection_snapshot, collection_stream_manager, require_api_key, require_collection
from ..services.snapshot_stream import encode_event, error_event

router = APIRouter(tags=["realtime"], dependencies=[Depends(require_api_key)])
logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "application/x-ndjson"


@router.get("/apps/{app_id}/{collection}/stream")
async def collection_stream(app_id: str, collection: str) -> StreamingResponse:
    """Hold a long-lived response that emits the full collection after every change."""

    require_collection(collection)
    channel = channel_key(app_id, collection)
    # Subscribe before reading so writes landing in between reach this listener.
    queue = await collection_stream_manager.subscribe(channel)
    try:
        with create_session() as db:
            initial = collection_snapshot(db, app_id=app_id, collection=collection)
    except SQLAlchemyError:
        await collection_stream_manager.unsubscribe(channel, queue)
        logger.exception("Initial snapshot failed | app_id=%s collection=%s", app_id, collection)

        async def _failed():
            yield encode_event(error_event(collection, "Unable to load collection"))

        return StreamingResponse(_failed(), media_type=NDJSON_MEDIA_TYPE)

    stream = collection_stream_manager.listen(channel, queue, initial)
    return StreamingResponse(stream, media_type=NDJSON_MEDIA_TYPE)


__all__ = ["router", "NDJSON_MEDIA_TYPE"]
