"""Community chat domain services."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import CommunityMessage, User
from ..schemas import CommunityMessageCreate, CommunityMessageResponse

logger = logging.getLogger(__name__)


def list_message_records(db: Session, *, app_id: str) -> list[CommunityMessage]:
    return list(db.scalars(select(CommunityMessage).where(CommunityMessage.app_id == app_id)))


def serialize_message(message: CommunityMessage) -> dict[str, Any]:
    return CommunityMessageResponse.model_validate(message).model_dump(mode="json")


def message_documents(db: Session, *, app_id: str) -> list[dict[str, Any]]:
    return [serialize_message(message) for message in list_message_records(db, app_id=app_id)]


def send_message(db: Session, *, app_id: str, sender: User, payload: CommunityMessageCreate) -> CommunityMessage:
    """Append a message to the community chat."""

    message = CommunityMessage(
        app_id=app_id,
        author_id=sender.id,
        author_name=payload.author_name,
        content=payload.content,
    )
    try:
        db.add(message)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to send message | app_id=%s sender=%s", app_id, sender.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to send message") from exc
    db.refresh(message)
    return message


__all__ = ["list_message_records", "message_documents", "send_message", "serialize_message"]
