"""Business logic for Freedom Wall posts."""
from __future__ import annotations

import logging
from typing import Any, cast
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import User, WallPost
from ..schemas import WallPostCreate, WallPostResponse

logger = logging.getLogger(__name__)


def list_post_records(db: Session, *, app_id: str) -> list[WallPost]:
    """Return every post in the namespace; ordering is left to the client."""

    return list(db.scalars(select(WallPost).where(WallPost.app_id == app_id)))


def serialize_post(post: WallPost) -> dict[str, Any]:
    return WallPostResponse.model_validate(post).model_dump(mode="json")


def post_documents(db: Session, *, app_id: str) -> list[dict[str, Any]]:
    return [serialize_post(post) for post in list_post_records(db, app_id=app_id)]


def _get_post_or_404(db: Session, *, app_id: str, post_id: UUID) -> WallPost:
    post = db.get(WallPost, post_id)
    if post is None or post.app_id != app_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def create_post_record(db: Session, *, app_id: str, author: User, payload: WallPostCreate) -> WallPost:
    """Persist a new post with a backend-assigned timestamp and zero reactions."""

    post = WallPost(
        app_id=app_id,
        author_id=author.id,
        author_name=payload.author_name,
        is_anonymous=payload.is_anonymous,
        content=payload.content,
        reactions=0,
    )
    try:
        db.add(post)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to create post | app_id=%s author=%s", app_id, author.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create post") from exc
    db.refresh(post)
    return post


def set_post_reactions(db: Session, *, app_id: str, post_id: UUID, reactions: int) -> WallPost:
    """Overwrite the reaction counter with the value computed by the client.

    The write is a plain overwrite: two clients that both read ``n`` store
    ``n + 1`` and one increment is lost. Only a write below the stored value
    is refused, so the counter never moves backwards.
    """

    post = _get_post_or_404(db, app_id=app_id, post_id=post_id)
    current = cast(int, post.reactions or 0)
    if reactions < current:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Reaction count cannot decrease")

    post.reactions = reactions
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update post") from exc
    db.refresh(post)
    return post


def delete_post_record(db: Session, *, app_id: str, post_id: UUID, requester: User) -> None:
    """Delete a post when the requester is its author and holds an email identity."""

    post = _get_post_or_404(db, app_id=app_id, post_id=post_id)
    if cast(UUID, post.author_id) != requester.id or not requester.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to delete this post")
    try:
        db.delete(post)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete post") from exc


__all__ = [
    "create_post_record",
    "delete_post_record",
    "list_post_records",
    "post_documents",
    "serialize_post",
    "set_post_reactions",
]
