"""Freedom Wall collection routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..constants import POSTS_COLLECTION
from ..database import get_session
from ..models import User
from ..schemas import WallPostCreate, WallPostListResponse, WallPostReactionUpdate, WallPostResponse
from ..services import (
    create_post_record,
    delete_post_record,
    get_current_user,
    list_post_records,
    publish_collection,
    require_api_key,
    set_post_reactions,
)

router = APIRouter(
    prefix=f"/apps/{{app_id}}/{POSTS_COLLECTION}",
    tags=["freedom-wall"],
    dependencies=[Depends(require_api_key)],
)


@router.get("", response_model=WallPostListResponse)
async def list_posts_endpoint(app_id: str, db: Session = Depends(get_session)) -> WallPostListResponse:
    items = [WallPostResponse.model_validate(post) for post in list_post_records(db, app_id=app_id)]
    return WallPostListResponse(items=items)


@router.post("", response_model=WallPostResponse, status_code=status.HTTP_201_CREATED)
async def create_post_endpoint(
    app_id: str,
    payload: WallPostCreate,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> WallPostResponse:
    post = create_post_record(db, app_id=app_id, author=current_user, payload=payload)
    await publish_collection(db, app_id=app_id, collection=POSTS_COLLECTION)
    return WallPostResponse.model_validate(post)


@router.patch("/{post_id}", response_model=WallPostResponse)
async def update_reactions_endpoint(
    app_id: str,
    post_id: UUID,
    payload: WallPostReactionUpdate,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> WallPostResponse:
    post = set_post_reactions(db, app_id=app_id, post_id=post_id, reactions=payload.reactions)
    await publish_collection(db, app_id=app_id, collection=POSTS_COLLECTION)
    return WallPostResponse.model_validate(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post_endpoint(
    app_id: str,
    post_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> Response:
    delete_post_record(db, app_id=app_id, post_id=post_id, requester=current_user)
    await publish_collection(db, app_id=app_id, collection=POSTS_COLLECTION)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
