"""Community chat collection routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..constants import MESSAGES_COLLECTION
from ..database import get_session
from ..models import User
from ..schemas import CommunityMessageCreate, CommunityMessageListResponse, CommunityMessageResponse
from ..services import get_current_user, list_message_records, publish_collection, require_api_key, send_message

router = APIRouter(
    prefix=f"/apps/{{app_id}}/{MESSAGES_COLLECTION}",
    tags=["community"],
    dependencies=[Depends(require_api_key)],
)


@router.get("", response_model=CommunityMessageListResponse)
async def list_messages_endpoint(app_id: str, db: Session = Depends(get_session)) -> CommunityMessageListResponse:
    items = [CommunityMessageResponse.model_validate(item) for item in list_message_records(db, app_id=app_id)]
    return CommunityMessageListResponse(items=items)


@router.post("", response_model=CommunityMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message_endpoint(
    app_id: str,
    payload: CommunityMessageCreate,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> CommunityMessageResponse:
    message = send_message(db, app_id=app_id, sender=current_user, payload=payload)
    await publish_collection(db, app_id=app_id, collection=MESSAGES_COLLECTION)
    return CommunityMessageResponse.model_validate(message)


__all__ = ["router"]
