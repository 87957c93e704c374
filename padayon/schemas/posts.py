"""Pydantic schemas for Freedom Wall documents."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class WallPostCreate(BaseModel):
    """Payload used by the app core when sharing a thought."""

    content: str = Field(..., min_length=1, max_length=5000)
    author_name: str = Field(..., min_length=1, max_length=255)
    is_anonymous: bool = False

    @model_validator(mode="after")
    def reject_blank_content(self) -> "WallPostCreate":
        if not self.content.strip():
            raise ValueError("Post content cannot be empty")
        return self


class WallPostReactionUpdate(BaseModel):
    reactions: int = Field(..., ge=0)


class WallPostResponse(BaseModel):
    """Serialized representation of a persisted post."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content: str
    author_id: UUID
    author_name: str
    is_anonymous: bool = False
    reactions: int = 0
    created_at: datetime | None = None


class WallPostListResponse(BaseModel):
    """Full, unordered collection contents."""

    items: list[WallPostResponse]
