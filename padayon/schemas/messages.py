"""Pydantic schemas for community chat documents."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CommunityMessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    author_name: str = Field(..., min_length=1, max_length=255)

    @model_validator(mode="after")
    def reject_blank_content(self) -> "CommunityMessageCreate":
        if not self.content.strip():
            raise ValueError("Message cannot be empty")
        return self


class CommunityMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content: str
    author_id: UUID
    author_name: str
    created_at: datetime | None = None


class CommunityMessageListResponse(BaseModel):
    items: list[CommunityMessageResponse]
