"""SQLAlchemy ORM model for Freedom Wall posts."""
from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression, func

from padayon.database import Base
from .base import utcnow


class WallPost(Base):
    __tablename__ = "freedom_wall_posts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    app_id = Column(String(128), nullable=False, index=True)
    author_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    author_name = Column(String(255), nullable=False)
    is_anonymous = Column(Boolean, nullable=False, server_default=expression.false(), default=False)
    content = Column(Text, nullable=False)
    reactions = Column(Integer, nullable=False, server_default="0", default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    author = relationship("User", back_populates="posts")


__all__ = ["WallPost"]
