"""SQLAlchemy ORM model for identities issued by the backend."""
from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression, func

from padayon.database import Base
from .base import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=True, index=True)
    hashed_password = Column(String(255), nullable=True)
    is_anonymous = Column(Boolean, nullable=False, server_default=expression.false(), default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    posts = relationship("WallPost", back_populates="author", cascade="all, delete-orphan")
    messages = relationship("CommunityMessage", back_populates="author", cascade="all, delete-orphan")


__all__ = ["User"]
