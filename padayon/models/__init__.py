"""Convenience exports for ORM models."""
from .message import CommunityMessage
from .post import WallPost
from .user import User

__all__ = [
    "CommunityMessage",
    "User",
    "WallPost",
]
