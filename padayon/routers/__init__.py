"""Aggregate router exports."""
from .auth import router as auth_router
from .messages import router as messages_router
from .posts import router as posts_router
from .professionals import router as professionals_router
from .realtime import router as realtime_router

__all__ = [
    "auth_router",
    "messages_router",
    "posts_router",
    "professionals_router",
    "realtime_router",
]
