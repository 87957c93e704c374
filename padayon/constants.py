"""Project-wide constant values."""
from __future__ import annotations

POSTS_COLLECTION = "freedom_wall_posts"
MESSAGES_COLLECTION = "community_messages"
COLLECTIONS: tuple[str, ...] = (POSTS_COLLECTION, MESSAGES_COLLECTION)

ANONYMOUS_AUTHOR_NAME = "Anonymous"  # stored verbatim on anonymous posts

API_KEY_HEADER = "x-padayon-api-key"

__all__ = [
    "POSTS_COLLECTION",
    "MESSAGES_COLLECTION",
    "COLLECTIONS",
    "ANONYMOUS_AUTHOR_NAME",
    "API_KEY_HEADER",
]
