"""Utility helpers shared across ORM models."""
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware creation timestamp assigned by the backend."""

    return datetime.now(timezone.utc)


__all__ = ["utcnow"]
