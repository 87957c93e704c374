"""Deployment secrets: the token signing key and the keys handed to clients."""
from __future__ import annotations

import os
from typing import Final

__all__ = ["MissingSecretError", "is_placeholder", "redact", "require_secret"]

_PLACEHOLDERS: Final[frozenset[str]] = frozenset({"changeme", "change-me", "placeholder", "your-key-here", "replace-me"})


class MissingSecretError(RuntimeError):
    """Raised when a required secret is unset or still holds a template value."""


def is_placeholder(value: str | None) -> bool:
    return not value or not value.strip() or value.strip().lower() in _PLACEHOLDERS


def require_secret(name: str) -> str:
    """Read ``name`` from the environment, refusing empty and template values."""

    value = os.getenv(name)
    if is_placeholder(value):
        raise MissingSecretError(f"{name} must be set to a real secret")
    return value.strip()


def redact(value: str | None) -> str:
    """Show only the last four characters, for log lines."""

    if not value:
        return "<unset>"
    return "*" * max(len(value) - 4, 0) + value[-4:]
