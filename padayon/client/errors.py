"""Error hierarchy raised inside the app core.

Components catch these at their own boundary and turn them into user-facing
strings; only :class:`ConfigurationError` is allowed to reach the caller.
"""
from __future__ import annotations


class ClientError(RuntimeError):
    """Base class for app-core failures."""


class ConfigurationError(ClientError):
    """Raised when the backend descriptor is missing or malformed."""

    def __init__(self, message: str, *, message_key: str = "config.missing") -> None:
        super().__init__(message)
        self.message_key = message_key


class GatewayError(ClientError):
    """Raised when the backend cannot be reached or rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(GatewayError):
    """Raised when the identity provider refuses credentials or a token."""


class ValidationError(ClientError):
    """Raised before any network call when local input checks fail."""

    def __init__(self, message_key: str) -> None:
        super().__init__(message_key)
        self.message_key = message_key


class PermissionDeniedError(ValidationError):
    """Raised when the current identity may not perform an action."""


class SuggestionError(ClientError):
    """Raised when the generative-text endpoint cannot be reached."""


__all__ = [
    "AuthError",
    "ClientError",
    "ConfigurationError",
    "GatewayError",
    "PermissionDeniedError",
    "SuggestionError",
    "ValidationError",
]
