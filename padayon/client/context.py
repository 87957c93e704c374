"""Session model, backend descriptor parsing and the explicit app context."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from ..services.i18n_service import normalize_locale, translate
from ..ui.themes import Theme, get_theme
from .errors import ConfigurationError

if TYPE_CHECKING:  # pragma: no cover
    from .gateway import CollectionGateway, IdentityGateway
    from .session_manager import SessionManager
    from .suggestions import TextGenerator

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:8000"
FEEDBACK_SECONDS = 3.0


class IdentityKind(str, Enum):
    LOCAL = "local"
    ANONYMOUS = "anonymous"
    EMAIL = "email"


class Entitlement(str, Enum):
    FREE = "free"
    PREMIUM = "premium"


@dataclass(frozen=True, slots=True)
class Identity:
    """Who the app is acting as.

    ``LOCAL`` identities are random ids minted on the device while no
    provider session exists; they never count as signed in.
    """

    user_id: str
    kind: IdentityKind
    email: str | None = None
    access_token: str | None = field(default=None, repr=False)

    @classmethod
    def local(cls) -> "Identity":
        return cls(user_id=str(uuid4()), kind=IdentityKind.LOCAL)

    @property
    def is_authenticated(self) -> bool:
        return self.kind is not IdentityKind.LOCAL


@dataclass(frozen=True, slots=True)
class Session:
    identity: Identity

    @property
    def entitlement(self) -> Entitlement:
        return Entitlement.PREMIUM if self.identity.email else Entitlement.FREE

    @property
    def is_premium(self) -> bool:
        return self.entitlement is Entitlement.PREMIUM

    @property
    def is_authenticated(self) -> bool:
        return self.identity.is_authenticated

    @property
    def user_id(self) -> str:
        return self.identity.user_id

    @property
    def email(self) -> str | None:
        return self.identity.email


@dataclass(frozen=True, slots=True)
class BackendDescriptor:
    base_url: str
    api_key: str


def parse_backend_config(raw: str | None) -> BackendDescriptor:
    """Parse the ``BACKEND_CONFIG`` JSON descriptor.

    Malformed JSON and descriptors without an ``apiKey`` both raise
    :class:`ConfigurationError`, which is fatal to startup.
    """

    try:
        data: Any = json.loads(raw or "{}")
    except ValueError as exc:
        logger.error("BACKEND_CONFIG is not valid JSON")
        raise ConfigurationError("BACKEND_CONFIG is not valid JSON", message_key="config.invalid_json") from exc

    if not isinstance(data, dict) or not data.get("apiKey"):
        logger.error("BACKEND_CONFIG is missing or incomplete")
        raise ConfigurationError("BACKEND_CONFIG is missing or incomplete", message_key="config.missing")

    base_url = str(data.get("baseUrl") or DEFAULT_BACKEND_URL).rstrip("/")
    return BackendDescriptor(base_url=base_url, api_key=str(data["apiKey"]))


@dataclass(slots=True)
class AppContext:
    """Everything a screen needs, handed over explicitly at mount time."""

    app_id: str
    identity: "IdentityGateway"
    collections: "CollectionGateway"
    generator: "TextGenerator"
    session_manager: "SessionManager"
    locale: str = "en"
    theme: Theme = field(default_factory=get_theme)
    feedback_seconds: float = FEEDBACK_SECONDS

    def __post_init__(self) -> None:
        self.locale = normalize_locale(self.locale)

    @property
    def session(self) -> Session:
        return self.session_manager.session

    def t(self, key: str, **values: Any) -> str:
        return translate(self.locale, key, **values)

    @property
    def guest_name(self) -> str:
        return self.t("identity.guest")


__all__ = [
    "AppContext",
    "BackendDescriptor",
    "Entitlement",
    "FEEDBACK_SECONDS",
    "Identity",
    "IdentityKind",
    "Session",
    "parse_backend_config",
]
