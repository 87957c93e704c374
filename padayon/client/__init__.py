"""Application core: session, live collections, mutations, AI suggestions and screens."""
from .app import PadayonApp
from .context import AppContext, BackendDescriptor, Entitlement, Identity, IdentityKind, Session, parse_backend_config
from .errors import (
    AuthError,
    ClientError,
    ConfigurationError,
    GatewayError,
    PermissionDeniedError,
    SuggestionError,
    ValidationError,
)
from .gateway import AuthStateStream, CollectionGateway, HttpBackend, IdentityGateway
from .mutations import MutationClient, TransientMessage
from .router import Page, ViewRouter
from .session_manager import SessionManager
from .subscriber import LiveCollectionSubscriber, sort_messages, sort_posts
from .suggestions import AISuggestionClient, ChatTurn, GeminiClient, Suggestion, TextGenerator, extract_first_text

__all__ = [
    "AISuggestionClient",
    "AppContext",
    "AuthError",
    "AuthStateStream",
    "BackendDescriptor",
    "ChatTurn",
    "ClientError",
    "CollectionGateway",
    "ConfigurationError",
    "Entitlement",
    "GatewayError",
    "GeminiClient",
    "HttpBackend",
    "Identity",
    "IdentityGateway",
    "IdentityKind",
    "LiveCollectionSubscriber",
    "MutationClient",
    "PadayonApp",
    "Page",
    "PermissionDeniedError",
    "Session",
    "SessionManager",
    "Suggestion",
    "SuggestionError",
    "TextGenerator",
    "TransientMessage",
    "ValidationError",
    "ViewRouter",
    "extract_first_text",
    "sort_messages",
    "sort_posts",
]
