"""Convenience exports for service layer."""
from .auth_service import (
    authenticate_user,
    create_access_token,
    create_anonymous_user,
    decode_access_token,
    get_current_user,
    issue_sign_in_token,
    redeem_sign_in_token,
    register_user,
    require_api_key,
)
from .collection_service import collection_snapshot, publish_collection, require_collection
from .i18n_service import DEFAULT_LOCALE, get_messages, resolve_request_locale, translate
from .message_service import list_message_records, message_documents, send_message, serialize_message
from .post_service import (
    create_post_record,
    delete_post_record,
    list_post_records,
    post_documents,
    serialize_post,
    set_post_reactions,
)
from .professional_service import Professional, list_professionals
from .snapshot_stream import CollectionStreamManager, channel_key, collection_stream_manager

__all__ = [
    "authenticate_user",
    "create_access_token",
    "create_anonymous_user",
    "decode_access_token",
    "get_current_user",
    "issue_sign_in_token",
    "redeem_sign_in_token",
    "register_user",
    "require_api_key",
    "collection_snapshot",
    "publish_collection",
    "require_collection",
    "DEFAULT_LOCALE",
    "get_messages",
    "resolve_request_locale",
    "translate",
    "list_message_records",
    "message_documents",
    "send_message",
    "serialize_message",
    "create_post_record",
    "delete_post_record",
    "list_post_records",
    "post_documents",
    "serialize_post",
    "set_post_reactions",
    "Professional",
    "list_professionals",
    "CollectionStreamManager",
    "channel_key",
    "collection_stream_manager",
]
