"""Create, update and delete calls against the two collections."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from ..constants import ANONYMOUS_AUTHOR_NAME, MESSAGES_COLLECTION, POSTS_COLLECTION
from ..services.i18n_service import translate
from .context import FEEDBACK_SECONDS, Session
from .errors import ClientError, PermissionDeniedError, ValidationError
from .gateway import CollectionGateway

logger = logging.getLogger(__name__)


class TransientMessage:
    """A single user-facing message that empties itself after ``delay`` seconds."""

    def __init__(self, delay: float = FEEDBACK_SECONDS, on_change: Callable[[], None] | None = None) -> None:
        self.text = ""
        self._delay = delay
        self._on_change = on_change
        self._handle: asyncio.TimerHandle | None = None

    def show(self, text: str) -> None:
        self._cancel_timer()
        self.text = text
        self._handle = asyncio.get_running_loop().call_later(self._delay, self.clear)
        self._notify()

    def clear(self) -> None:
        self._cancel_timer()
        self.text = ""
        self._notify()

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()


class MutationClient:
    """Write operations, each one round trip with local validation in front.

    Outcomes are reported through :attr:`feedback`; failures are logged and
    otherwise swallowed.
    """

    def __init__(
        self,
        collections: CollectionGateway,
        session: Callable[[], Session],
        *,
        locale: str = "en",
        feedback: TransientMessage | None = None,
    ) -> None:
        self._collections = collections
        self._session = session
        self._locale = locale
        self.feedback = feedback or TransientMessage()

    def _t(self, key: str, **values: Any) -> str:
        return translate(self._locale, key, **values)

    def _report(self, key: str, **values: Any) -> None:
        self.feedback.show(self._t(key, **values))

    def _author_name(self, session: Session) -> str:
        return session.email or self._t("identity.guest")

    @staticmethod
    def _check_content(content: str, key: str) -> None:
        if not content or not content.strip():
            raise ValidationError(key)

    @staticmethod
    def _check_authenticated(session: Session, key: str) -> None:
        if not session.is_authenticated:
            raise ValidationError(key)

    async def create_post(self, content: str, anonymous: bool = False) -> dict[str, Any] | None:
        session = self._session()
        try:
            self._check_content(content, "wall.empty_content")
            self._check_authenticated(session, "wall.login_required_post")
        except ValidationError as exc:
            self._report(exc.message_key)
            return None

        document = {
            "content": content,
            "author_name": ANONYMOUS_AUTHOR_NAME if anonymous else self._author_name(session),
            "is_anonymous": anonymous,
        }
        try:
            created = await self._collections.insert(POSTS_COLLECTION, document)
        except ClientError as exc:
            logger.error("Failed to create post | user_id=%s error=%s", session.user_id, exc)
            self._report("wall.post_failed", error=str(exc))
            return None
        self._report("wall.posted")
        return created

    async def add_reaction(self, post_id: str, current_count: int | None) -> dict[str, Any] | None:
        """Store ``current_count + 1`` as the post's reaction count.

        The count comes from the caller's last snapshot, so two clients acting
        on the same snapshot both write the same value and one increment is lost.
        """

        session = self._session()
        try:
            self._check_authenticated(session, "wall.login_required_react")
        except ValidationError as exc:
            self._report(exc.message_key)
            return None

        try:
            updated = await self._collections.update(
                POSTS_COLLECTION, str(post_id), {"reactions": (current_count or 0) + 1}
            )
        except ClientError as exc:
            logger.error("Failed to add reaction | post_id=%s error=%s", post_id, exc)
            self._report("wall.react_failed", error=str(exc))
            return None
        self._report("wall.reacted")
        return updated

    async def delete_post(self, post_id: str, post_author_id: str) -> bool:
        session = self._session()
        try:
            self._check_authenticated(session, "wall.login_required_delete")
            if not (session.is_premium and str(post_author_id) == session.user_id):
                raise PermissionDeniedError("wall.delete_denied")
        except ValidationError as exc:
            self._report(exc.message_key)
            return False

        try:
            await self._collections.delete(POSTS_COLLECTION, str(post_id))
        except ClientError as exc:
            logger.error("Failed to delete post | post_id=%s error=%s", post_id, exc)
            self._report("wall.delete_failed", error=str(exc))
            return False
        self._report("wall.deleted")
        return True

    async def create_message(self, content: str) -> dict[str, Any] | None:
        session = self._session()
        try:
            self._check_content(content, "community.empty_message")
            self._check_authenticated(session, "community.login_required")
        except ValidationError as exc:
            self._report(exc.message_key)
            return None

        document = {"content": content, "author_name": self._author_name(session)}
        try:
            created = await self._collections.insert(MESSAGES_COLLECTION, document)
        except ClientError as exc:
            logger.error("Failed to send message | user_id=%s error=%s", session.user_id, exc)
            self._report("community.send_failed", error=str(exc))
            return None
        self.feedback.clear()
        return created


__all__ = ["MutationClient", "TransientMessage"]
