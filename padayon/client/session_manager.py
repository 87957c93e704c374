"""Owns sign-in state and publishes the current :class:`Session`."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Callable

from ..services.i18n_service import translate
from .context import Identity, IdentityKind, Session
from .errors import ClientError
from .gateway import IdentityGateway

logger = logging.getLogger(__name__)

SessionListener = Callable[[Session], None]


class SessionManager:
    """Follow the identity provider's state stream and expose the derived session.

    The manager never raises past its public methods: failures land in
    :attr:`error`, a banner-style slot the caller clears with
    :meth:`clear_error`.
    """

    def __init__(
        self,
        gateway: IdentityGateway,
        *,
        locale: str = "en",
        continuation_token: str | None = None,
    ) -> None:
        self._gateway = gateway
        self._locale = locale
        self._pending_token = continuation_token or None
        self._session = Session(Identity.local())
        self._listeners: list[SessionListener] = []
        self._task: asyncio.Task[None] | None = None
        self._ready = asyncio.Event()
        self.loading = True
        self.error = ""

    @property
    def session(self) -> Session:
        return self._session

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def clear_error(self) -> None:
        self.error = ""

    def _set_error(self, key: str, exc: BaseException) -> None:
        self.error = translate(self._locale, key, error=str(exc))

    def _publish(self, identity: Identity) -> None:
        if identity == self._session.identity:
            return
        self._session = Session(identity)
        for listener in list(self._listeners):
            listener(self._session)

    async def start(self) -> None:
        """Subscribe to the identity stream and wait for the first state to settle."""

        if self._task is None:
            self._task = asyncio.create_task(self._follow(), name="session-manager")
        await self._ready.wait()

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _follow(self) -> None:
        try:
            async for identity in self._gateway.watch():
                await self._on_identity(identity)
                self.loading = False
                self._ready.set()
        except ClientError as exc:
            logger.error("Identity stream failed | error=%s", exc)
            self._set_error("auth.not_ready", exc)
        finally:
            self._ready.set()

    async def _on_identity(self, identity: Identity | None) -> None:
        if identity is not None:
            if identity != self._session.identity:
                self._publish(identity)
                self.error = ""
            return

        self._publish(Identity.local())
        token, self._pending_token = self._pending_token, None
        if token:
            try:
                self._publish(await self._gateway.redeem_token(token))
                self.error = ""
                return
            except ClientError as exc:
                logger.error("Sign-in with continuation token failed | error=%s", exc)
                self._set_error("auth.token_failed", exc)
        await self._sign_in_anonymously()

    async def _sign_in_anonymously(self) -> None:
        try:
            identity = await self._gateway.sign_in_anonymously()
        except ClientError as exc:
            logger.error("Anonymous sign-in failed | error=%s", exc)
            if not self.error:
                self._set_error("auth.anonymous_failed", exc)
            return
        if self._session.identity.kind is IdentityKind.EMAIL:
            # An email sign-in finished while this request was in flight.
            logger.info("Discarding late anonymous identity | user_id=%s", identity.user_id)
            return
        self._publish(identity)

    async def sign_in(self, email: str, password: str) -> bool:
        self.error = ""
        try:
            identity = await self._gateway.sign_in(email, password)
        except ClientError as exc:
            logger.warning("Login failed | email=%s error=%s", email, exc)
            self._set_error("auth.login_failed", exc)
            return False
        self._publish(identity)
        return True

    async def sign_up(self, email: str, password: str) -> bool:
        self.error = ""
        try:
            identity = await self._gateway.sign_up(email, password)
        except ClientError as exc:
            logger.warning("Sign-up failed | email=%s error=%s", email, exc)
            self._set_error("auth.signup_failed", exc)
            return False
        self._publish(identity)
        return True

    async def sign_out(self) -> bool:
        try:
            await self._gateway.sign_out()
        except ClientError as exc:
            logger.error("Logout failed | error=%s", exc)
            self._set_error("auth.logout_failed", exc)
            return False
        self._publish(Identity.local())
        self.error = ""
        return True


__all__ = ["SessionListener", "SessionManager"]
