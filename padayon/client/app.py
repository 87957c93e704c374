"""Top-level app shell: boot, header navigation and the mounted screen."""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from ..config import Settings, get_settings
from ..security.secrets import redact
from ..services.i18n_service import translate
from ..ui.themes import get_theme
from .context import FEEDBACK_SECONDS, AppContext, parse_backend_config
from .errors import ConfigurationError
from .gateway import CollectionGateway, HttpBackend, IdentityGateway
from .router import Page, ViewRouter
from .screens import Screen, build_screen
from .session_manager import SessionManager
from .suggestions import GeminiClient, TextGenerator

logger = logging.getLogger(__name__)

NAV_PAGES: tuple[tuple[Page, str], ...] = (
    (Page.HOME, "nav.home"),
    (Page.AI_CHAT, "nav.ai_chat"),
    (Page.PROFESSIONALS, "nav.professionals"),
    (Page.FREEDOM_WALL, "nav.freedom_wall"),
    (Page.COMMUNITY, "nav.community"),
)


class PadayonApp:
    """Owns the context, the session manager and the view router.

    An app built without a context is in the fatal configuration state: it
    shows :attr:`fatal_error` and never leaves ``loading``.
    """

    def __init__(
        self,
        ctx: AppContext | None,
        *,
        fatal_error: str = "",
        on_change: Callable[[], None] | None = None,
        closers: tuple[Callable[[], Awaitable[None]], ...] = (),
        locale: str = "en",
    ) -> None:
        self.ctx = ctx
        self.fatal_error = fatal_error
        self.locale = ctx.locale if ctx else locale
        self._on_change = on_change
        self._closers = closers
        self.router: ViewRouter | None = None
        if ctx is not None:
            self.router = ViewRouter(lambda page: build_screen(page, ctx, on_change=self._changed))

    @classmethod
    def create(
        cls,
        *,
        identity: IdentityGateway,
        collections: CollectionGateway,
        generator: TextGenerator,
        app_id: str,
        locale: str = "en",
        theme: str | None = None,
        continuation_token: str | None = None,
        feedback_seconds: float = FEEDBACK_SECONDS,
        on_change: Callable[[], None] | None = None,
        closers: tuple[Callable[[], Awaitable[None]], ...] = (),
    ) -> "PadayonApp":
        manager = SessionManager(identity, locale=locale, continuation_token=continuation_token)
        ctx = AppContext(
            app_id=app_id,
            identity=identity,
            collections=collections,
            generator=generator,
            session_manager=manager,
            locale=locale,
            theme=get_theme(theme),
            feedback_seconds=feedback_seconds,
        )
        return cls(ctx, on_change=on_change, closers=closers)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> "PadayonApp":
        """Build the app against the configured backend and Gemini endpoint."""

        settings = settings or get_settings()
        try:
            descriptor = parse_backend_config(settings.backend_config)
        except ConfigurationError as exc:
            return cls(None, fatal_error=translate(settings.ui_locale, exc.message_key), locale=settings.ui_locale)

        logger.info("Connecting to backend | base_url=%s api_key=%s", descriptor.base_url, redact(descriptor.api_key))
        backend = HttpBackend(descriptor, app_id=settings.app_id)
        generator = GeminiClient(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            api_base=settings.gemini_api_base,
        )
        return cls.create(
            identity=backend,
            collections=backend,
            generator=generator,
            app_id=settings.app_id,
            locale=settings.ui_locale,
            theme=settings.ui_theme,
            continuation_token=settings.initial_auth_token,
            closers=(backend.aclose,),
            **kwargs,
        )

    @property
    def loading(self) -> bool:
        if self.ctx is None:
            return True
        return self.ctx.session_manager.loading

    @property
    def screen(self) -> Screen | None:
        return self.router.screen if self.router else None

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    async def start(self) -> None:
        if self.ctx is None or self.router is None:
            logger.error("App cannot start without a valid backend configuration")
            return
        self.ctx.session_manager.add_listener(lambda _session: self._changed())
        await self.ctx.session_manager.start()
        self.router.start()
        self._changed()

    async def navigate(self, page: Page | str) -> Screen | None:
        if self.router is None:
            return None
        screen = await self.router.navigate(page)
        self._changed()
        return screen

    async def logout(self) -> bool:
        if self.ctx is None:
            return False
        ok = await self.ctx.session_manager.sign_out()
        if ok:
            await self.navigate(Page.HOME)
        self._changed()
        return ok

    async def close(self) -> None:
        if self.router is not None:
            await self.router.close()
        if self.ctx is not None:
            await self.ctx.session_manager.stop()
        for closer in self._closers:
            await closer()

    def header(self) -> list[dict[str, Any]]:
        """Navigation entries in display order."""

        if self.ctx is None or self.router is None:
            return []
        t = self.ctx.t
        current = self.router.current
        entries: list[dict[str, Any]] = [
            {"page": page.value, "label": t(key), "active": page is current} for page, key in NAV_PAGES
        ]
        if self.ctx.session.is_authenticated:
            entries.append({"page": Page.PROFILE.value, "label": t("nav.profile"), "active": current is Page.PROFILE})
            entries.append({"action": "logout", "label": t("nav.logout")})
        else:
            entries.append({"page": Page.HOME.value, "label": t("nav.login_signup"), "active": False})
        return entries

    def view(self) -> dict[str, Any]:
        if self.ctx is None or self.loading:
            return {
                "loading": True,
                "message": self.fatal_error or translate(self.locale, "app.loading"),
                "fatal_error": self.fatal_error or None,
            }
        t = self.ctx.t
        session = self.ctx.session
        return {
            "loading": False,
            "fatal_error": None,
            "title": t("app.title"),
            "theme": self.ctx.theme.name,
            "header": self.header(),
            "auth_error": self.ctx.session_manager.error or None,
            "user_id": session.user_id if session.is_authenticated else None,
            "entitlement": session.entitlement.value,
            "page": self.router.current.value if self.router else None,
            "screen": self.screen.view() if self.screen else None,
            "footer": t("app.footer"),
            "tagline": t("app.tagline"),
        }


__all__ = ["NAV_PAGES", "PadayonApp"]
