"""The six screens. Each one turns app state into a plain view-state dict.

Actions return :class:`asyncio.Task` handles owned by the screen; unmounting a
screen cancels every task and subscription it still holds.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Callable, Coroutine

from ..constants import ANONYMOUS_AUTHOR_NAME, MESSAGES_COLLECTION, POSTS_COLLECTION
from ..services.professional_service import list_professionals
from .context import AppContext
from .mutations import MutationClient, TransientMessage
from .router import Page
from .subscriber import LiveCollectionSubscriber, sort_messages, sort_posts
from .suggestions import AISuggestionClient, ChatTurn

logger = logging.getLogger(__name__)

PREMIUM_BENEFIT_COUNT = 8


class Screen:
    page: Page

    def __init__(self, ctx: AppContext, *, on_change: Callable[[], None] | None = None) -> None:
        self.ctx = ctx
        self.mounted = False
        self._on_change = on_change
        self._tasks: set[asyncio.Task[Any]] = set()

    def mount(self) -> None:
        self.mounted = True

    async def unmount(self) -> None:
        self.mounted = False
        tasks = list(self._tasks)
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        if not self.mounted:
            coro.close()
            raise RuntimeError(f"{type(self).__name__} is not mounted")
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def changed(self) -> None:
        if self._on_change is not None and self.mounted:
            self._on_change()

    def view(self) -> dict[str, Any]:
        raise NotImplementedError


class HomeScreen(Screen):
    page = Page.HOME

    def __init__(self, ctx: AppContext, **kwargs: Any) -> None:
        super().__init__(ctx, **kwargs)
        self.is_login = True
        self.email = ""
        self.password = ""

    def toggle_mode(self) -> None:
        self.is_login = not self.is_login
        self.changed()

    def submit(self) -> asyncio.Task[bool]:
        return self.spawn(self._submit())

    async def _submit(self) -> bool:
        manager = self.ctx.session_manager
        if self.is_login:
            ok = await manager.sign_in(self.email, self.password)
        else:
            ok = await manager.sign_up(self.email, self.password)
        self.changed()
        return ok

    def view(self) -> dict[str, Any]:
        t = self.ctx.t
        return {
            "page": self.page.value,
            "title": t("home.login_title") if self.is_login else t("home.signup_title"),
            "email_label": t("home.email_label"),
            "password_label": t("home.password_label"),
            "email": self.email,
            "submit_label": t("home.login_button") if self.is_login else t("home.signup_button"),
            "toggle_label": t("home.to_signup") if self.is_login else t("home.to_login"),
            "demo_note": t("home.demo_note"),
        }


class AIChatScreen(Screen):
    page = Page.AI_CHAT

    def __init__(self, ctx: AppContext, **kwargs: Any) -> None:
        super().__init__(ctx, **kwargs)
        self.turns: list[ChatTurn] = []
        self.draft = ""
        self.loading = False
        self._suggestions = AISuggestionClient(ctx.generator, lambda: ctx.session, locale=ctx.locale)

    def send(self) -> asyncio.Task[None] | None:
        if self.loading or not self.draft.strip():
            return None
        text = self.draft
        history = list(self.turns)
        self.turns.append(ChatTurn("user", text))
        self.draft = ""
        self.loading = True
        self.changed()
        return self.spawn(self._reply(history, text))

    async def _reply(self, history: list[ChatTurn], text: str) -> None:
        try:
            reply = await self._suggestions.chat_reply(history, text)
            self.turns.append(ChatTurn("ai", reply.text))
        finally:
            self.loading = False
        self.changed()

    def view(self) -> dict[str, Any]:
        t = self.ctx.t
        premium = self.ctx.session.is_premium
        return {
            "page": self.page.value,
            "title": t("chat.title"),
            "badge": t("chat.premium_badge") if premium else t("chat.free_badge"),
            "empty": t("chat.empty") if not self.turns else None,
            "premium_note": t("chat.premium_note") if premium and not self.turns else None,
            "turns": [{"sender": turn.sender, "text": turn.text} for turn in self.turns],
            "draft": self.draft,
            "placeholder": t("chat.placeholder"),
            "send_label": t("chat.sending") if self.loading else t("chat.send"),
            "can_send": not self.loading and bool(self.draft.strip()),
        }


class ProfessionalsScreen(Screen):
    page = Page.PROFESSIONALS

    def view(self) -> dict[str, Any]:
        t = self.ctx.t
        premium = self.ctx.session.is_premium
        cards = [
            {
                "id": prof.id,
                "name": prof.name,
                "specialization": prof.specialization,
                "rate": prof.rate,
                "availability": prof.availability,
                "action": "book" if premium else "upgrade",
                "action_label": t("professionals.book") if premium else t("professionals.upgrade"),
            }
            for prof in list_professionals(self.ctx.locale)
        ]
        view: dict[str, Any] = {
            "page": self.page.value,
            "title": t("professionals.title"),
            "intro": t("professionals.intro"),
            "note": t("professionals.premium_note") if premium else t("professionals.free_note"),
            "professionals": cards,
            "call_to_action": None,
        }
        if not premium:
            view["call_to_action"] = {
                "title": t("professionals.cta_title"),
                "body": t("professionals.cta_body"),
                "label": t("professionals.learn_more"),
            }
        return view


class FreedomWallScreen(Screen):
    page = Page.FREEDOM_WALL

    def __init__(self, ctx: AppContext, **kwargs: Any) -> None:
        super().__init__(ctx, **kwargs)
        self.draft = ""
        self.anonymous = False
        self.suggestion = ""
        self.suggestion_loading = False
        self.subscriber = LiveCollectionSubscriber(
            ctx.collections,
            POSTS_COLLECTION,
            sort=sort_posts,
            error_message=ctx.t("wall.load_error"),
            on_change=self.changed,
        )
        self.mutations = MutationClient(
            ctx.collections,
            lambda: ctx.session,
            locale=ctx.locale,
            feedback=TransientMessage(ctx.feedback_seconds, on_change=self.changed),
        )
        self._suggestions = AISuggestionClient(ctx.generator, lambda: ctx.session, locale=ctx.locale)

    def mount(self) -> None:
        super().mount()
        self.subscriber.open()

    async def unmount(self) -> None:
        self.mutations.feedback.clear()
        await super().unmount()
        await self.subscriber.close()

    @property
    def posts(self) -> list[dict[str, Any]]:
        return self.subscriber.documents

    def _find_post(self, post_id: str) -> dict[str, Any] | None:
        for post in self.posts:
            if str(post.get("id")) == str(post_id):
                return post
        return None

    def share(self) -> asyncio.Task[None]:
        return self.spawn(self._share())

    async def _share(self) -> None:
        created = await self.mutations.create_post(self.draft, self.anonymous)
        if created is not None:
            self.draft = ""
            self.anonymous = False
            self.suggestion = ""
        self.changed()

    def react(self, post_id: str, current_count: int | None = None) -> asyncio.Task[Any]:
        if current_count is None:
            post = self._find_post(post_id) or {}
            current_count = post.get("reactions") or 0
        return self.spawn(self.mutations.add_reaction(post_id, current_count))

    def delete(self, post_id: str) -> asyncio.Task[bool]:
        post = self._find_post(post_id) or {}
        return self.spawn(self.mutations.delete_post(post_id, str(post.get("author_id") or "")))

    def suggest(self) -> asyncio.Task[None]:
        return self.spawn(self._suggest())

    async def _suggest(self) -> None:
        self.suggestion = ""
        self.suggestion_loading = True
        self.changed()
        try:
            result = await self._suggestions.post_affirmation(self.draft)
            self.suggestion = result.text
        finally:
            self.suggestion_loading = False
        self.changed()

    def _post_view(self, post: dict[str, Any]) -> dict[str, Any]:
        t = self.ctx.t
        session = self.ctx.session
        if post.get("is_anonymous"):
            author = ANONYMOUS_AUTHOR_NAME
        else:
            author = post.get("author_name") or t("wall.unknown_user")
        return {
            "id": str(post.get("id")),
            "content": post.get("content", ""),
            "author": author,
            "created_at": post.get("created_at") or t("wall.date_pending"),
            "reactions": post.get("reactions") or 0,
            "can_delete": session.is_premium and str(post.get("author_id")) == session.user_id,
        }

    def view(self) -> dict[str, Any]:
        t = self.ctx.t
        session = self.ctx.session
        premium = session.is_premium
        return {
            "page": self.page.value,
            "title": t("wall.title"),
            "intro": t("wall.intro"),
            "perks": t("wall.premium_perks") if premium else t("wall.free_perks"),
            "form": {
                "draft": self.draft,
                "anonymous": self.anonymous,
                "placeholder": t("wall.placeholder"),
                "anonymous_label": t("wall.anonymous_label"),
                "submit_label": t("wall.share"),
                "can_suggest": premium,
                "suggest_label": t("wall.suggesting") if self.suggestion_loading else t("wall.suggest"),
                "suggestion": self.suggestion or None,
            }
            if session.is_authenticated
            else None,
            "login_prompt": None if session.is_authenticated else t("wall.login_prompt"),
            "message": self.mutations.feedback.text or self.subscriber.error or None,
            "empty": t("wall.empty") if not self.posts else None,
            "support_label": t("wall.support"),
            "delete_label": t("wall.delete"),
            "posts": [self._post_view(post) for post in self.posts],
        }


class CommunityScreen(Screen):
    page = Page.COMMUNITY

    def __init__(self, ctx: AppContext, **kwargs: Any) -> None:
        super().__init__(ctx, **kwargs)
        self.draft = ""
        self.starter_loading = False
        self.subscriber = LiveCollectionSubscriber(
            ctx.collections,
            MESSAGES_COLLECTION,
            sort=sort_messages,
            error_message=ctx.t("community.load_error"),
            on_change=self.changed,
        )
        self.mutations = MutationClient(
            ctx.collections,
            lambda: ctx.session,
            locale=ctx.locale,
            feedback=TransientMessage(ctx.feedback_seconds, on_change=self.changed),
        )
        self._suggestions = AISuggestionClient(ctx.generator, lambda: ctx.session, locale=ctx.locale)

    def mount(self) -> None:
        super().mount()
        self.subscriber.open()

    async def unmount(self) -> None:
        self.mutations.feedback.clear()
        await super().unmount()
        await self.subscriber.close()

    @property
    def messages(self) -> list[dict[str, Any]]:
        return self.subscriber.documents

    def send(self) -> asyncio.Task[None]:
        return self.spawn(self._send())

    async def _send(self) -> None:
        created = await self.mutations.create_message(self.draft)
        if created is not None:
            self.draft = ""
        self.changed()

    def request_starter(self) -> asyncio.Task[None]:
        return self.spawn(self._starter())

    async def _starter(self) -> None:
        self.starter_loading = True
        self.changed()
        try:
            result = await self._suggestions.conversation_starter()
        finally:
            self.starter_loading = False
        if result.ok:
            self.draft = result.text
            self.mutations.feedback.show(self.ctx.t("community.starter_ready"))
        else:
            self.mutations.feedback.show(result.text)
        self.changed()

    def _message_view(self, message: dict[str, Any]) -> dict[str, Any]:
        t = self.ctx.t
        own = str(message.get("author_id")) == self.ctx.session.user_id
        if own:
            author = t("community.you")
        else:
            author = message.get("author_name") or t("community.unknown_user")
        return {
            "id": str(message.get("id")),
            "content": message.get("content", ""),
            "author": author,
            "own": own,
            "created_at": message.get("created_at") or t("community.time_pending"),
        }

    def view(self) -> dict[str, Any]:
        t = self.ctx.t
        session = self.ctx.session
        premium = session.is_premium
        starter = None
        if premium:
            starter = {
                "label": t("community.starter_loading") if self.starter_loading else t("community.starter"),
                "disabled": self.starter_loading,
            }
        return {
            "page": self.page.value,
            "title": t("community.title"),
            "intro": t("community.intro"),
            "note": t("community.premium_note") if premium else t("community.free_note"),
            "empty": t("community.empty") if not self.messages else None,
            "messages": [self._message_view(message) for message in self.messages],
            "message": self.mutations.feedback.text or self.subscriber.error or None,
            "form": {
                "draft": self.draft,
                "placeholder": t("community.placeholder"),
                "submit_label": t("community.send"),
            }
            if session.is_authenticated
            else None,
            "login_prompt": None if session.is_authenticated else t("community.login_prompt"),
            "starter": starter,
        }


class ProfileScreen(Screen):
    page = Page.PROFILE

    def view(self) -> dict[str, Any]:
        t = self.ctx.t
        session = self.ctx.session
        if not session.is_authenticated:
            return {"page": self.page.value, "title": t("profile.title"), "login_prompt": t("profile.login_prompt")}
        premium = session.is_premium
        return {
            "page": self.page.value,
            "title": t("profile.title"),
            "login_prompt": None,
            "email": session.email or t("profile.no_email"),
            "user_id": session.user_id,
            "account_type": t("profile.premium") if premium else t("profile.free"),
            "upgrade_pitch": None if premium else t("profile.upgrade_pitch"),
            "benefits_title": t("profile.benefits_title"),
            "benefits": [t(f"profile.benefit.{index}") for index in range(1, PREMIUM_BENEFIT_COUNT + 1)],
            "upgrade_label": None if premium else t("profile.upgrade_button"),
        }


SCREENS: dict[Page, type[Screen]] = {
    Page.HOME: HomeScreen,
    Page.AI_CHAT: AIChatScreen,
    Page.PROFESSIONALS: ProfessionalsScreen,
    Page.FREEDOM_WALL: FreedomWallScreen,
    Page.COMMUNITY: CommunityScreen,
    Page.PROFILE: ProfileScreen,
}


def build_screen(page: Page, ctx: AppContext, *, on_change: Callable[[], None] | None = None) -> Screen:
    return SCREENS[page](ctx, on_change=on_change)


__all__ = [
    "AIChatScreen",
    "CommunityScreen",
    "FreedomWallScreen",
    "HomeScreen",
    "ProfessionalsScreen",
    "ProfileScreen",
    "SCREENS",
    "Screen",
    "build_screen",
]
