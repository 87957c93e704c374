"""Tests for the app shell, navigation and per-screen view state."""
from __future__ import annotations

import asyncio
from typing import Any, Sequence

from padayon.client import AuthError, IdentityKind, Page, PadayonApp
from padayon.config import Settings
from padayon.constants import MESSAGES_COLLECTION, POSTS_COLLECTION

from conftest import GOOD_REPLY


class BlockingGenerator:
    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def generate(self, contents: Sequence[dict[str, Any]]) -> Any:
        self.started.set()
        await self.release.wait()
        return GOOD_REPLY


async def _sign_up(app: PadayonApp, email: str = "user@x.com") -> None:
    home = await app.navigate(Page.HOME)
    home.toggle_mode()
    home.email, home.password = email, "pw123456"
    assert await home.submit() is True


def test_missing_api_key_is_fatal() -> None:
    app = PadayonApp.from_settings(Settings(BACKEND_CONFIG='{"baseUrl": "http://localhost:8000"}'))

    assert app.view()["fatal_error"] == "The backend configuration is missing. Please set BACKEND_CONFIG."


def test_view_reports_loading_until_started(make_app) -> None:
    async def scenario() -> None:
        app = make_app()
        assert app.view() == {"loading": True, "message": "Loading Padayon...", "fatal_error": None}
        await app.start()
        view = app.view()
        assert view["loading"] is False
        assert view["page"] == "home"
        assert view["entitlement"] == "free"
        assert view["user_id"] == app.ctx.session.user_id
        await app.close()

    asyncio.run(scenario())


def test_header_for_signed_in_and_signed_out_sessions(make_app, backend) -> None:
    async def scenario() -> None:
        app = make_app()
        await app.start()
        labels = [entry["label"] for entry in app.header()]
        assert labels == ["Home", "AI Chat", "Professionals", "Freedom Wall", "Community", "Profile", "Logout"]
        await app.close()

        await backend.sign_out()
        backend.failures["sign_in_anonymously"] = AuthError("offline")
        offline = make_app()
        await offline.start()
        header = offline.header()
        assert [entry["label"] for entry in header][-1] == "Login/Sign Up"
        assert header[-1]["page"] == "home"
        assert offline.view()["auth_error"] == "Anonymous sign-in failed: offline"
        await offline.close()

    asyncio.run(scenario())


def test_navigation_swaps_collection_subscriptions(make_app, backend, wait_until) -> None:
    async def scenario() -> None:
        app = make_app()
        await app.start()

        wall = await app.navigate(Page.FREEDOM_WALL)
        await wait_until(lambda: backend.listener_count(POSTS_COLLECTION) == 1)
        assert await app.navigate("freedom_wall") is wall
        assert backend.listener_count(POSTS_COLLECTION) == 1

        await app.navigate(Page.COMMUNITY)
        await wait_until(lambda: backend.listener_count(MESSAGES_COLLECTION) == 1)
        assert backend.listener_count(POSTS_COLLECTION) == 0
        assert not wall.mounted

        await app.navigate(Page.PROFILE)
        assert backend.listener_count(MESSAGES_COLLECTION) == 0
        await app.close()

    asyncio.run(scenario())


def test_leaving_screen_cancels_in_flight_requests(backend) -> None:
    async def scenario() -> None:
        generator = BlockingGenerator()
        app = PadayonApp.create(identity=backend, collections=backend, generator=generator, app_id="test-app")
        await app.start()
        chat = await app.navigate(Page.AI_CHAT)
        chat.draft = "hello"
        task = chat.send()
        await generator.started.wait()
        assert chat.pending_tasks == 1

        await app.navigate(Page.HOME)
        assert task.cancelled()
        assert chat.pending_tasks == 0
        await app.close()

    asyncio.run(scenario())


def test_chat_send_appends_turns_and_blocks_while_loading(make_app, generator) -> None:
    async def scenario() -> None:
        app = make_app()
        await app.start()
        chat = await app.navigate(Page.AI_CHAT)
        assert chat.send() is None

        chat.draft = "I'm stressed about exams"
        task = chat.send()
        assert chat.loading and chat.draft == ""
        assert chat.view()["send_label"] == "Sending..."
        chat.draft = "again"
        assert chat.send() is None

        await task
        view = chat.view()
        assert [turn["sender"] for turn in view["turns"]] == ["user", "ai"]
        assert view["turns"][1]["text"] == "Take a slow breath."
        assert view["badge"] == "(Free Version)"
        assert chat.loading is False
        await app.close()

    asyncio.run(scenario())
    assert len(generator.calls) == 1


def test_professionals_gate_booking_on_premium(make_app) -> None:
    async def scenario() -> None:
        app = make_app()
        await app.start()
        free = (await app.navigate(Page.PROFESSIONALS)).view()
        assert {card["action"] for card in free["professionals"]} == {"upgrade"}
        assert free["call_to_action"]["label"] == "Learn More About Premium"

        await _sign_up(app)
        premium = (await app.navigate(Page.PROFESSIONALS)).view()
        assert len(premium["professionals"]) == 4
        assert {card["action_label"] for card in premium["professionals"]} == {"Book Session (Premium)"}
        assert premium["call_to_action"] is None
        await app.close()

    asyncio.run(scenario())


def test_wall_shows_delete_only_on_own_posts_for_premium(make_app, backend, wait_until) -> None:
    backend.seed(POSTS_COLLECTION, content="someone else's", author_id="other", author_name="x@y.com", reactions=2)
    backend.seed(POSTS_COLLECTION, content="hidden", author_id="other", author_name="Anonymous", is_anonymous=True)

    async def scenario() -> None:
        app = make_app()
        await app.start()
        await _sign_up(app)
        wall = await app.navigate(Page.FREEDOM_WALL)
        wall.draft = "mine"
        await wall.share()
        await wait_until(lambda: len(wall.posts) == 3)

        posts = {post["content"]: post for post in wall.view()["posts"]}
        assert posts["mine"]["can_delete"] is True
        assert posts["someone else's"]["can_delete"] is False
        assert posts["hidden"]["author"] == "Anonymous"

        other_id = posts["someone else's"]["id"]
        assert await wall.delete(other_id) is False
        assert wall.view()["message"] == "You do not have permission to delete this post."
        await app.close()

    asyncio.run(scenario())
    assert ("delete", POSTS_COLLECTION) not in backend.calls


def test_wall_form_hidden_when_signed_out(make_app, backend, wait_until) -> None:
    backend.failures["sign_in_anonymously"] = AuthError("offline")

    async def scenario() -> None:
        app = make_app()
        await app.start()
        wall = await app.navigate(Page.FREEDOM_WALL)
        await wait_until(lambda: wall.subscriber.snapshot_count == 1)
        view = wall.view()
        assert view["form"] is None
        assert view["login_prompt"] == "Please log in or sign up to share your thoughts on the Freedom Wall."
        assert view["empty"] == "No posts yet. Be the first to share!"
        await app.close()

    asyncio.run(scenario())


def test_wall_suggestion_for_premium_draft(make_app) -> None:
    async def scenario() -> None:
        app = make_app()
        await app.start()
        wall = await app.navigate(Page.FREEDOM_WALL)
        await wall.suggest()
        assert wall.view()["form"]["suggestion"] == "AI suggestions are a Premium feature."

        await _sign_up(app)
        wall = await app.navigate(Page.FREEDOM_WALL)
        wall.draft = "tired"
        await wall.suggest()
        form = wall.view()["form"]
        assert form["can_suggest"] is True
        assert form["suggestion"] == "Take a slow breath."
        await app.close()

    asyncio.run(scenario())


def test_community_labels_and_starter(make_app, backend, wait_until) -> None:
    backend.seed(MESSAGES_COLLECTION, content="hi all", author_id="other", author_name="peer@x.com")
    backend.seed(MESSAGES_COLLECTION, content="who?", author_id="ghost", author_name="")

    async def scenario() -> None:
        app = make_app()
        await app.start()
        community = await app.navigate(Page.COMMUNITY)
        assert community.view()["starter"] is None
        community.draft = "hello"
        await community.send()
        await wait_until(lambda: len(community.messages) == 3)

        authors = [message["author"] for message in community.view()["messages"]]
        assert authors == ["peer@x.com", "Unknown User", "You"]

        await _sign_up(app)
        community = await app.navigate(Page.COMMUNITY)
        await community.request_starter()
        view = community.view()
        assert view["starter"] == {"label": "Starter", "disabled": False}
        assert view["form"]["draft"] == "Take a slow breath."
        assert view["message"] == "A conversation starter was generated! Feel free to edit it before sending."
        await app.close()

    asyncio.run(scenario())


def test_profile_views(make_app, backend) -> None:
    async def scenario() -> None:
        app = make_app()
        await app.start()
        guest = (await app.navigate(Page.PROFILE)).view()
        assert guest["email"] == "N/A"
        assert guest["account_type"] == "Free User"
        assert len(guest["benefits"]) == 8

        await _sign_up(app, "member@example.com")
        member = (await app.navigate(Page.PROFILE)).view()
        assert member["email"] == "member@example.com"
        assert member["account_type"] == "Premium User ✨"
        assert member["upgrade_label"] is None
        await app.close()

        await backend.sign_out()
        backend.failures["sign_in_anonymously"] = AuthError("offline")
        offline = make_app()
        await offline.start()
        prompt = (await offline.navigate(Page.PROFILE)).view()
        assert prompt["login_prompt"] == "Please log in to see your profile."
        await offline.close()

    asyncio.run(scenario())


def test_logout_returns_home_as_anonymous(make_app, wait_until) -> None:
    async def scenario() -> None:
        app = make_app()
        await app.start()
        await _sign_up(app)
        await app.navigate(Page.PROFILE)

        assert await app.logout() is True
        assert app.router.current is Page.HOME
        await wait_until(lambda: app.ctx.session.identity.kind is IdentityKind.ANONYMOUS)
        assert app.view()["entitlement"] == "free"
        await app.close()

    asyncio.run(scenario())
