"""One-shot calls to the generative-text endpoint for the three suggestion sites."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal, Protocol, Sequence

import httpx

from ..services.i18n_service import translate
from .context import Session
from .errors import SuggestionError

logger = logging.getLogger(__name__)

Content = dict[str, Any]


class TextGenerator(Protocol):
    async def generate(self, contents: Sequence[Content]) -> Any:
        """Return the decoded JSON body of one ``generateContent`` call."""
        ...


class GeminiClient(TextGenerator):
    """Direct ``httpx`` client for Gemini ``generateContent``. No timeout, no retry."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str = "gemini-2.0-flash",
        api_base: str = "https://generativelanguage.googleapis.com/v1beta",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._endpoint = f"{api_base.rstrip('/')}/models/{model}:generateContent"
        self._transport = transport

    async def generate(self, contents: Sequence[Content]) -> Any:
        payload = {"contents": list(contents)}
        try:
            async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
                response = await client.post(self._endpoint, params={"key": self._api_key}, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Gemini transport error | endpoint=%s error=%s", self._endpoint, type(exc).__name__)
            raise SuggestionError("Generative-text request failed") from exc

        if response.is_error:
            # Error bodies carry no candidates and fall through to the fallback text.
            logger.warning("Gemini returned an error status | endpoint=%s status=%s", self._endpoint, response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise SuggestionError("Generative-text response was not valid JSON") from exc


def user_turn(text: str) -> Content:
    return {"role": "user", "parts": [{"text": text}]}


def extract_first_text(result: Any) -> str | None:
    """Return the first candidate's first text part, or ``None`` when the shape is off."""

    if not isinstance(result, dict):
        return None
    candidates = result.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) else None


@dataclass(frozen=True, slots=True)
class ChatTurn:
    sender: Literal["user", "ai"]
    text: str

    def as_content(self) -> Content:
        role = "user" if self.sender == "user" else "model"
        return {"role": role, "parts": [{"text": self.text}]}


@dataclass(frozen=True, slots=True)
class Suggestion:
    """Outcome of one call site. ``ok`` is false when ``text`` is a fallback or hint."""

    text: str
    ok: bool


class AISuggestionClient:
    def __init__(
        self,
        generator: TextGenerator,
        session: Callable[[], Session],
        *,
        locale: str = "en",
    ) -> None:
        self._generator = generator
        self._session = session
        self._locale = locale

    def _t(self, key: str, **values: Any) -> str:
        return translate(self._locale, key, **values)

    async def _ask(self, contents: Sequence[Content], *, fallback_key: str, error_key: str) -> Suggestion:
        try:
            result = await self._generator.generate(contents)
        except SuggestionError as exc:
            logger.error("Suggestion request failed | fallback=%s error=%s", fallback_key, exc)
            return Suggestion(self._t(error_key), ok=False)
        text = extract_first_text(result)
        if text is None:
            logger.warning("Suggestion response had no candidates | fallback=%s", fallback_key)
            return Suggestion(self._t(fallback_key), ok=False)
        return Suggestion(text, ok=True)

    async def chat_reply(self, history: Sequence[ChatTurn], message: str) -> Suggestion:
        """Resend the whole visible conversation plus the new user turn."""

        contents = [turn.as_content() for turn in history]
        contents.append(user_turn(message))
        return await self._ask(contents, fallback_key="chat.no_reply", error_key="chat.connection_error")

    async def post_affirmation(self, draft: str) -> Suggestion:
        if not self._session().is_premium:
            return Suggestion(self._t("wall.premium_required"), ok=False)
        if not draft.strip():
            return Suggestion(self._t("wall.suggestion_needs_draft"), ok=False)
        prompt = self._t("prompts.post_suggestion", draft=draft)
        return await self._ask(
            [user_turn(prompt)],
            fallback_key="wall.suggestion_unavailable",
            error_key="wall.suggestion_error",
        )

    async def conversation_starter(self) -> Suggestion:
        if not self._session().is_premium:
            return Suggestion(self._t("community.premium_required"), ok=False)
        return await self._ask(
            [user_turn(self._t("prompts.conversation_starter"))],
            fallback_key="community.starter_unavailable",
            error_key="community.starter_error",
        )


__all__ = [
    "AISuggestionClient",
    "ChatTurn",
    "GeminiClient",
    "Suggestion",
    "TextGenerator",
    "extract_first_text",
    "user_turn",
]
