"""Locale bundles shared by the backend surface and the app core."""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from fastapi import Request

SUPPORTED_LOCALES: tuple[str, ...] = ("en", "fil")
DEFAULT_LOCALE = "en"
_I18N_DIR = Path(__file__).resolve().parent.parent / "ui" / "i18n"
_LOCALE_ALIASES = {"tl": "fil", "fil-ph": "fil", "tl-ph": "fil"}

logger = logging.getLogger(__name__)


def _load_messages(locale: str) -> dict[str, str]:
    return json.loads((_I18N_DIR / f"{locale}.json").read_text(encoding="utf-8"))


@lru_cache(maxsize=16)
def get_messages(locale: str) -> dict[str, str]:
    normalized = normalize_locale(locale)
    try:
        return _load_messages(normalized)
    except (OSError, ValueError):
        if normalized != DEFAULT_LOCALE:
            logger.exception("Failed to load locale bundle %s; using %s", normalized, DEFAULT_LOCALE)
            return get_messages(DEFAULT_LOCALE)
        raise


def normalize_locale(locale: str | None) -> str:
    """Map a locale tag onto a supported bundle, defaulting to English."""

    if not locale:
        return DEFAULT_LOCALE
    value = locale.strip()
    if value in SUPPORTED_LOCALES:
        return value
    lowered = value.lower()
    if lowered in _LOCALE_ALIASES:
        return _LOCALE_ALIASES[lowered]
    if lowered.startswith("fil") or lowered.startswith("tl"):
        return "fil"
    return DEFAULT_LOCALE


def select_locale(candidate: str | None, accept_languages: Iterable[str] | None = None) -> str:
    if candidate:
        return normalize_locale(candidate)
    if accept_languages:
        for lang in accept_languages:
            if lang.lower().startswith(("en", "fil", "tl")):
                return normalize_locale(lang)
    return DEFAULT_LOCALE


def translate(locale: str, key: str, default: str | None = None, **values: Any) -> str:
    """Look up ``key`` and fill ``{placeholders}`` from ``values``."""

    messages = get_messages(locale)
    if key in messages:
        template = messages[key]
    else:
        fallback = get_messages(DEFAULT_LOCALE)
        template = fallback.get(key, default if default is not None else key)
    if values:
        return template.format(**values)
    return template


def resolve_request_locale(request: Request) -> str:
    """Pick the bundle for a request: the ``lang`` query parameter, then Accept-Language."""

    header = request.headers.get("accept-language", "")
    tags = [part.split(";", 1)[0].strip() for part in header.split(",") if part.strip()]
    return select_locale(request.query_params.get("lang"), tags)


__all__ = [
    "DEFAULT_LOCALE",
    "SUPPORTED_LOCALES",
    "get_messages",
    "normalize_locale",
    "select_locale",
    "translate",
    "resolve_request_locale",
]
