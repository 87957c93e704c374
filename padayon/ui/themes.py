"""Colour themes for the two published skins of the app."""
from __future__ import annotations

from dataclasses import dataclass

DEFAULT_THEME = "rose"


@dataclass(frozen=True, slots=True)
class Theme:
    name: str
    primary: str
    primary_dark: str
    accent: str
    surface: str
    background_from: str
    background_to: str
    danger: str


THEMES: dict[str, Theme] = {
    "rose": Theme(
        name="rose",
        primary="red-700",
        primary_dark="red-800",
        accent="orange-600",
        surface="white",
        background_from="red-50",
        background_to="orange-50",
        danger="red-500",
    ),
    "ocean": Theme(
        name="ocean",
        primary="blue-700",
        primary_dark="blue-800",
        accent="teal-600",
        surface="white",
        background_from="blue-50",
        background_to="teal-50",
        danger="red-500",
    ),
}


def get_theme(name: str | None = None) -> Theme:
    return THEMES.get((name or "").strip().lower(), THEMES[DEFAULT_THEME])


__all__ = ["DEFAULT_THEME", "THEMES", "Theme", "get_theme"]
