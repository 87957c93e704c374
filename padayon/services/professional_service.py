"""Static directory of mental-health professionals shown for browsing."""
from __future__ import annotations

from dataclasses import dataclass

from .i18n_service import translate


@dataclass(frozen=True, slots=True)
class Professional:
    id: int
    name: str
    specialization: str
    rate: str
    availability: str


_DIRECTORY: tuple[tuple[int, str], ...] = (
    (1, "Dr. Anya Sharma"),
    (2, "Ms. Ben Tan"),
    (3, "Mr. Carlo Dizon"),
    (4, "Dr. Jane Smith"),
)


def list_professionals(locale: str) -> list[Professional]:
    """Return the directory with specialization, rate and availability localised."""

    return [
        Professional(
            id=prof_id,
            name=name,
            specialization=translate(locale, f"professionals.{prof_id}.specialization"),
            rate=translate(locale, f"professionals.{prof_id}.rate"),
            availability=translate(locale, f"professionals.{prof_id}.availability"),
        )
        for prof_id, name in _DIRECTORY
    ]


__all__ = ["Professional", "list_professionals"]
