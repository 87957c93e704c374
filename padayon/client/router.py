"""In-memory page selection. No URLs, no history."""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:  # pragma: no cover
    from .screens import Screen

logger = logging.getLogger(__name__)


class Page(str, Enum):
    HOME = "home"
    AI_CHAT = "ai_chat"
    PROFESSIONALS = "professionals"
    FREEDOM_WALL = "freedom_wall"
    COMMUNITY = "community"
    PROFILE = "profile"


class ViewRouter:
    """Keep exactly one screen mounted for the current :class:`Page`."""

    def __init__(self, factory: Callable[[Page], "Screen"], *, initial: Page = Page.HOME) -> None:
        self._factory = factory
        self.current = initial
        self.screen: Screen | None = None

    def start(self) -> "Screen":
        if self.screen is None:
            self.screen = self._factory(self.current)
            self.screen.mount()
        return self.screen

    async def navigate(self, page: Page | str) -> "Screen":
        """Unmount the current screen, which cancels its own work, and mount ``page``."""

        target = Page(page)
        if self.screen is not None and target is self.current:
            return self.screen
        if self.screen is not None:
            await self.screen.unmount()
        logger.debug("Navigating | from=%s to=%s", self.current.value, target.value)
        self.current = target
        self.screen = self._factory(target)
        self.screen.mount()
        return self.screen

    async def close(self) -> None:
        screen, self.screen = self.screen, None
        if screen is not None:
            await screen.unmount()


__all__ = ["Page", "ViewRouter"]
