"""BasePage — page-object base wiring the engine to one driver session.

Page objects subclass it and call these helpers with locators from their
own catalogs. Every locator argument also accepts a list of alternatives.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mobiq.core.clock import Clock, SystemClock
from mobiq.core.models import Config, Direction, Readiness
from mobiq.core.platform import detect_platform
from mobiq.engine.gestures import ScrollSearch, Swiper
from mobiq.engine.interactions import InteractionRetrier
from mobiq.engine.resolver import text_locator
from mobiq.engine.waiter import PollingWaiter

if TYPE_CHECKING:
    from mobiq.core.models import ElementHandle, Locator
    from mobiq.driver.base import BaseDriver
    from mobiq.engine.resolver import LocatorLike


class BasePage:
    """Shared element helpers for page objects."""

    def __init__(
        self,
        driver: BaseDriver,
        config: Config | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.driver = driver
        self.config = config or Config()
        self.clock = clock or SystemClock()
        capabilities = getattr(driver, "capabilities", None)
        self.platform = detect_platform(
            capabilities if isinstance(capabilities, dict) else None,
            self.config.driver.platform,
        )
        self.waiter = PollingWaiter(self.config.wait, self.clock)
        self.retrier = InteractionRetrier(
            driver,
            self.waiter,
            self.config.interaction,
            self.clock,
            platform=self.platform,
        )
        self.scroller = ScrollSearch(
            self.waiter,
            Swiper(self.platform, self.config.scroll, self.clock),
            self.config.scroll,
        )

    # -- lookup ---------------------------------------------------------------

    async def find_element(
        self,
        locator: LocatorLike | list[LocatorLike],
        timeout_ms: float | None = None,
    ) -> ElementHandle:
        return await self._find(locator, Readiness.PRESENT, timeout_ms)

    async def find_element_visible(
        self,
        locator: LocatorLike | list[LocatorLike],
        timeout_ms: float | None = None,
    ) -> ElementHandle:
        return await self._find(locator, Readiness.VISIBLE, timeout_ms)

    async def find_element_clickable(
        self,
        locator: LocatorLike | list[LocatorLike],
        timeout_ms: float | None = None,
    ) -> ElementHandle:
        return await self._find(locator, Readiness.CLICKABLE, timeout_ms)

    async def is_displayed(self, locator: LocatorLike, timeout_ms: float | None = None) -> bool:
        return await self.waiter.is_displayed(self.driver, locator, timeout_ms)

    async def wait_for_text(
        self,
        locator: LocatorLike,
        text: str,
        timeout_ms: float | None = None,
    ) -> ElementHandle:
        return await self.waiter.wait_for_text(self.driver, locator, text, timeout_ms)

    async def wait_for_element_not_present(
        self,
        locator: LocatorLike,
        timeout_ms: float | None = None,
    ) -> None:
        await self.waiter.wait_until_absent(self.driver, locator, timeout_ms)

    def text_locator(self, text: str, *, include_contains: bool = False) -> Locator:
        """Platform-aware locator for an element showing ``text``."""
        return text_locator(text, self.platform, include_contains=include_contains)

    # -- interactions ---------------------------------------------------------

    async def click(
        self,
        locator: LocatorLike | list[LocatorLike],
        timeout_ms: float | None = None,
    ) -> None:
        await self.retrier.click(locator, timeout_ms)

    async def send_keys(
        self,
        locator: LocatorLike | list[LocatorLike],
        text: str,
        timeout_ms: float | None = None,
    ) -> None:
        await self.retrier.send_keys(locator, text, timeout_ms)

    async def get_text(
        self,
        locator: LocatorLike | list[LocatorLike],
        timeout_ms: float | None = None,
    ) -> str:
        return await self.retrier.get_text(locator, timeout_ms)

    async def tap_at(self, x: int, y: int) -> None:
        await self.retrier.tap_at(x, y)

    async def long_press(
        self,
        locator: LocatorLike | list[LocatorLike],
        duration_ms: int | None = None,
    ) -> None:
        await self.retrier.long_press(locator, duration_ms)

    async def hide_keyboard(self) -> None:
        await self.retrier.hide_keyboard()

    async def scroll_to(
        self,
        locator: LocatorLike,
        direction: Direction | str = Direction.DOWN,
        max_swipes: int | None = None,
    ) -> ElementHandle:
        return await self.scroller.scroll_to_element(self.driver, locator, direction, max_swipes)

    # -- internal helpers -----------------------------------------------------

    async def _find(
        self,
        locator: LocatorLike | list[LocatorLike],
        readiness: Readiness,
        timeout_ms: float | None,
    ) -> ElementHandle:
        async def _wait(loc: Locator) -> ElementHandle:
            return await self.waiter.wait_until(self.driver, loc, readiness, timeout_ms)

        return await self.retrier.with_alternatives(f"find ({readiness})", locator, _wait)
