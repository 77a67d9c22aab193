"""Swipe gestures and ScrollSearch.

Swipes go through the platform's ``mobile: swipe`` extension first (Android
takes coordinates, iOS takes a direction) and fall back to a generic W3C
pointer gesture when the extension fails.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from mobiq.core.clock import Clock, SystemClock
from mobiq.core.exceptions import DriverError, NotFoundError
from mobiq.core.models import Direction, Platform, Readiness, ScrollConfig
from mobiq.driver.actions import swipe
from mobiq.engine.resolver import coerce_locator, resolve

if TYPE_CHECKING:
    from mobiq.core.models import ElementHandle, WindowSize
    from mobiq.driver.base import BaseDriver
    from mobiq.engine.resolver import LocatorLike
    from mobiq.engine.waiter import PollingWaiter

logger = logging.getLogger(__name__)

Point = tuple[int, int]

# Start offset from the edge the finger leaves, as a fraction of the viewport
_EDGE = 0.2


def swipe_coordinates(
    size: WindowSize,
    direction: Direction | str,
    distance: float = 0.5,
) -> tuple[Point, Point]:
    """Start and end points of a swipe covering ``distance`` of the viewport.

    ``down`` drags the finger from 20% towards the bottom, ``up`` from 80%
    towards the top; ``left``/``right`` mirror that horizontally.

    Raises:
        ValueError: Unknown direction.
    """
    w, h = size.width, size.height
    direction = Direction(str(direction).lower())
    if direction == Direction.UP:
        return (w // 2, round(h * (1 - _EDGE))), (w // 2, round(h * (1 - _EDGE - distance)))
    if direction == Direction.DOWN:
        return (w // 2, round(h * _EDGE)), (w // 2, round(h * (_EDGE + distance)))
    if direction == Direction.LEFT:
        return (round(w * (1 - _EDGE)), h // 2), (round(w * (1 - _EDGE - distance)), h // 2)
    return (round(w * _EDGE), h // 2), (round(w * (_EDGE + distance)), h // 2)


class Swiper:
    """Issues one directional swipe per call and lets the UI settle."""

    def __init__(
        self,
        platform: Platform = Platform.ANDROID,
        config: ScrollConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._platform = platform
        self._config = config or ScrollConfig()
        self._clock = clock or SystemClock()

    async def swipe(
        self,
        driver: BaseDriver,
        direction: Direction | str = Direction.DOWN,
        distance: float | None = None,
    ) -> None:
        direction = Direction(str(direction).lower())
        size = await driver.get_window_size()
        start, end = swipe_coordinates(size, direction, distance or self._config.distance)
        duration = self._config.swipe_duration_ms

        if self._platform == Platform.ANDROID:
            params: dict[str, Any] = {
                "startX": start[0],
                "startY": start[1],
                "endX": end[0],
                "endY": end[1],
                "duration": duration,
            }
        else:
            params = {"direction": direction.value}

        try:
            await driver.execute_vendor_command("mobile: swipe", params)
        except DriverError as e:
            logger.warning("mobile: swipe failed (%s), using pointer gesture", e)
            await driver.dispatch_pointer_actions(swipe(start, end, duration))

        await self._clock.sleep(self._config.settle_ms / 1000)


class ScrollSearch:
    """Swipes until an element becomes visible or the swipe budget runs out."""

    def __init__(
        self,
        waiter: PollingWaiter,
        swiper: Swiper | None = None,
        config: ScrollConfig | None = None,
    ) -> None:
        self._waiter = waiter
        self._config = config or ScrollConfig()
        self._swiper = swiper or Swiper(config=self._config)

    async def scroll_to_element(
        self,
        driver: BaseDriver,
        locator: LocatorLike,
        direction: Direction | str = Direction.DOWN,
        max_swipes: int | None = None,
    ) -> ElementHandle:
        """Return the element once visible, swiping at most ``max_swipes`` times.

        Each step is one immediate lookup (no polling); a miss triggers a
        single swipe. The element is checked once more after the last swipe.

        Raises:
            NotFoundError: Still not visible after the swipe budget.
        """
        loc = coerce_locator(locator)
        budget = max_swipes if max_swipes is not None else self._config.max_swipes
        swipes = 0

        while True:
            handle = await self._waiter.find_now(driver, loc, Readiness.VISIBLE)
            if handle is not None:
                logger.debug("Found %s after %d swipe(s)", loc.describe(), swipes)
                return handle
            if swipes >= budget:
                break
            await self._swiper.swipe(driver, direction)
            swipes += 1

        raise NotFoundError(loc.describe(), resolve(loc), max_swipes=budget)
