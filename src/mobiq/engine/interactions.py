"""InteractionRetrier — tap, type and read text against resolved elements.

Every interaction resolves its target through PollingWaiter first, then
walks an ordered mechanism chain. Clicks are retried as a whole when the
driver reports a transient condition (stale element, no such element);
anything else propagates on the first attempt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from mobiq.core.clock import Clock, SystemClock
from mobiq.core.exceptions import (
    AllLocatorsFailedError,
    DriverError,
    InteractionError,
    SessionNotActiveError,
    TransientInteractionError,
    UnsupportedLocatorError,
)
from mobiq.core.models import InteractionConfig, Platform, Readiness
from mobiq.driver.actions import press_and_hold, tap_at
from mobiq.engine.mechanisms import build_tap_chain, build_type_chain
from mobiq.engine.resolver import coerce_locator
from mobiq.engine.waiter import PollingWaiter

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from mobiq.core.models import ElementHandle, Locator
    from mobiq.driver.base import BaseDriver
    from mobiq.engine.mechanisms import TapMechanism, TypeMechanism
    from mobiq.engine.resolver import LocatorLike

logger = logging.getLogger(__name__)

T = TypeVar("T")

Step = tuple[str, "Callable[[], Awaitable[Any]]"]

ANDROID_BACK_KEYCODE = 4

# Never retried and never skipped by multi-locator fallback
FATAL_ERRORS = (SessionNotActiveError, UnsupportedLocatorError)


@dataclass
class RetryState:
    """Attempt counter with a fixed ceiling plus the last observed error."""

    max_attempts: int
    attempts: int = 0
    last_error: BaseException | None = None

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.max_attempts


class InteractionRetrier:
    """Performs user interactions for one driver session."""

    def __init__(
        self,
        driver: BaseDriver,
        waiter: PollingWaiter | None = None,
        config: InteractionConfig | None = None,
        clock: Clock | None = None,
        platform: Platform = Platform.ANDROID,
        tap_chain: Sequence[TapMechanism] | None = None,
        type_chain: Sequence[TypeMechanism] | None = None,
    ) -> None:
        self._driver = driver
        self._config = config or InteractionConfig()
        self._clock = clock or SystemClock()
        self._waiter = waiter or PollingWaiter(clock=self._clock)
        self._platform = platform
        self._tap_chain = list(tap_chain or build_tap_chain(self._config))
        self._type_chain = list(type_chain or build_type_chain(self._config))

    # -- public API -----------------------------------------------------------

    async def click(
        self,
        locator: LocatorLike | list[LocatorLike],
        timeout_ms: float | None = None,
    ) -> None:
        """Wait for the element, then tap it (native click, else pointer tap)."""

        async def _click(loc: Locator) -> None:
            await self._retrying("click", loc, lambda: self._click_once(loc, timeout_ms))

        await self.with_alternatives("click", locator, _click)

    async def send_keys(
        self,
        locator: LocatorLike | list[LocatorLike],
        text: str,
        timeout_ms: float | None = None,
    ) -> None:
        """Wait for the element, then type ``text`` through the type chain."""

        async def _send_keys(loc: Locator) -> None:
            handle = await self._waiter.wait_until(
                self._driver, loc, Readiness.VISIBLE, timeout_ms
            )
            steps: list[Step] = [
                (m.name, _bind_type(m, self._driver, handle, text)) for m in self._type_chain
            ]
            used = await self._run_chain("send keys to", loc.describe(), steps)
            logger.info("Sent keys to %s via %s", loc.describe(), used)

        await self.with_alternatives("send keys to", locator, _send_keys)

    async def get_text(
        self,
        locator: LocatorLike | list[LocatorLike],
        timeout_ms: float | None = None,
    ) -> str:
        """Wait for the element to be visible and read its text once."""

        async def _get_text(loc: Locator) -> str:
            handle = await self._waiter.wait_until(
                self._driver, loc, Readiness.VISIBLE, timeout_ms
            )
            return await self._driver.get_element_text(handle)

        return await self.with_alternatives("get text from", locator, _get_text)

    async def tap_at(self, x: int, y: int) -> None:
        """Tap viewport coordinates: pointer actions, else ``mobile: tap``."""
        steps: list[Step] = [
            (
                "pointer_tap",
                lambda: self._driver.dispatch_pointer_actions(
                    tap_at(x, y, self._config.tap_pause_ms)
                ),
            ),
            (
                "vendor_tap",
                lambda: self._driver.execute_vendor_command("mobile: tap", {"x": x, "y": y}),
            ),
        ]
        used = await self._run_chain("tap at", f"({x}, {y})", steps)
        logger.info("Tapped at (%d, %d) via %s", x, y, used)

    async def long_press(
        self,
        locator: LocatorLike | list[LocatorLike],
        duration_ms: int | None = None,
        timeout_ms: float | None = None,
    ) -> None:
        """Press and hold the centre of an element."""
        duration = duration_ms if duration_ms is not None else self._config.long_press_ms

        async def _once(loc: Locator) -> None:
            handle = await self._waiter.wait_until(
                self._driver, loc, Readiness.VISIBLE, timeout_ms
            )
            rect = await self._driver.get_element_rect(handle)
            x, y = rect.center
            steps: list[Step] = [
                (
                    "vendor_long_click",
                    lambda: self._driver.execute_vendor_command(
                        "mobile: longClickGesture", {"x": x, "y": y, "duration": duration}
                    ),
                ),
                (
                    "pointer_hold",
                    lambda: self._driver.dispatch_pointer_actions(press_and_hold(x, y, duration)),
                ),
            ]
            await self._run_chain("long press", loc.describe(), steps, abort_on_transient=True)
            logger.info("Long pressed %s for %dms", loc.describe(), duration)

        async def _long_press(loc: Locator) -> None:
            await self._retrying("long press", loc, lambda: _once(loc))

        await self.with_alternatives("long press", locator, _long_press)

    async def hide_keyboard(self) -> None:
        """Dismiss the soft keyboard. Driver failures are logged, never raised."""
        try:
            await self._driver.execute_vendor_command("mobile: hideKeyboard", {})
            return
        except DriverError as e:
            logger.warning("mobile: hideKeyboard failed: %s", e)

        if self._platform != Platform.ANDROID:
            return
        try:
            await self._driver.execute_vendor_command(
                "mobile: pressKey", {"keycode": ANDROID_BACK_KEYCODE}
            )
        except DriverError as e:
            logger.warning("Back key fallback failed: %s", e)

    # -- internal helpers -----------------------------------------------------

    async def _click_once(self, loc: Locator, timeout_ms: float | None) -> None:
        handle = await self._waiter.wait_until(self._driver, loc, Readiness.CLICKABLE, timeout_ms)
        steps: list[Step] = [
            (m.name, _bind_tap(m, self._driver, handle)) for m in self._tap_chain
        ]
        used = await self._run_chain("click", loc.describe(), steps, abort_on_transient=True)
        logger.info("Clicked element %s via %s", loc.describe(), used)

    async def _retrying(
        self,
        action: str,
        loc: Locator,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        """Repeat ``operation`` while it fails with a transient DriverError."""
        state = RetryState(max_attempts=self._config.max_attempts)
        while True:
            state.attempts += 1
            try:
                return await operation()
            except DriverError as e:
                if not e.transient:
                    raise
                state.last_error = e
                if state.exhausted:
                    raise TransientInteractionError(
                        action, loc.describe(), state.attempts, e
                    ) from e
                logger.debug(
                    "%s %s: transient %s (attempt %d/%d), retrying",
                    action,
                    loc.describe(),
                    e.kind,
                    state.attempts,
                    state.max_attempts,
                )
                await self._clock.sleep(self._config.retry_pause_ms / 1000)

    async def _run_chain(
        self,
        action: str,
        target: str,
        steps: Sequence[Step],
        abort_on_transient: bool = False,
    ) -> str:
        """Try each step in order; return the name of the one that worked.

        A DriverError moves on to the next step. With ``abort_on_transient`` a
        transient DriverError is re-raised instead so the caller can retry the
        whole interaction against a freshly resolved element.

        Raises:
            InteractionError: Every step failed; carries the full chain.
        """
        chain: list[tuple[str, BaseException]] = []
        for name, call in steps:
            try:
                await call()
            except DriverError as e:
                if abort_on_transient and e.transient:
                    raise
                logger.debug("%s %s via %s failed: %s", action, target, name, e)
                chain.append((name, e))
                continue
            if chain:
                logger.warning(
                    "%s %s needed fallback %s after: %s",
                    action,
                    target,
                    name,
                    ", ".join(n for n, _ in chain),
                )
            return name
        raise InteractionError(action, target, chain)

    async def with_alternatives(
        self,
        action: str,
        locator: LocatorLike | list[LocatorLike],
        operation: Callable[[Locator], Awaitable[T]],
    ) -> T:
        """Run ``operation`` for one locator, or for each alternative in turn.

        Any failure other than a fatal session or locator error moves on to
        the next alternative.
        """
        if not isinstance(locator, list):
            return await operation(coerce_locator(locator))
        if not locator:
            msg = "empty list of alternative locators"
            raise UnsupportedLocatorError(msg)

        failures: list[tuple[str, BaseException]] = []
        for index, alternative in enumerate(locator):
            loc = coerce_locator(alternative)
            try:
                result = await operation(loc)
            except FATAL_ERRORS:
                raise
            except Exception as e:
                logger.debug("%s with %s failed: %s", action, loc.describe(), e)
                failures.append((loc.describe(), e))
                continue
            if failures:
                logger.info(
                    "%s succeeded with alternative locator #%d %s",
                    action,
                    index + 1,
                    loc.describe(),
                )
            return result
        raise AllLocatorsFailedError(action, failures)


def _bind_tap(
    mechanism: TapMechanism,
    driver: BaseDriver,
    handle: ElementHandle,
) -> Callable[[], Awaitable[None]]:
    return lambda: mechanism.attempt(driver, handle)


def _bind_type(
    mechanism: TypeMechanism,
    driver: BaseDriver,
    handle: ElementHandle,
    text: str,
) -> Callable[[], Awaitable[None]]:
    return lambda: mechanism.attempt(driver, handle, text)
