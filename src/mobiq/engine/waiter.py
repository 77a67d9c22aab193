"""PollingWaiter — timeout-bounded element polling.

Resolves a locator into strategy candidates once, then re-queries the driver
every round, trying candidates in order, until one satisfies a readiness
predicate or the deadline passes. Per-candidate failures never escape a
round; only the aggregate timeout is reported.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from mobiq.core.clock import Clock, SystemClock
from mobiq.core.exceptions import (
    DriverError,
    NotFoundError,
    SessionNotActiveError,
    StillPresentError,
    UnsupportedLocatorError,
)
from mobiq.core.models import DriverErrorKind, Readiness, WaitConfig
from mobiq.engine.resolver import coerce_locator, resolve

if TYPE_CHECKING:
    from mobiq.core.models import ElementHandle, Locator, StrategyCandidate
    from mobiq.driver.base import BaseDriver
    from mobiq.engine.resolver import LocatorLike

logger = logging.getLogger(__name__)

Predicate = Callable[["BaseDriver", "ElementHandle"], Awaitable[bool]]

# Errors that abort a wait instead of counting as a failed candidate
_FATAL_ERRORS = (SessionNotActiveError, UnsupportedLocatorError)


async def is_present(driver: BaseDriver, handle: ElementHandle) -> bool:
    return True


async def is_visible(driver: BaseDriver, handle: ElementHandle) -> bool:
    return await driver.is_element_displayed(handle)


def text_contains(expected: str) -> Predicate:
    """Case-sensitive substring match on the element's text."""

    async def _predicate(driver: BaseDriver, handle: ElementHandle) -> bool:
        text = await driver.get_element_text(handle)
        return bool(text) and expected in text

    return _predicate


READINESS_PREDICATES: dict[Readiness, Predicate] = {
    Readiness.PRESENT: is_present,
    Readiness.VISIBLE: is_visible,
    # the protocol exposes no clickability signal; readiness degrades to existence
    Readiness.CLICKABLE: is_present,
}


class PollingWaiter:
    """Polls the driver until an element is ready, absent, or time runs out."""

    def __init__(
        self,
        config: WaitConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config = config or WaitConfig()
        self._clock = clock or SystemClock()
        self._poll_interval = self._config.poll_interval_ms / 1000

    @property
    def default_timeout_ms(self) -> int:
        return self._config.default_timeout_ms

    def _budget_ms(self, timeout_ms: float | None) -> float:
        return float(timeout_ms) if timeout_ms is not None else float(self._config.default_timeout_ms)

    async def wait_until(
        self,
        driver: BaseDriver,
        locator: LocatorLike,
        predicate: Readiness | Predicate = Readiness.PRESENT,
        timeout_ms: float | None = None,
    ) -> ElementHandle:
        """Wait until a candidate resolves to an element satisfying ``predicate``.

        Args:
            driver: Driver to query.
            locator: Abstract locator (or a loose shape accepted by coerce_locator).
            predicate: Readiness name or custom async predicate.
            timeout_ms: Budget override; the configured default when None.
                A zero budget still runs exactly one round.

        Returns:
            Handle of the first element that satisfied the predicate.

        Raises:
            NotFoundError: Deadline passed without a ready element.
        """
        if isinstance(predicate, Readiness):
            readiness_name = predicate.value
            check = READINESS_PREDICATES[predicate]
        else:
            readiness_name = getattr(predicate, "__name__", "custom")
            check = predicate
        return await self._poll(driver, coerce_locator(locator), check, timeout_ms, readiness_name)

    async def wait_for_text(
        self,
        driver: BaseDriver,
        locator: LocatorLike,
        text: str,
        timeout_ms: float | None = None,
    ) -> ElementHandle:
        """Wait until the element's text contains ``text`` (case-sensitive)."""
        return await self._poll(
            driver,
            coerce_locator(locator),
            text_contains(text),
            timeout_ms,
            f'text contains "{text}"',
        )

    async def wait_until_absent(
        self,
        driver: BaseDriver,
        locator: LocatorLike,
        timeout_ms: float | None = None,
    ) -> None:
        """Wait until no candidate resolves. Absence is success.

        Only "no such element" and staleness count as absence; a lookup that
        times out or cannot reach the server keeps the wait going.

        Raises:
            StillPresentError: An element still resolved, or absence could not
                be confirmed, at the deadline.
        """
        loc = coerce_locator(locator)
        candidates = resolve(loc)
        budget_ms = self._budget_ms(timeout_ms)
        deadline = self._clock.now() + budget_ms / 1000

        last_error: BaseException | None = None

        while True:
            present, error = await self._presence(driver, candidates)
            if present is False:
                logger.debug("Element gone: %s", loc.describe())
                return
            if error is not None:
                last_error = error
            if not await self._pause_until(deadline):
                break

        raise StillPresentError(loc.describe(), candidates, budget_ms, last_error)

    async def find_now(
        self,
        driver: BaseDriver,
        locator: LocatorLike,
        predicate: Readiness = Readiness.VISIBLE,
    ) -> ElementHandle | None:
        """Single immediate round, no waiting. None when nothing is ready."""
        loc = coerce_locator(locator)
        handle, _ = await self._round(driver, resolve(loc), READINESS_PREDICATES[predicate])
        return handle

    async def is_displayed(
        self,
        driver: BaseDriver,
        locator: LocatorLike,
        timeout_ms: float | None = None,
    ) -> bool:
        """Whether the element appears within ``timeout_ms`` and reports displayed."""
        budget = timeout_ms if timeout_ms is not None else self._config.display_check_timeout_ms
        try:
            handle = await self.wait_until(driver, locator, Readiness.PRESENT, budget)
            return await driver.is_element_displayed(handle)
        except _FATAL_ERRORS:
            raise
        except Exception as e:
            logger.debug("is_displayed(%s) -> False: %s", locator, e)
            return False

    # -- internal helpers -----------------------------------------------------

    async def _poll(
        self,
        driver: BaseDriver,
        locator: Locator,
        predicate: Predicate,
        timeout_ms: float | None,
        readiness: str,
    ) -> ElementHandle:
        # candidate order is fixed for the whole wait; only the driver is re-queried
        candidates = resolve(locator)
        budget_ms = self._budget_ms(timeout_ms)
        start = self._clock.now()
        deadline = start + budget_ms / 1000
        last_error: BaseException | None = None
        rounds = 0

        while True:
            rounds += 1
            handle, error = await self._round(driver, candidates, predicate)
            if handle is not None:
                logger.debug(
                    "Resolved %s (%s) in round %d", locator.describe(), readiness, rounds
                )
                return handle
            if error is not None:
                last_error = error
            if not await self._pause_until(deadline):
                break

        elapsed_ms = (self._clock.now() - start) * 1000
        raise NotFoundError(
            locator.describe(),
            candidates,
            timeout_ms=budget_ms,
            elapsed_ms=elapsed_ms,
            readiness=readiness,
            last_error=last_error,
        )

    async def _pause_until(self, deadline: float) -> bool:
        """Sleep one interval (capped at the deadline). False once time is up."""
        remaining = deadline - self._clock.now()
        if remaining <= 0:
            return False
        await self._clock.sleep(min(self._poll_interval, remaining))
        return self._clock.now() < deadline

    async def _round(
        self,
        driver: BaseDriver,
        candidates: list[StrategyCandidate],
        predicate: Predicate,
    ) -> tuple[ElementHandle | None, BaseException | None]:
        last_error: BaseException | None = None
        for candidate in candidates:
            try:
                handle = await driver.find_element(candidate.strategy, candidate.selector)
                if await predicate(driver, handle):
                    return handle, None
            except _FATAL_ERRORS:
                raise
            except Exception as e:
                last_error = e
        return None, last_error

    async def _presence(
        self,
        driver: BaseDriver,
        candidates: list[StrategyCandidate],
    ) -> tuple[bool | None, BaseException | None]:
        """One lookup round for a disappearance wait.

        Returns ``(True, None)`` when a candidate resolves and ``(False, None)``
        when every candidate that answered reported the element missing or
        stale. An unsupported strategy defers to the remaining candidates. Any
        other failure leaves presence unknown: ``(None, error)``.
        """
        absent = False
        unsupported: DriverError | None = None
        unknown: BaseException | None = None
        for candidate in candidates:
            try:
                await driver.find_element(candidate.strategy, candidate.selector)
            except _FATAL_ERRORS:
                raise
            except DriverError as e:
                if e.transient:
                    absent = True
                elif e.kind == DriverErrorKind.UNSUPPORTED:
                    unsupported = e
                else:
                    unknown = e
            except Exception as e:
                unknown = e
            else:
                return True, None

        if absent and unknown is None:
            return False, None
        return None, unknown or unsupported
