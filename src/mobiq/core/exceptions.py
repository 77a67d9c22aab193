"""MobiQ custom exception hierarchy.

All exceptions inherit from MobiQError.
Lookup failures carry the attempted strategy list; interaction failures carry
the per-mechanism error chain, so harness-side artifact capture has context.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mobiq.core.models import DriverErrorKind, StrategyCandidate


def _describe_error(error: BaseException | None) -> str:
    if error is None:
        return "unknown"
    return f"{type(error).__name__}: {error}"


class MobiQError(Exception):
    """Base exception for all MobiQ errors."""


class ConfigError(MobiQError):
    """Configuration file load/validation error."""


class UnsupportedLocatorError(MobiQError):
    """Malformed or empty locator. Fatal, never retried."""

    def __init__(self, message: str, locator: Any = None) -> None:
        self.locator = locator
        if locator is not None:
            message = f"{message}: {locator}"
        super().__init__(f"Unsupported locator format: {message}")


class SessionNotActiveError(MobiQError):
    """A driver command was issued with no live session. Fatal, never retried."""

    def __init__(self, command: str | None = None) -> None:
        self.command = command
        msg = "No active driver session"
        if command:
            msg += f" (command: {command})"
        super().__init__(msg)


class DriverError(MobiQError):
    """A remote driver call failed.

    ``kind`` is assigned by the driver adapter; callers classify on it
    instead of inspecting the message text.
    """

    def __init__(
        self,
        message: str,
        kind: DriverErrorKind,
        command: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.kind = kind
        self.command = command
        self.status_code = status_code
        super().__init__(message)

    @property
    def transient(self) -> bool:
        """Staleness and "no such element" are expected to clear on retry."""
        from mobiq.core.models import TRANSIENT_ERROR_KINDS

        return self.kind in TRANSIENT_ERROR_KINDS


class NotFoundError(MobiQError):
    """No strategy candidate satisfied the readiness predicate in time.

    Attributes:
        locator: Description of the abstract locator.
        candidates: Strategy candidates tried every round, in order.
        timeout_ms: Budget the wait was given.
        elapsed_ms: Wall-clock time actually spent.
        readiness: Name of the readiness predicate.
        last_error: Last underlying lookup/predicate error, if any.
        max_swipes: Swipe budget when raised by scroll search.
    """

    def __init__(
        self,
        locator: str,
        candidates: Sequence[StrategyCandidate],
        timeout_ms: float | None = None,
        elapsed_ms: float | None = None,
        readiness: str | None = None,
        last_error: BaseException | None = None,
        max_swipes: int | None = None,
    ) -> None:
        self.locator = locator
        self.candidates = list(candidates)
        self.timeout_ms = timeout_ms
        self.elapsed_ms = elapsed_ms
        self.readiness = readiness
        self.last_error = last_error
        self.max_swipes = max_swipes
        super().__init__(self._format())

    def _format(self) -> str:
        if self.max_swipes is not None:
            head = f"Element not found after {self.max_swipes} swipes: {self.locator}"
        else:
            state = f" ({self.readiness})" if self.readiness else ""
            budget = f" within {self.timeout_ms:g}ms" if self.timeout_ms is not None else ""
            head = f"Element{state} not found{budget}: {self.locator}"
        tried = ", ".join(c.describe() for c in self.candidates)
        parts = [head, f"Tried strategies: {tried}"]
        if self.elapsed_ms is not None:
            parts.append(f"Elapsed: {self.elapsed_ms:.0f}ms")
        parts.append(f"Last error: {_describe_error(self.last_error)}")
        return ". ".join(parts)


class StillPresentError(MobiQError):
    """Element was still resolvable when the disappearance wait ran out."""

    def __init__(
        self,
        locator: str,
        candidates: Sequence[StrategyCandidate],
        timeout_ms: float,
        last_error: BaseException | None = None,
    ) -> None:
        self.locator = locator
        self.candidates = list(candidates)
        self.timeout_ms = timeout_ms
        self.last_error = last_error
        tried = ", ".join(c.describe() for c in self.candidates)
        msg = f"Element still present after {timeout_ms:g}ms: {locator}. Tried strategies: {tried}"
        if last_error is not None:
            msg += f". Last error: {_describe_error(last_error)}"
        super().__init__(msg)


class TransientInteractionError(MobiQError):
    """Staleness / "no such element" during an interaction, retries exhausted."""

    def __init__(
        self,
        action: str,
        locator: str,
        attempts: int,
        last_error: BaseException | None = None,
    ) -> None:
        self.action = action
        self.locator = locator
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{action} on {locator} failed after {attempts} attempt(s): "
            f"{_describe_error(last_error)}"
        )


class InteractionError(MobiQError):
    """Every mechanism in an interaction fallback chain failed."""

    def __init__(
        self,
        action: str,
        locator: str,
        chain: Sequence[tuple[str, BaseException]],
    ) -> None:
        self.action = action
        self.locator = locator
        self.chain = list(chain)
        details = "; ".join(f"{name}: {_describe_error(err)}" for name, err in self.chain)
        super().__init__(f"Failed to {action} {locator}. Mechanisms tried: {details or 'none'}")


class AllLocatorsFailedError(MobiQError):
    """Every alternative locator failed; message carries the last failure only."""

    def __init__(
        self,
        action: str,
        failures: Sequence[tuple[str, BaseException]],
    ) -> None:
        self.action = action
        self.failures = list(failures)
        last = self.failures[-1][1] if self.failures else None
        self.last_error = last
        super().__init__(
            f"Failed to {action} element with all locator strategies: "
            f"{last if last is not None else 'unknown error'}"
        )
