"""Shared fakes: a virtual-time clock and a scriptable in-memory driver."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from mobiq.core.clock import Clock
from mobiq.core.exceptions import DriverError, SessionNotActiveError
from mobiq.core.models import (
    DriverErrorKind,
    ElementHandle,
    ElementRect,
    WindowSize,
)
from mobiq.driver.base import BaseDriver


class FakeClock(Clock):
    """Virtual time: ``sleep`` advances ``now`` instantly and is recorded."""

    def __init__(self, start: float = 0.0) -> None:
        self.time = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.time

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.time += max(seconds, 0)


def driver_error(kind: DriverErrorKind, message: str = "scripted failure") -> DriverError:
    return DriverError(message, kind=kind, command="fake")


class FakeDriver(BaseDriver):
    """In-memory driver.

    ``elements`` maps ``(strategy, selector)`` to an element id. Failures can be
    queued per method name in ``failures`` (popped one per call), and methods
    listed in ``unsupported`` always fail with an UNSUPPORTED DriverError.
    ``after_command`` is called after every successful vendor command.
    """

    def __init__(self) -> None:
        self.session = True
        self.capabilities: dict[str, Any] = {}
        self.elements: dict[tuple[str, str], str] = {}
        self.hidden: set[str] = set()
        self.texts: dict[str, str] = {}
        self.rects: dict[str, ElementRect] = {}
        self.window = WindowSize(width=1000, height=2000)
        self.failures: dict[str, list[BaseException]] = {}
        self.unsupported: set[str] = set()
        self.calls: list[tuple[Any, ...]] = []
        self.after_command: Callable[[FakeDriver, str, dict[str, Any]], None] | None = None

    # -- scripting helpers ----------------------------------------------------

    def add(self, strategy: str, selector: str, element_id: str = "el-1", text: str = "") -> None:
        self.elements[(strategy, selector)] = element_id
        self.texts[element_id] = text

    def fail(self, method: str, *errors: BaseException) -> None:
        self.failures.setdefault(method, []).extend(errors)

    def called(self, method: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == method]

    def _enter(self, method: str, *args: Any) -> None:
        self.calls.append((method, *args))
        if not self.session:
            raise SessionNotActiveError(method)
        if method in self.unsupported:
            raise driver_error(DriverErrorKind.UNSUPPORTED, f"{method} not implemented")
        queue = self.failures.get(method)
        if queue:
            raise queue.pop(0)

    # -- BaseDriver -----------------------------------------------------------

    @property
    def has_session(self) -> bool:
        return self.session

    async def find_element(self, strategy: str, selector: str) -> ElementHandle:
        self._enter("find_element", strategy, selector)
        element_id = self.elements.get((strategy, selector))
        if element_id is None:
            raise driver_error(DriverErrorKind.NO_SUCH_ELEMENT, "no such element")
        return ElementHandle(element_id=element_id)

    async def is_element_displayed(self, handle: ElementHandle) -> bool:
        self._enter("is_element_displayed", handle.element_id)
        return handle.element_id not in self.hidden

    async def get_element_text(self, handle: ElementHandle) -> str:
        self._enter("get_element_text", handle.element_id)
        return self.texts.get(handle.element_id, "")

    async def get_element_rect(self, handle: ElementHandle) -> ElementRect:
        self._enter("get_element_rect", handle.element_id)
        return self.rects.get(handle.element_id, ElementRect(x=100, y=200, width=50, height=20))

    async def click_element(self, handle: ElementHandle) -> None:
        self._enter("click_element", handle.element_id)

    async def clear_element(self, handle: ElementHandle) -> None:
        self._enter("clear_element", handle.element_id)

    async def send_keys_to_element(self, handle: ElementHandle, text: str) -> None:
        self._enter("send_keys_to_element", handle.element_id, text)

    async def get_window_size(self) -> WindowSize:
        self._enter("get_window_size")
        return self.window

    async def dispatch_pointer_actions(self, actions: list[dict[str, Any]]) -> None:
        self._enter("dispatch_pointer_actions", actions)

    async def dispatch_key_actions(self, actions: list[dict[str, Any]]) -> None:
        self._enter("dispatch_key_actions", actions)

    async def execute_vendor_command(self, name: str, params: dict[str, Any]) -> Any:
        self._enter("execute_vendor_command", name, params)
        if self.after_command is not None:
            self.after_command(self, name, params)
        return None


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()
