"""BaseDriver ABC — remote automation driver interface.

WebDriverClient (W3C / Appium HTTP) implements this; tests substitute fakes.
Every method is a remote call and a suspension point. Failures surface as
DriverError with a structured ``kind``, or SessionNotActiveError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Self

if TYPE_CHECKING:
    from types import TracebackType

    from mobiq.core.models import ElementHandle, ElementRect, WindowSize


class BaseDriver(ABC):
    """Remote automation driver abstract interface."""

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Release transport resources. The remote session is left alone."""

    @property
    @abstractmethod
    def has_session(self) -> bool:
        """Whether a live session is attached."""
        ...

    @abstractmethod
    async def find_element(self, strategy: str, selector: str) -> ElementHandle:
        """Look up a single element by strategy + selector."""
        ...

    @abstractmethod
    async def is_element_displayed(self, handle: ElementHandle) -> bool:
        """Displayed state of an element."""
        ...

    @abstractmethod
    async def get_element_text(self, handle: ElementHandle) -> str:
        """Visible text of an element."""
        ...

    @abstractmethod
    async def get_element_rect(self, handle: ElementHandle) -> ElementRect:
        """Position and size of an element."""
        ...

    @abstractmethod
    async def click_element(self, handle: ElementHandle) -> None:
        """Native element click primitive."""
        ...

    @abstractmethod
    async def clear_element(self, handle: ElementHandle) -> None:
        """Native clear primitive for editable elements."""
        ...

    @abstractmethod
    async def send_keys_to_element(self, handle: ElementHandle, text: str) -> None:
        """Native type primitive for editable elements."""
        ...

    @abstractmethod
    async def get_window_size(self) -> WindowSize:
        """Current viewport size."""
        ...

    @abstractmethod
    async def dispatch_pointer_actions(self, actions: list[dict[str, Any]]) -> None:
        """Dispatch one touch pointer input sequence (W3C action items)."""
        ...

    @abstractmethod
    async def dispatch_key_actions(self, actions: list[dict[str, Any]]) -> None:
        """Dispatch one key input sequence (W3C action items)."""
        ...

    @abstractmethod
    async def execute_vendor_command(self, name: str, params: dict[str, Any]) -> Any:
        """Run a driver-specific extension command, e.g. ``mobile: swipe``."""
        ...
