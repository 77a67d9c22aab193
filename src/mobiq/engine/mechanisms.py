"""Interaction mechanisms — ordered, interchangeable ways to tap or type.

Each mechanism makes one attempt through a different driver capability.
InteractionRetrier walks a list of them and stops at the first success.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, TypeVar

from mobiq.core.exceptions import ConfigError, DriverError
from mobiq.driver.actions import tap_at, tap_element, type_keys

if TYPE_CHECKING:
    from mobiq.core.models import ElementHandle, InteractionConfig
    from mobiq.driver.base import BaseDriver

logger = logging.getLogger(__name__)


# ============================================================
# Tap
# ============================================================


class TapMechanism(ABC):
    """One way of tapping a resolved element."""

    @classmethod
    def from_config(cls, config: InteractionConfig) -> TapMechanism:
        return cls()

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def attempt(self, driver: BaseDriver, handle: ElementHandle) -> None:
        """Tap the element or raise DriverError."""
        ...


class NativeClick(TapMechanism):
    """Element click primitive of the protocol."""

    @property
    def name(self) -> str:
        return "native_click"

    async def attempt(self, driver: BaseDriver, handle: ElementHandle) -> None:
        await driver.click_element(handle)


class PointerTap(TapMechanism):
    """Touch down/up at the centre of the element's rect."""

    def __init__(self, pause_ms: int = 10) -> None:
        self._pause_ms = pause_ms

    @classmethod
    def from_config(cls, config: InteractionConfig) -> PointerTap:
        return cls(config.tap_pause_ms)

    @property
    def name(self) -> str:
        return "pointer_tap"

    async def attempt(self, driver: BaseDriver, handle: ElementHandle) -> None:
        rect = await driver.get_element_rect(handle)
        x, y = rect.center
        await driver.dispatch_pointer_actions(tap_at(x, y, self._pause_ms))


# ============================================================
# Type
# ============================================================


class TypeMechanism(ABC):
    """One way of entering text into a resolved element."""

    @classmethod
    def from_config(cls, config: InteractionConfig) -> TypeMechanism:
        return cls()

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def attempt(self, driver: BaseDriver, handle: ElementHandle, text: str) -> None:
        """Type ``text`` into the element or raise DriverError."""
        ...


class NativeType(TypeMechanism):
    """Clear, then the protocol's send-keys primitive."""

    @property
    def name(self) -> str:
        return "native_type"

    async def attempt(self, driver: BaseDriver, handle: ElementHandle, text: str) -> None:
        await driver.clear_element(handle)
        await driver.send_keys_to_element(handle, text)


class KeyboardType(TypeMechanism):
    """Tap to focus, then per-character keyDown/keyUp events."""

    def __init__(self, pause_ms: int = 10) -> None:
        self._pause_ms = pause_ms

    @classmethod
    def from_config(cls, config: InteractionConfig) -> KeyboardType:
        return cls(config.tap_pause_ms)

    @property
    def name(self) -> str:
        return "keyboard_type"

    async def attempt(self, driver: BaseDriver, handle: ElementHandle, text: str) -> None:
        try:
            await driver.click_element(handle)
        except DriverError as e:
            if e.transient:
                raise
            logger.debug("Focus click failed (%s), focusing with pointer", e.kind)
            await driver.dispatch_pointer_actions(tap_element(handle, self._pause_ms))
        await driver.dispatch_key_actions(type_keys(text))


class VendorType(TypeMechanism):
    """Driver extension command, e.g. ``mobile: typeText``."""

    def __init__(self, command: str = "mobile: typeText") -> None:
        self._command = command

    @classmethod
    def from_config(cls, config: InteractionConfig) -> VendorType:
        return cls(config.vendor_type_command)

    @property
    def name(self) -> str:
        return "vendor_type"

    async def attempt(self, driver: BaseDriver, handle: ElementHandle, text: str) -> None:
        await driver.execute_vendor_command(
            self._command, {"elementId": handle.element_id, "text": text}
        )


# ============================================================
# Registries
# ============================================================

M = TypeVar("M", TapMechanism, TypeMechanism)

TAP_MECHANISM_REGISTRY: dict[str, type[TapMechanism]] = {
    "native_click": NativeClick,
    "pointer_tap": PointerTap,
}

TYPE_MECHANISM_REGISTRY: dict[str, type[TypeMechanism]] = {
    "native_type": NativeType,
    "keyboard_type": KeyboardType,
    "vendor_type": VendorType,
}


def build_tap_chain(config: InteractionConfig) -> list[TapMechanism]:
    """Instantiate ``config.tap_mechanisms`` in order.

    Raises:
        ConfigError: A name is not in TAP_MECHANISM_REGISTRY.
    """
    return [
        _lookup(TAP_MECHANISM_REGISTRY, name, "tap").from_config(config)
        for name in config.tap_mechanisms
    ]


def build_type_chain(config: InteractionConfig) -> list[TypeMechanism]:
    """Instantiate ``config.type_mechanisms`` in order.

    Raises:
        ConfigError: A name is not in TYPE_MECHANISM_REGISTRY.
    """
    return [
        _lookup(TYPE_MECHANISM_REGISTRY, name, "type").from_config(config)
        for name in config.type_mechanisms
    ]


def _lookup(registry: dict[str, type[M]], name: str, kind: str) -> type[M]:
    mechanism_cls = registry.get(name)
    if mechanism_cls is None:
        msg = f"Unknown {kind} mechanism: {name} (available: {', '.join(registry)})"
        raise ConfigError(msg)
    return mechanism_cls
