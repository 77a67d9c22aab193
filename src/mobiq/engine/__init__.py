"""Engine: locator resolution, polling, interactions and gestures."""

from __future__ import annotations

from mobiq.engine.gestures import ScrollSearch, Swiper
from mobiq.engine.interactions import InteractionRetrier
from mobiq.engine.mechanisms import (
    TAP_MECHANISM_REGISTRY,
    TYPE_MECHANISM_REGISTRY,
    KeyboardType,
    NativeClick,
    NativeType,
    PointerTap,
    TapMechanism,
    TypeMechanism,
    VendorType,
    build_tap_chain,
    build_type_chain,
)
from mobiq.engine.page import BasePage
from mobiq.engine.resolver import coerce_locator, resolve, text_locator, xpath_literal
from mobiq.engine.waiter import PollingWaiter

__all__ = [
    "BasePage",
    "InteractionRetrier",
    "KeyboardType",
    "NativeClick",
    "NativeType",
    "PointerTap",
    "PollingWaiter",
    "ScrollSearch",
    "Swiper",
    "TapMechanism",
    "TypeMechanism",
    "VendorType",
    "TAP_MECHANISM_REGISTRY",
    "TYPE_MECHANISM_REGISTRY",
    "build_tap_chain",
    "build_type_chain",
    "coerce_locator",
    "resolve",
    "text_locator",
    "xpath_literal",
]
