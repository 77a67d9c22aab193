"""Platform detection from environment, config and session capabilities."""

from __future__ import annotations

import logging
import os
from typing import Any

from mobiq.core.models import Platform

logger = logging.getLogger(__name__)

PLATFORM_ENV_VAR = "PLATFORM"


def detect_platform(
    capabilities: dict[str, Any] | None = None,
    configured: Platform | None = None,
) -> Platform:
    """Detect the platform family.

    Order: explicit config, ``PLATFORM`` env var, ``platformName`` capability
    (with or without the ``appium:`` prefix). Defaults to Android.
    """
    if configured is not None:
        return configured

    env_value = os.environ.get(PLATFORM_ENV_VAR, "").strip().lower()
    if env_value in (Platform.ANDROID, Platform.IOS):
        return Platform(env_value)

    caps = capabilities or {}
    name = caps.get("platformName") or caps.get("appium:platformName")
    if isinstance(name, str) and name.strip().lower() in (Platform.ANDROID, Platform.IOS):
        return Platform(name.strip().lower())

    logger.warning("Platform not specified, defaulting to android")
    return Platform.ANDROID

