"""Driver plugin registry."""

from mobiq.driver.base import BaseDriver
from mobiq.driver.webdriver import WebDriverClient

DRIVER_REGISTRY: dict[str, type[BaseDriver]] = {
    "webdriver": WebDriverClient,
}

__all__ = ["BaseDriver", "DRIVER_REGISTRY", "WebDriverClient"]
