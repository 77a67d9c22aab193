"""mobiq find — wait for an element on a live session."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer

from mobiq.cli.commands.resolve_cmd import locator_from_options
from mobiq.core.config import load_config
from mobiq.core.exceptions import ConfigError, MobiQError
from mobiq.core.models import Config, Locator, Readiness
from mobiq.driver import DRIVER_REGISTRY
from mobiq.engine.page import BasePage

if TYPE_CHECKING:
    from mobiq.driver.base import BaseDriver


def session_config(
    config_path: str | None,
    server_url: str | None,
    session_id: str | None,
) -> Config:
    """Load config with CLI driver overrides; a session id is required."""
    overrides: dict[str, Any] = {"driver": {}}
    if server_url:
        overrides["driver"]["server_url"] = server_url
    if session_id:
        overrides["driver"]["session_id"] = session_id
    config = load_config(config_path=Path(config_path) if config_path else None, overrides=overrides)
    if not config.driver.session_id:
        typer.echo("Error: no session id (use --session or MOBIQ_DRIVER__SESSION_ID)", err=True)
        raise typer.Exit(code=1)
    return config


def open_driver(config: Config) -> BaseDriver:
    """Instantiate the driver registered under ``driver.type``."""
    driver_cls = DRIVER_REGISTRY.get(config.driver.type)
    if driver_cls is None:
        available = ", ".join(sorted(DRIVER_REGISTRY))
        raise ConfigError(f"Unknown driver type: {config.driver.type} (available: {available})")
    return driver_cls(config.driver)  # type: ignore[call-arg]


def find_command(
    element_id: str | None = typer.Option(None, "--id", help="Native resource id."),
    xpath: str | None = typer.Option(None, "--xpath", help="XPath expression."),
    accessibility_id: str | None = typer.Option(
        None, "--accessibility-id", "-a", help="Accessibility id."
    ),
    strategy: str | None = typer.Option(None, "--strategy", help="Raw strategy name."),
    selector: str | None = typer.Option(None, "--selector", help="Raw strategy selector."),
    readiness: Readiness = typer.Option(Readiness.VISIBLE, "--readiness", "-r"),
    timeout_ms: int | None = typer.Option(None, "--timeout", "-t", help="Timeout (ms)."),
    session_id: str | None = typer.Option(None, "--session", "-s", help="Session id."),
    server_url: str | None = typer.Option(None, "--server", help="Driver server URL."),
    config_path: str | None = typer.Option(None, "--config", "-c", help="Config file path."),
) -> None:
    """Wait for an element and print its element id."""
    try:
        locator = locator_from_options(element_id, xpath, accessibility_id, strategy, selector)
        config = session_config(config_path, server_url, session_id)
        element = asyncio.run(_find(config, locator, readiness, timeout_ms))
    except MobiQError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None
    typer.echo(element)


async def _find(
    config: Config,
    locator: Locator,
    readiness: Readiness,
    timeout_ms: int | None,
) -> str:
    async with open_driver(config) as driver:
        page = BasePage(driver, config)
        if readiness == Readiness.PRESENT:
            handle = await page.find_element(locator, timeout_ms)
        elif readiness == Readiness.VISIBLE:
            handle = await page.find_element_visible(locator, timeout_ms)
        else:
            handle = await page.find_element_clickable(locator, timeout_ms)
        return handle.element_id
