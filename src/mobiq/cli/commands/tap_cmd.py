"""mobiq tap — tap an element or coordinates on a live session."""

from __future__ import annotations

import asyncio

import typer

from mobiq.cli.commands.find_cmd import open_driver, session_config
from mobiq.cli.commands.resolve_cmd import locator_from_options
from mobiq.core.exceptions import MobiQError
from mobiq.core.models import Config, Locator
from mobiq.engine.page import BasePage


def _parse_coordinates(value: str) -> tuple[int, int]:
    """Parse an 'x,y' coordinate string."""
    parts = value.split(",")
    if len(parts) != 2:
        msg = f"Invalid coordinate format: '{value}'. Expected 'x,y'"
        raise typer.BadParameter(msg)
    try:
        return int(parts[0].strip()), int(parts[1].strip())
    except ValueError as e:
        msg = f"Invalid coordinate values: '{value}'"
        raise typer.BadParameter(msg) from e


def tap_command(
    element_id: str | None = typer.Option(None, "--id", help="Native resource id."),
    xpath: str | None = typer.Option(None, "--xpath", help="XPath expression."),
    accessibility_id: str | None = typer.Option(
        None, "--accessibility-id", "-a", help="Accessibility id."
    ),
    strategy: str | None = typer.Option(None, "--strategy", help="Raw strategy name."),
    selector: str | None = typer.Option(None, "--selector", help="Raw strategy selector."),
    at: str | None = typer.Option(None, "--at", help="Tap coordinates 'x,y' instead."),
    timeout_ms: int | None = typer.Option(None, "--timeout", "-t", help="Timeout (ms)."),
    session_id: str | None = typer.Option(None, "--session", "-s", help="Session id."),
    server_url: str | None = typer.Option(None, "--server", help="Driver server URL."),
    config_path: str | None = typer.Option(None, "--config", "-c", help="Config file path."),
) -> None:
    """Tap an element (native click, pointer fallback) or raw coordinates."""
    point = _parse_coordinates(at) if at else None
    try:
        locator = (
            None
            if point
            else locator_from_options(element_id, xpath, accessibility_id, strategy, selector)
        )
        config = session_config(config_path, server_url, session_id)
        asyncio.run(_tap(config, locator, point, timeout_ms))
    except MobiQError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None
    typer.echo(f"Tapped {point if point else locator.describe()}")


async def _tap(
    config: Config,
    locator: Locator | None,
    point: tuple[int, int] | None,
    timeout_ms: int | None,
) -> None:
    async with open_driver(config) as driver:
        page = BasePage(driver, config)
        if point is not None:
            await page.tap_at(*point)
        elif locator is not None:
            await page.click(locator, timeout_ms)
