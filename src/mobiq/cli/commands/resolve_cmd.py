"""mobiq resolve — show the lookup candidates for a locator."""

from __future__ import annotations

import typer

from mobiq.core.exceptions import UnsupportedLocatorError
from mobiq.core.models import Locator
from mobiq.engine.resolver import resolve


def locator_from_options(
    element_id: str | None,
    xpath: str | None,
    accessibility_id: str | None,
    strategy: str | None,
    selector: str | None,
) -> Locator:
    """Build a Locator from the mutually exclusive CLI flags."""
    return Locator(
        id=element_id,
        xpath=xpath,
        accessibility_id=accessibility_id,
        strategy=strategy,
        selector=selector,
    )


def resolve_command(
    element_id: str | None = typer.Option(None, "--id", help="Native resource id."),
    xpath: str | None = typer.Option(None, "--xpath", help="XPath expression."),
    accessibility_id: str | None = typer.Option(
        None, "--accessibility-id", "-a", help="Accessibility id."
    ),
    strategy: str | None = typer.Option(None, "--strategy", help="Raw strategy name."),
    selector: str | None = typer.Option(None, "--selector", help="Raw strategy selector."),
) -> None:
    """Print the ordered (strategy, selector) candidates for a locator."""
    try:
        locator = locator_from_options(element_id, xpath, accessibility_id, strategy, selector)
    except UnsupportedLocatorError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo(f"Locator: {locator.describe()}")
    for index, candidate in enumerate(resolve(locator), start=1):
        typer.echo(f"  {index}. [{candidate.rank}] {candidate.strategy} = {candidate.selector}")
