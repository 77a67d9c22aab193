"""MobiQ CLI entry point."""

import logging

import typer

app = typer.Typer(
    name="mobiq",
    help="MobiQ — mobile element resolution and interaction engine",
    no_args_is_help=True,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    if value:
        from mobiq import __version__

        typer.echo(f"mobiq {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """MobiQ — mobile element resolution and interaction engine."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


# -- Register commands --------------------------------------------------------

from mobiq.cli.commands.config_cmd import config_app  # noqa: E402
from mobiq.cli.commands.find_cmd import find_command  # noqa: E402
from mobiq.cli.commands.resolve_cmd import resolve_command  # noqa: E402
from mobiq.cli.commands.tap_cmd import tap_command  # noqa: E402

app.add_typer(config_app, name="config")
app.command(name="resolve")(resolve_command)
app.command(name="find")(find_command)
app.command(name="tap")(tap_command)
