"""mobiq config — configuration management."""

from __future__ import annotations

from pathlib import Path

import typer
import yaml

from mobiq.core.config import dotted_key_to_dict, find_config_path, load_config, save_config
from mobiq.core.exceptions import ConfigError

config_app = typer.Typer(
    name="config",
    help="Configuration management commands.",
    no_args_is_help=True,
)


@config_app.command(name="show")
def config_show(
    config_path: str | None = typer.Option(None, "--config", "-c", help="Config file path."),
) -> None:
    """Show the effective configuration (defaults, YAML and MOBIQ_ env vars)."""
    try:
        path = Path(config_path) if config_path else None
        config = load_config(config_path=path)
        data = config.model_dump(mode="json")
        typer.echo(yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False))
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None


@config_app.command(name="set")
def config_set(
    key: str = typer.Argument(help="Dotted config key (e.g. wait.default_timeout_ms)."),
    value: str = typer.Argument(help="Value to set."),
    config_path: str | None = typer.Option(None, "--config", "-c", help="Config file path."),
) -> None:
    """Set a configuration value by dotted key and write the YAML file."""
    try:
        path = Path(config_path) if config_path else find_config_path()
        config = load_config(config_path=path, overrides=dotted_key_to_dict(key, value))
        save_config(config, path)
        typer.echo(f"Set {key} = {value}")
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None
