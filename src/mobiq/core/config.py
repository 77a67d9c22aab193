"""MobiQ configuration — locate, load and save ``mobiq.config.yaml``.

Source precedence is declared on ``Config.settings_customise_sources``:
overrides passed to ``load_config`` beat ``MOBIQ_`` env vars, which beat the
YAML file, which beats the model defaults. Nested sections merge key by key.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError
from pydantic_settings import SettingsError, YamlConfigSettingsSource

from mobiq.core.exceptions import ConfigError
from mobiq.core.models import Config

if TYPE_CHECKING:
    from pydantic_settings import BaseSettings

DEFAULT_CONFIG_FILENAME = "mobiq.config.yaml"
CONFIG_DIRNAME = ".mobiq"


class YamlFileSource(YamlConfigSettingsSource):
    """YAML settings source that reports unreadable files as ConfigError."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_file: Path | None) -> None:
        super().__init__(settings_cls, yaml_file=yaml_file, yaml_file_encoding="utf-8")

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        try:
            data = super()._read_file(file_path)
        except yaml.YAMLError as e:
            msg = f"Failed to parse YAML: {file_path}: {e}"
            raise ConfigError(msg) from e
        except OSError as e:
            msg = f"Failed to read config: {file_path}: {e}"
            raise ConfigError(msg) from e
        if not isinstance(data, dict):
            msg = f"Config file must be a YAML mapping, got {type(data).__name__}: {file_path}"
            raise ConfigError(msg)
        return data


def find_config_file(start: Path | None = None, *, search_parents: bool = True) -> Path | None:
    """First existing config file in ``start`` (cwd by default) or its parents.

    Each directory is checked for ``mobiq.config.yaml``, then
    ``.mobiq/mobiq.config.yaml``.
    """
    base = start or Path.cwd()
    directories = [base, *base.parents] if search_parents else [base]
    for directory in directories:
        for candidate in (
            directory / DEFAULT_CONFIG_FILENAME,
            directory / CONFIG_DIRNAME / DEFAULT_CONFIG_FILENAME,
        ):
            if candidate.is_file():
                return candidate
    return None


def find_config_path() -> Path:
    """Config file ``config set`` writes to: an existing one in cwd, else a new one."""
    return find_config_file(search_parents=False) or Path.cwd() / DEFAULT_CONFIG_FILENAME


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Config:
    """Build the effective Config.

    Args:
        config_path: YAML file to read. When None, the nearest config file in
            cwd or its parents; a missing file just contributes nothing.
        overrides: Nested values that beat every other source.

    Raises:
        ConfigError: The YAML file is malformed or a value fails validation.
    """
    yaml_file = config_path if config_path is not None else find_config_file()
    try:
        return Config(**{**(overrides or {}), "config_file": yaml_file})
    except (ValidationError, SettingsError) as e:
        msg = f"Config validation failed: {e}"
        raise ConfigError(msg) from e


def save_config(config: Config, path: Path) -> None:
    """Write ``config`` as YAML, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(config.model_dump(mode="json"), allow_unicode=True, sort_keys=False),
        encoding="utf-8",
    )


def dotted_key_to_dict(key: str, value: Any) -> dict[str, Any]:
    """'wait.default_timeout_ms' -> {'wait': {'default_timeout_ms': value}}."""
    nested: Any = value
    for part in reversed(key.split(".")):
        nested = {part: nested}
    return nested
