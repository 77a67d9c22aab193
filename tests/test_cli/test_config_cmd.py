"""Tests for mobiq config command."""

from __future__ import annotations

import os
from pathlib import Path  # noqa: TC003

import pytest
import yaml
from typer.testing import CliRunner

from mobiq.cli.main import app
from mobiq.core.config import DEFAULT_CONFIG_FILENAME, save_config
from mobiq.core.models import Config

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("MOBIQ_"):
            monkeypatch.delenv(key, raising=False)


def _create_config(tmp_path: Path) -> Path:
    """Create a default config file in tmp_path and return its path."""
    config_path = tmp_path / DEFAULT_CONFIG_FILENAME
    save_config(Config(), config_path)
    return config_path


def test_config_show(tmp_path: Path) -> None:
    """mobiq config show prints config as YAML."""
    config_path = _create_config(tmp_path)

    result = runner.invoke(app, ["config", "show", "--config", str(config_path)])
    assert result.exit_code == 0
    assert "project_name" in result.output
    assert "mobiq-project" in result.output


def test_config_show_no_config() -> None:
    """mobiq config show with no config file uses defaults."""
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    data = yaml.safe_load(result.output)
    assert data["wait"]["default_timeout_ms"] == 10000
    assert data["interaction"]["max_attempts"] == 3


def test_config_show_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """MOBIQ_ env vars show up in the effective config."""
    monkeypatch.setenv("MOBIQ_SCROLL__MAX_SWIPES", "4")
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert yaml.safe_load(result.output)["scroll"]["max_swipes"] == 4


def test_config_set(tmp_path: Path) -> None:
    """mobiq config set writes the dotted key to the YAML file."""
    config_path = _create_config(tmp_path)

    result = runner.invoke(
        app, ["config", "set", "wait.default_timeout_ms", "5000", "--config", str(config_path)]
    )
    assert result.exit_code == 0
    assert "Set wait.default_timeout_ms = 5000" in result.output

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    assert data["wait"]["default_timeout_ms"] == 5000


def test_config_set_creates_file(tmp_path: Path) -> None:
    """mobiq config set without a file creates one in the working directory."""
    result = runner.invoke(app, ["config", "set", "driver.session_id", "abc"])
    assert result.exit_code == 0
    assert (tmp_path / DEFAULT_CONFIG_FILENAME).exists()


def test_config_set_invalid_value(tmp_path: Path) -> None:
    """Values that fail validation exit with code 1."""
    config_path = _create_config(tmp_path)
    result = runner.invoke(
        app, ["config", "set", "wait.poll_interval_ms", "0", "--config", str(config_path)]
    )
    assert result.exit_code == 1
    assert "Error" in result.output
