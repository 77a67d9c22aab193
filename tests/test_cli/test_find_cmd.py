"""Tests for mobiq find command."""

from __future__ import annotations

import json
import os
from pathlib import Path  # noqa: TC003
from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

from mobiq.cli.commands import find_cmd
from mobiq.cli.main import app
from mobiq.core.exceptions import NotFoundError
from mobiq.core.models import Config, DriverConfig, Locator, Readiness
from mobiq.driver import DRIVER_REGISTRY
from mobiq.driver.actions import W3C_ELEMENT_KEY
from mobiq.driver.webdriver import WebDriverClient

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("MOBIQ_"):
            monkeypatch.delenv(key, raising=False)


def test_find_requires_session() -> None:
    result = runner.invoke(app, ["find", "--id", "login"])
    assert result.exit_code == 1
    assert "no session id" in result.output


def test_find_bad_locator() -> None:
    result = runner.invoke(app, ["find", "--session", "s1"])
    assert result.exit_code == 1
    assert "Unsupported locator format" in result.output


def test_find_prints_element(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}

    async def fake_find(
        config: Config, locator: Locator, readiness: Readiness, timeout_ms: int | None
    ) -> str:
        seen.update(
            session=config.driver.session_id,
            server=config.driver.server_url,
            locator=locator,
            readiness=readiness,
            timeout_ms=timeout_ms,
        )
        return "el-42"

    monkeypatch.setattr(find_cmd, "_find", fake_find)
    result = runner.invoke(
        app,
        [
            "find",
            "--id",
            "login",
            "--session",
            "s1",
            "--server",
            "http://grid:4723",
            "--readiness",
            "clickable",
            "--timeout",
            "250",
        ],
    )
    assert result.exit_code == 0
    assert "el-42" in result.output
    assert seen == {
        "session": "s1",
        "server": "http://grid:4723",
        "locator": Locator.by_id("login"),
        "readiness": Readiness.CLICKABLE,
        "timeout_ms": 250,
    }


def test_find_session_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_find(*args: Any) -> str:
        return "el-1"

    monkeypatch.setattr(find_cmd, "_find", fake_find)
    monkeypatch.setenv("MOBIQ_DRIVER__SESSION_ID", "env-session")
    result = runner.invoke(app, ["find", "-a", "Submit"])
    assert result.exit_code == 0
    assert "el-1" in result.output


def test_find_not_found_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_find(*args: Any) -> str:
        raise NotFoundError('{"id": "login"}', [], timeout_ms=100)

    monkeypatch.setattr(find_cmd, "_find", fake_find)
    result = runner.invoke(app, ["find", "--id", "login", "-s", "s1"])
    assert result.exit_code == 1
    assert "not found within 100ms" in result.output


# ── Against a mocked WebDriver server ──


@pytest.fixture
def server(monkeypatch: pytest.MonkeyPatch) -> list[httpx.Request]:
    """Route the "mock" driver type to a WebDriverClient on an in-memory transport."""
    requests: list[httpx.Request] = []
    routes: dict[tuple[str, str], Any] = {
        ("POST", "/session/s1/element"): {W3C_ELEMENT_KEY: "el-9"},
        ("GET", "/session/s1/element/el-9/displayed"): True,
    }

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        key = (request.method, request.url.path)
        if key not in routes:
            return httpx.Response(404, json={"value": {"error": "unknown command"}})
        return httpx.Response(200, json={"value": routes[key]})

    class MockedClient(WebDriverClient):
        def __init__(self, config: DriverConfig) -> None:
            client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
            super().__init__(config, client)

    monkeypatch.setitem(DRIVER_REGISTRY, "mock", MockedClient)
    monkeypatch.setenv("MOBIQ_DRIVER__TYPE", "mock")
    return requests


def test_find_visible_checks_displayed(server: list[httpx.Request]) -> None:
    result = runner.invoke(app, ["find", "--id", "login", "-s", "s1", "-r", "visible"])
    assert result.exit_code == 0
    assert "el-9" in result.output
    assert [r.url.path for r in server] == [
        "/session/s1/element",
        "/session/s1/element/el-9/displayed",
    ]
    assert json.loads(server[0].content) == {"using": "id", "value": "login"}


def test_find_present_skips_displayed(server: list[httpx.Request]) -> None:
    result = runner.invoke(app, ["find", "--xpath", "//a", "-s", "s1", "-r", "present"])
    assert result.exit_code == 0
    assert "el-9" in result.output
    assert [r.url.path for r in server] == ["/session/s1/element"]


def test_find_unknown_driver_type(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MOBIQ_DRIVER__TYPE", "nope")
    result = runner.invoke(app, ["find", "--id", "login", "-s", "s1"])
    assert result.exit_code == 1
    assert "Unknown driver type: nope" in result.output
