"""Tests for platform detection order."""

from __future__ import annotations

import pytest

from mobiq.core.models import Platform
from mobiq.core.platform import PLATFORM_ENV_VAR, detect_platform


@pytest.fixture(autouse=True)
def _no_platform_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(PLATFORM_ENV_VAR, raising=False)


class TestDetectPlatform:
    def test_default_android(self) -> None:
        assert detect_platform() == Platform.ANDROID

    def test_configured_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(PLATFORM_ENV_VAR, "android")
        caps = {"platformName": "Android"}
        assert detect_platform(caps, configured=Platform.IOS) == Platform.IOS

    def test_env_beats_capabilities(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(PLATFORM_ENV_VAR, " iOS ")
        assert detect_platform({"platformName": "Android"}) == Platform.IOS

    def test_unknown_env_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(PLATFORM_ENV_VAR, "windows")
        assert detect_platform({"platformName": "iOS"}) == Platform.IOS

    @pytest.mark.parametrize("key", ["platformName", "appium:platformName"])
    def test_capability(self, key: str) -> None:
        assert detect_platform({key: "IOS"}) == Platform.IOS

    def test_unknown_capability_defaults(self) -> None:
        assert detect_platform({"platformName": "tizen"}) == Platform.ANDROID
