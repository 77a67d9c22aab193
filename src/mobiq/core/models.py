"""MobiQ data models — Pydantic v2.

Enum, locator, handle and config definitions live here.
Imports core.exceptions for locator validation; core.config is imported
lazily for the YAML settings source.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from mobiq.core.exceptions import UnsupportedLocatorError

# ============================================================
# Enums
# ============================================================


class Strategy(StrEnum):
    """Lookup strategies understood by the remote automation driver."""

    ID = "id"
    XPATH = "xpath"
    ACCESSIBILITY_ID = "accessibility id"


class LocatorKind(StrEnum):
    """Which variant of Locator is populated."""

    ID = "id"
    XPATH = "xpath"
    ACCESSIBILITY_ID = "accessibility_id"
    RAW = "raw"


class CandidateRank(StrEnum):
    """Whether a strategy candidate is the primary lookup or a fallback."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


class Readiness(StrEnum):
    """Readiness predicate an element must satisfy before it is returned."""

    PRESENT = "present"
    VISIBLE = "visible"
    # No distinct enablement signal on the remote protocol: same as PRESENT.
    CLICKABLE = "clickable"


class Direction(StrEnum):
    """Swipe / scroll direction."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class Platform(StrEnum):
    """Mobile platform family."""

    ANDROID = "android"
    IOS = "ios"


class DriverErrorKind(StrEnum):
    """Structured classification of a failed remote call."""

    NO_SUCH_ELEMENT = "no_such_element"
    STALE_ELEMENT = "stale_element"
    UNSUPPORTED = "unsupported"
    INVALID_ARGUMENT = "invalid_argument"
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    UNKNOWN = "unknown"


TRANSIENT_ERROR_KINDS: frozenset[DriverErrorKind] = frozenset(
    {
        DriverErrorKind.STALE_ELEMENT,
        DriverErrorKind.NO_SUCH_ELEMENT,
    }
)


# ============================================================
# Locator Models
# ============================================================


class Locator(BaseModel):
    """Abstract, platform-agnostic description of how to find an element.

    Exactly one variant is populated: ``id``, ``xpath``, ``accessibility_id``,
    or the raw ``strategy`` + ``selector`` pair.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(default=None, description="Native resource identifier")
    xpath: str | None = Field(default=None, description="XPath expression")
    accessibility_id: str | None = Field(default=None, description="Accessibility id")
    strategy: str | None = Field(default=None, description="Raw strategy name")
    selector: str | None = Field(default=None, description="Raw strategy selector")

    @model_validator(mode="after")
    def exactly_one_variant(self) -> Locator:
        raw_parts = (self.strategy is not None, self.selector is not None)
        if any(raw_parts) and not all(raw_parts):
            msg = "raw locator requires both strategy and selector"
            raise UnsupportedLocatorError(msg, locator=self._fields_repr())

        populated = [
            name
            for name, value in (
                ("id", self.id),
                ("xpath", self.xpath),
                ("accessibility_id", self.accessibility_id),
                ("strategy", self.strategy),
            )
            if value is not None
        ]
        if len(populated) != 1:
            msg = f"locator must populate exactly one variant, got {populated or 'none'}"
            raise UnsupportedLocatorError(msg, locator=self._fields_repr())

        for value in (self.id, self.xpath, self.accessibility_id, self.strategy, self.selector):
            if value is not None and not value.strip():
                msg = "locator values must be non-empty strings"
                raise UnsupportedLocatorError(msg, locator=self._fields_repr())
        return self

    # -- constructors ---------------------------------------------------------

    @classmethod
    def by_id(cls, resource_id: str) -> Locator:
        return cls(id=resource_id)

    @classmethod
    def by_xpath(cls, expression: str) -> Locator:
        return cls(xpath=expression)

    @classmethod
    def by_accessibility_id(cls, name: str) -> Locator:
        return cls(accessibility_id=name)

    @classmethod
    def by_strategy(cls, strategy: str, selector: str) -> Locator:
        return cls(strategy=strategy, selector=selector)

    # -- accessors ------------------------------------------------------------

    @property
    def kind(self) -> LocatorKind:
        if self.id is not None:
            return LocatorKind.ID
        if self.xpath is not None:
            return LocatorKind.XPATH
        if self.accessibility_id is not None:
            return LocatorKind.ACCESSIBILITY_ID
        return LocatorKind.RAW

    def describe(self) -> str:
        """Short human-readable form used in logs and error messages."""
        if self.id is not None:
            return f'{{"id": "{self.id}"}}'
        if self.xpath is not None:
            return f'{{"xpath": "{self.xpath}"}}'
        if self.accessibility_id is not None:
            return f'{{"accessibility id": "{self.accessibility_id}"}}'
        return f'{{"{self.strategy}": "{self.selector}"}}'

    def _fields_repr(self) -> str:
        data = self.__dict__
        return str({k: v for k, v in data.items() if v is not None})

    def __str__(self) -> str:
        return self.describe()


class StrategyCandidate(BaseModel):
    """A concrete (strategy, selector) pair derived from a Locator."""

    model_config = ConfigDict(frozen=True)

    strategy: str
    selector: str
    rank: CandidateRank = Field(default=CandidateRank.PRIMARY)

    def describe(self) -> str:
        return f'"{self.strategy}": "{self.selector}"'


# ============================================================
# Driver Models
# ============================================================


class ElementHandle(BaseModel):
    """Opaque element reference returned by the remote driver.

    Valid only until the driver revokes it; never cache across polls.
    """

    model_config = ConfigDict(frozen=True)

    element_id: str = Field(..., min_length=1)


class ElementRect(BaseModel):
    """Element position and size in viewport coordinates."""

    x: float = Field(default=0.0)
    y: float = Field(default=0.0)
    width: float = Field(default=0.0, ge=0.0)
    height: float = Field(default=0.0, ge=0.0)

    @property
    def center(self) -> tuple[int, int]:
        return (int(self.x + self.width / 2), int(self.y + self.height / 2))


class WindowSize(BaseModel):
    """Viewport size."""

    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)


# ============================================================
# Config Models
# ============================================================


class WaitConfig(BaseModel):
    """Polling waiter configuration."""

    default_timeout_ms: int = Field(default=10000, ge=0, le=600000)
    poll_interval_ms: int = Field(default=500, ge=1, le=60000)
    display_check_timeout_ms: int = Field(default=2000, ge=0, le=600000)


class InteractionConfig(BaseModel):
    """Interaction retrier configuration."""

    max_attempts: int = Field(default=3, ge=1, le=20)
    retry_pause_ms: int = Field(default=300, ge=0, le=60000)
    tap_pause_ms: int = Field(default=10, ge=0, le=5000)
    long_press_ms: int = Field(default=1000, ge=1, le=60000)
    vendor_type_command: str = Field(default="mobile: typeText")
    tap_mechanisms: list[str] = Field(
        default_factory=lambda: ["native_click", "pointer_tap"],
        min_length=1,
        description="Tap mechanism names, tried in order",
    )
    type_mechanisms: list[str] = Field(
        default_factory=lambda: ["native_type", "keyboard_type", "vendor_type"],
        min_length=1,
        description="Type mechanism names, tried in order",
    )


class ScrollConfig(BaseModel):
    """Scroll search and swipe geometry configuration."""

    max_swipes: int = Field(default=10, ge=1, le=100)
    distance: float = Field(default=0.5, gt=0.0, le=0.8)
    swipe_duration_ms: int = Field(default=300, ge=0, le=10000)
    settle_ms: int = Field(default=500, ge=0, le=10000)


class DriverConfig(BaseModel):
    """Remote automation endpoint configuration."""

    type: str = Field(default="webdriver", description="Driver registry key")
    server_url: str = Field(default="http://127.0.0.1:4723")
    session_id: str = Field(default="", description="Attach to an existing session")
    platform: Platform | None = Field(default=None, description="android | ios")
    request_timeout_s: float = Field(default=30.0, gt=0.0, le=600.0)
    capabilities: dict[str, Any] = Field(default_factory=dict)


class Config(BaseSettings):
    """Project configuration.

    Sources, highest priority first: init kwargs (CLI overrides), ``MOBIQ_``
    env vars, the YAML file named by ``config_file``, model defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="MOBIQ_",
        env_nested_delimiter="__",
    )

    config_file: Path | None = Field(
        default=None, exclude=True, description="YAML file the values were read from"
    )
    project_name: str = Field(default="mobiq-project")
    wait: WaitConfig = Field(default_factory=WaitConfig)
    interaction: InteractionConfig = Field(default_factory=InteractionConfig)
    scroll: ScrollConfig = Field(default_factory=ScrollConfig)
    driver: DriverConfig = Field(default_factory=DriverConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from mobiq.core.config import YamlFileSource

        init_kwargs: dict[str, Any] = getattr(init_settings, "init_kwargs", {})
        yaml_file = init_kwargs.get("config_file")
        return (init_settings, env_settings, YamlFileSource(settings_cls, yaml_file))
