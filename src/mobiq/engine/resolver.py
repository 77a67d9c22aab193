"""LocatorResolver — abstract locator to ordered strategy candidates.

``resolve`` is pure and total: every valid Locator maps to at least one
candidate, and unknown strategies pass through unchanged.
"""

from __future__ import annotations

from typing import Any

from mobiq.core.exceptions import UnsupportedLocatorError
from mobiq.core.models import (
    CandidateRank,
    Locator,
    Platform,
    Strategy,
    StrategyCandidate,
)

LocatorLike = Locator | str | tuple[str, str] | dict[str, Any]

_ID_KEYS = ("id", "appium:id")


def xpath_literal(value: str, quote: str = "'") -> str:
    """Quote ``value`` as an XPath 1.0 string literal.

    XPath 1.0 has no escape syntax, so the other quote character is used when
    ``value`` contains ``quote``, and ``concat()`` when it contains both.
    """
    other = '"' if quote == "'" else "'"
    if quote not in value:
        return f"{quote}{value}{quote}"
    if other not in value:
        return f"{other}{value}{other}"
    parts = [f"'{part}'" for part in value.split("'")]
    return "concat(" + ", \"'\", ".join(parts) + ")"


def resource_id_xpath(resource_id: str) -> str:
    """XPath matching an element by its resource-id attribute."""
    return f"//*[@resource-id={xpath_literal(resource_id)}]"


def resolve(locator: Locator) -> list[StrategyCandidate]:
    """Expand a Locator into (strategy, selector) candidates, primary first.

    ``id`` always yields a native-id candidate plus an XPath-by-attribute
    fallback: some driver versions reject native id lookup until the session
    has settled.
    """
    if locator.id is not None:
        return [
            StrategyCandidate(strategy=Strategy.ID, selector=locator.id),
            StrategyCandidate(
                strategy=Strategy.XPATH,
                selector=resource_id_xpath(locator.id),
                rank=CandidateRank.FALLBACK,
            ),
        ]
    if locator.xpath is not None:
        return [StrategyCandidate(strategy=Strategy.XPATH, selector=locator.xpath)]
    if locator.accessibility_id is not None:
        return [
            StrategyCandidate(strategy=Strategy.ACCESSIBILITY_ID, selector=locator.accessibility_id)
        ]
    return [StrategyCandidate(strategy=str(locator.strategy), selector=str(locator.selector))]


def coerce_locator(value: LocatorLike) -> Locator:
    """Accept the loose locator shapes page objects tend to use.

    Supported: Locator, bare string (native id), ``(strategy, selector)``
    tuple, and single-entry dicts keyed by ``id`` / ``appium:id`` / ``xpath`` /
    ``accessibility id``, ``{"using": s, "value": v}``, or any other strategy
    name (raw pass-through).

    Raises:
        UnsupportedLocatorError: Shape not recognized or values empty.
    """
    if isinstance(value, Locator):
        return value
    if isinstance(value, str):
        return Locator.by_id(value)
    if isinstance(value, tuple) and len(value) == 2 and all(isinstance(v, str) for v in value):
        return _from_strategy(value[0], value[1])
    if isinstance(value, dict) and value:
        if "using" in value and "value" in value:
            return _from_strategy(_as_str(value["using"], value), _as_str(value["value"], value))
        for key in _ID_KEYS:
            if key in value:
                return Locator.by_id(_as_str(value[key], value))
        if "xpath" in value:
            return Locator.by_xpath(_as_str(value["xpath"], value))
        if Strategy.ACCESSIBILITY_ID.value in value:
            return Locator.by_accessibility_id(_as_str(value[Strategy.ACCESSIBILITY_ID.value], value))
        key = next(iter(value))
        return _from_strategy(str(key), _as_str(value[key], value))
    msg = "expected Locator, str, (strategy, selector) or dict"
    raise UnsupportedLocatorError(msg, locator=repr(value))


def _from_strategy(strategy: str, selector: str) -> Locator:
    """Known strategy names map to their typed variant, the rest stay raw."""
    if strategy in _ID_KEYS:
        return Locator.by_id(selector)
    if strategy == Strategy.XPATH:
        return Locator.by_xpath(selector)
    if strategy == Strategy.ACCESSIBILITY_ID:
        return Locator.by_accessibility_id(selector)
    return Locator.by_strategy(strategy, selector)


def _as_str(raw: Any, source: Any) -> str:
    if not isinstance(raw, str):
        msg = "locator values must be strings"
        raise UnsupportedLocatorError(msg, locator=repr(source))
    return raw


def text_locator(
    text: str,
    platform: Platform,
    *,
    include_content_desc: bool = True,
    include_contains: bool = False,
) -> Locator:
    """XPath locator for an element showing ``text``.

    Android matches TextView/Button ``@text`` (optionally ``@content-desc`` and
    a ``contains(@text)`` partial match); iOS matches StaticText/Button ``@name``.
    """
    literal = xpath_literal(text, quote='"')
    if platform == Platform.ANDROID:
        xpath = (
            f"//android.widget.TextView[@text={literal}]"
            f" | //android.widget.Button[@text={literal}]"
        )
        if include_content_desc:
            xpath += f" | //*[@content-desc={literal}]"
        if include_contains:
            xpath += f" | //*[contains(@text,{literal})]"
        return Locator.by_xpath(xpath)
    return Locator.by_xpath(
        f"//XCUIElementTypeStaticText[@name={literal}] | //XCUIElementTypeButton[@name={literal}]"
    )
