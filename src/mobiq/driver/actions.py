"""W3C action sequence builders for touch pointers and keys.

Each builder returns the ``actions`` list of a single input source; the
driver wraps it with the source type and id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mobiq.core.models import ElementHandle

W3C_ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"

Action = dict[str, Any]


def tap_at(x: int, y: int, pause_ms: int = 10) -> list[Action]:
    """Touch down and up at viewport coordinates."""
    return [
        {"type": "pointerMove", "duration": 0, "x": int(x), "y": int(y)},
        {"type": "pointerDown", "button": 0},
        {"type": "pause", "duration": pause_ms},
        {"type": "pointerUp", "button": 0},
    ]


def tap_element(handle: ElementHandle, pause_ms: int = 10) -> list[Action]:
    """Touch down and up centered on an element (element-origin move)."""
    return [
        {
            "type": "pointerMove",
            "duration": 0,
            "origin": {W3C_ELEMENT_KEY: handle.element_id},
            "x": 0,
            "y": 0,
        },
        {"type": "pointerDown", "button": 0},
        {"type": "pause", "duration": pause_ms},
        {"type": "pointerUp", "button": 0},
    ]


def press_and_hold(x: int, y: int, duration_ms: int) -> list[Action]:
    """Long press at viewport coordinates."""
    return [
        {"type": "pointerMove", "duration": 0, "x": int(x), "y": int(y)},
        {"type": "pointerDown", "button": 0},
        {"type": "pause", "duration": duration_ms},
        {"type": "pointerUp", "button": 0},
    ]


def swipe(
    start: tuple[int, int],
    end: tuple[int, int],
    duration_ms: int = 300,
) -> list[Action]:
    """Press at ``start``, drag to ``end`` over ``duration_ms``, release."""
    return [
        {"type": "pointerMove", "duration": 0, "x": int(start[0]), "y": int(start[1])},
        {"type": "pointerDown", "button": 0},
        {"type": "pause", "duration": 100},
        {"type": "pointerMove", "duration": duration_ms, "x": int(end[0]), "y": int(end[1])},
        {"type": "pointerUp", "button": 0},
    ]


def type_keys(text: str) -> list[Action]:
    """keyDown/keyUp pair for every character of ``text``."""
    actions: list[Action] = []
    for char in text:
        actions.append({"type": "keyDown", "value": char})
        actions.append({"type": "keyUp", "value": char})
    return actions
