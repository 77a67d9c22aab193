"""WebDriverClient — W3C WebDriver / Appium HTTP adapter.

Implements BaseDriver over ``httpx.AsyncClient``. This is the only place that
knows protocol error codes: every failed call is mapped into a
DriverErrorKind here, so callers never inspect message text.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mobiq.core.exceptions import DriverError, SessionNotActiveError
from mobiq.core.models import (
    DriverConfig,
    DriverErrorKind,
    ElementHandle,
    ElementRect,
    WindowSize,
)
from mobiq.driver.actions import W3C_ELEMENT_KEY
from mobiq.driver.base import BaseDriver

logger = logging.getLogger(__name__)

POINTER_SOURCE_ID = "finger1"
KEY_SOURCE_ID = "keyboard1"

# W3C error codes -> structured kind
_ERROR_CODE_KINDS: dict[str, DriverErrorKind] = {
    "no such element": DriverErrorKind.NO_SUCH_ELEMENT,
    "stale element reference": DriverErrorKind.STALE_ELEMENT,
    "unknown command": DriverErrorKind.UNSUPPORTED,
    "unknown method": DriverErrorKind.UNSUPPORTED,
    "unsupported operation": DriverErrorKind.UNSUPPORTED,
    "invalid argument": DriverErrorKind.INVALID_ARGUMENT,
    "invalid selector": DriverErrorKind.INVALID_ARGUMENT,
    "timeout": DriverErrorKind.TIMEOUT,
    "script timeout": DriverErrorKind.TIMEOUT,
}

_SESSION_ERROR_CODES = frozenset({"invalid session id", "session not created"})

# Legacy servers that only return a message: ordered substring rules
_MESSAGE_RULES: tuple[tuple[str, DriverErrorKind], ...] = (
    ("stale", DriverErrorKind.STALE_ELEMENT),
    ("no such element", DriverErrorKind.NO_SUCH_ELEMENT),
    ("not implemented", DriverErrorKind.UNSUPPORTED),
    ("not supported", DriverErrorKind.UNSUPPORTED),
    ("unknown command", DriverErrorKind.UNSUPPORTED),
)


def classify_error(code: str | None, message: str | None) -> DriverErrorKind:
    """Map a protocol error code (or, failing that, message text) to a kind."""
    if code:
        kind = _ERROR_CODE_KINDS.get(code.strip().lower())
        if kind is not None:
            return kind
    text = (message or "").lower()
    for needle, kind in _MESSAGE_RULES:
        if needle in text:
            return kind
    return DriverErrorKind.UNKNOWN


def _extract_value(payload: dict[str, Any]) -> Any:
    # W3C wraps results in {"value": ...}
    if "value" in payload:
        return payload["value"]
    return payload


def _extract_element_id(element_obj: Any) -> str:
    if isinstance(element_obj, dict):
        for key in (W3C_ELEMENT_KEY, "ELEMENT"):
            if element_obj.get(key):
                return str(element_obj[key])
    msg = f"Could not extract element id from payload: {element_obj!r}"
    raise DriverError(msg, kind=DriverErrorKind.UNKNOWN, command="find_element")


class WebDriverClient(BaseDriver):
    """Async W3C WebDriver client for an Appium-compatible endpoint."""

    def __init__(
        self,
        config: DriverConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or DriverConfig()
        self._server_url = self._config.server_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=self._config.request_timeout_s)
        self._session_id: str | None = self._config.session_id or None
        self._capabilities: dict[str, Any] = dict(self._config.capabilities)

    # -- session --------------------------------------------------------------

    @property
    def has_session(self) -> bool:
        return self._session_id is not None

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def capabilities(self) -> dict[str, Any]:
        return dict(self._capabilities)

    def attach(self, session_id: str) -> None:
        """Attach to a session created elsewhere."""
        if not session_id:
            msg = "session_id is required"
            raise ValueError(msg)
        self._session_id = session_id

    async def create_session(self, capabilities: dict[str, Any] | None = None) -> str:
        """Create a new session; returns its id."""
        caps = capabilities if capabilities is not None else self._capabilities
        payload = {"capabilities": {"alwaysMatch": caps, "firstMatch": [{}]}}
        response = await self._request("POST", "/session", "create_session", json=payload)
        value = _extract_value(response)
        session_id = value.get("sessionId") if isinstance(value, dict) else None
        session_id = session_id or response.get("sessionId")
        if not session_id:
            msg = "Remote end did not return a sessionId"
            raise DriverError(msg, kind=DriverErrorKind.UNKNOWN, command="create_session")
        self._session_id = str(session_id)
        if isinstance(value, dict) and isinstance(value.get("capabilities"), dict):
            self._capabilities = value["capabilities"]
        logger.info("Created session %s", self._session_id)
        return self._session_id

    async def delete_session(self) -> None:
        if self._session_id is None:
            return
        session_id = self._session_id
        try:
            await self._request("DELETE", f"/session/{session_id}", "delete_session")
        finally:
            self._session_id = None

    async def close(self) -> None:
        await self._client.aclose()

    # -- BaseDriver -----------------------------------------------------------

    async def find_element(self, strategy: str, selector: str) -> ElementHandle:
        value = await self._session_call(
            "POST", "/element", "find_element", json={"using": strategy, "value": selector}
        )
        return ElementHandle(element_id=_extract_element_id(value))

    async def is_element_displayed(self, handle: ElementHandle) -> bool:
        value = await self._session_call(
            "GET", f"/element/{handle.element_id}/displayed", "is_element_displayed"
        )
        return value is True

    async def get_element_text(self, handle: ElementHandle) -> str:
        value = await self._session_call(
            "GET", f"/element/{handle.element_id}/text", "get_element_text"
        )
        return "" if value is None else str(value)

    async def get_element_rect(self, handle: ElementHandle) -> ElementRect:
        value = await self._session_call(
            "GET", f"/element/{handle.element_id}/rect", "get_element_rect"
        )
        if not isinstance(value, dict):
            msg = f"Unexpected element rect payload: {value!r}"
            raise DriverError(msg, kind=DriverErrorKind.UNKNOWN, command="get_element_rect")
        return ElementRect.model_validate(value)

    async def click_element(self, handle: ElementHandle) -> None:
        await self._session_call(
            "POST", f"/element/{handle.element_id}/click", "click_element", json={}
        )

    async def clear_element(self, handle: ElementHandle) -> None:
        await self._session_call(
            "POST", f"/element/{handle.element_id}/clear", "clear_element", json={}
        )

    async def send_keys_to_element(self, handle: ElementHandle, text: str) -> None:
        await self._session_call(
            "POST",
            f"/element/{handle.element_id}/value",
            "send_keys_to_element",
            json={"text": text, "value": list(text)},
        )

    async def get_window_size(self) -> WindowSize:
        value = await self._session_call("GET", "/window/rect", "get_window_size")
        if not isinstance(value, dict) or "width" not in value or "height" not in value:
            msg = f"Unexpected window rect payload: {value!r}"
            raise DriverError(msg, kind=DriverErrorKind.UNKNOWN, command="get_window_size")
        return WindowSize(width=int(value["width"]), height=int(value["height"]))

    async def dispatch_pointer_actions(self, actions: list[dict[str, Any]]) -> None:
        source = {
            "type": "pointer",
            "id": POINTER_SOURCE_ID,
            "parameters": {"pointerType": "touch"},
            "actions": actions,
        }
        await self._session_call(
            "POST", "/actions", "dispatch_pointer_actions", json={"actions": [source]}
        )

    async def dispatch_key_actions(self, actions: list[dict[str, Any]]) -> None:
        source = {"type": "key", "id": KEY_SOURCE_ID, "actions": actions}
        await self._session_call(
            "POST", "/actions", "dispatch_key_actions", json={"actions": [source]}
        )

    async def execute_vendor_command(self, name: str, params: dict[str, Any]) -> Any:
        return await self._session_call(
            "POST",
            "/execute/sync",
            f"execute[{name}]",
            json={"script": name, "args": [params]},
        )

    # -- transport ------------------------------------------------------------

    async def _session_call(
        self,
        method: str,
        path: str,
        command: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        if self._session_id is None:
            raise SessionNotActiveError(command)
        response = await self._request(
            method, f"/session/{self._session_id}{path}", command, json=json
        )
        return _extract_value(response)

    async def _request(
        self,
        method: str,
        path: str,
        command: str,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._server_url}{path}"
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.TimeoutException as e:
            msg = f"{command}: request timed out: {e}"
            raise DriverError(msg, kind=DriverErrorKind.TIMEOUT, command=command) from e
        except httpx.HTTPError as e:
            msg = f"{command}: failed to reach {self._server_url}: {e}"
            raise DriverError(msg, kind=DriverErrorKind.TRANSPORT, command=command) from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            self._raise_for_error(command, response.status_code, payload, response.text)

        if not isinstance(payload, dict):
            msg = f"{command}: non-JSON response (HTTP {response.status_code})"
            raise DriverError(
                msg,
                kind=DriverErrorKind.UNKNOWN,
                command=command,
                status_code=response.status_code,
            )
        return payload

    def _raise_for_error(
        self,
        command: str,
        status_code: int,
        payload: Any,
        text: str,
    ) -> None:
        code: str | None = None
        message: str | None = None
        if isinstance(payload, dict):
            value = _extract_value(payload)
            if isinstance(value, dict):
                code = value.get("error")
                message = value.get("message")
        message = message or text or f"HTTP {status_code}"

        if code and code.strip().lower() in _SESSION_ERROR_CODES:
            self._session_id = None
            raise SessionNotActiveError(command)

        kind = classify_error(code, message)
        logger.debug("%s failed: HTTP %s %s (%s)", command, status_code, code, kind)
        detail = f"{code}: {message}" if code else message
        raise DriverError(
            f"{command}: {detail}",
            kind=kind,
            command=command,
            status_code=status_code,
        )
