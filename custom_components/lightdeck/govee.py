"""API client for the Govee developer cloud.

Govee takes the unified command vocabulary almost as-is, authenticated by
a single API key header, so there is no signing or token handling here.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

import httpx

from .const import (
    GOVEE_API_KEY_HEADER,
    GOVEE_COMMAND_NAME_MAP,
    GOVEE_CONTROL_URL,
    GOVEE_DEVICES_URL,
    GOVEE_SCENES_URL,
)
from .models import OperationResult, UnifiedCommand

_LOGGER = logging.getLogger(__name__)

GOVEE_OK = 200
HTTP_BAD_REQUEST = 400


def create_headers(api_key: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        GOVEE_API_KEY_HEADER: api_key,
    }


def to_govee_command(command: UnifiedCommand) -> dict[str, Any]:
    """Convert a unified command to Govee's ``cmd`` object."""
    name = GOVEE_COMMAND_NAME_MAP.get(command.name, command.name)
    return {"name": name, "value": command.value}


def extract_dynamic_scenes(data: Any) -> list[dict[str, Any]]:
    """Extract the dynamic scene list from a queryDynamicScene response.

    The scenes live under the first capability whose parameters carry a
    ``dynamicScene`` entry.
    """
    if not isinstance(data, dict):
        return []
    capabilities = (data.get("payload") or {}).get("capabilities") or []
    for capability in capabilities:
        if not isinstance(capability, dict):
            continue
        parameters = capability.get("parameters") or {}
        if parameters.get("dynamicScene"):
            return parameters["dynamicScene"]
    return []


class GoveeApiClient:
    """Minimal Govee cloud client."""

    def __init__(self, session: httpx.AsyncClient, api_key: str | None) -> None:
        self._session = session
        self._api_key = api_key or ""

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def async_list_devices(self) -> list[dict[str, Any]]:
        """Fetch the account's devices, or an empty list on any failure."""
        if not self.is_configured:
            _LOGGER.debug("Govee API key not configured, skipping discovery")
            return []

        try:
            response = await self._session.get(
                GOVEE_DEVICES_URL, headers=create_headers(self._api_key)
            )
        except httpx.RequestError as err:
            _LOGGER.error("Connection error while fetching Govee devices: %s", err)
            return []

        if response.status_code >= HTTP_BAD_REQUEST:
            _LOGGER.error("Govee device fetch failed: HTTP %d", response.status_code)
            return []

        try:
            data = response.json()
        except ValueError:
            _LOGGER.exception("Govee device list is not valid JSON")
            return []

        if not isinstance(data, dict):
            _LOGGER.error("Govee device list is not an object: %r", data)
            return []

        devices = (data.get("data") or {}).get("devices") or []
        _LOGGER.debug("Retrieved %d devices from Govee", len(devices))
        return devices

    async def async_control(
        self, device: str, model: str, command: UnifiedCommand
    ) -> OperationResult:
        """Send a unified command to a Govee device.

        Args:
            device: Govee device address.
            model: Govee SKU.
            command: Command to send.

        Returns:
            OperationResult with Govee's message.

        """
        if not self.is_configured:
            return OperationResult(
                success=False, message="Configuration error: Govee API key is required"
            )

        payload = {"device": device, "model": model, "cmd": to_govee_command(command)}
        _LOGGER.debug("Sending %s to Govee device %s", payload["cmd"], device)
        try:
            response = await self._session.put(
                GOVEE_CONTROL_URL, headers=create_headers(self._api_key), json=payload
            )
        except httpx.RequestError as err:
            _LOGGER.error("Connection error while controlling %s: %s", device, err)
            return OperationResult(success=False, message=f"Connection error: {err}")

        if response.status_code >= HTTP_BAD_REQUEST:
            message = f"Govee API error: HTTP {response.status_code} - {response.text}"
            _LOGGER.error("PUT %s failed: %s", GOVEE_CONTROL_URL, message)
            return OperationResult(success=False, message=message)

        try:
            data = response.json()
        except ValueError as err:
            _LOGGER.error("Govee control response is not valid JSON: %s", err)
            return OperationResult(
                success=False, message=f"Response is not valid JSON: {err}"
            )

        if not isinstance(data, dict):
            _LOGGER.error("Govee control response is not an object: %r", data)
            return OperationResult(
                success=False, message="Response is not a JSON object"
            )

        success = data.get("code", GOVEE_OK) == GOVEE_OK
        message = str(data.get("message", ""))
        if not success:
            _LOGGER.warning("Govee rejected command for %s: %s", device, message)
        return OperationResult(success=success, message=message, data=data)

    async def async_get_scenes(self, device: str, model: str) -> list[dict[str, Any]]:
        """Query the dynamic scenes a device supports.

        Returns an empty list when the device has none or the query fails.
        """
        if not self.is_configured:
            return []

        payload = {
            "requestId": str(uuid.uuid4()),
            "payload": {"sku": model, "device": device},
        }
        try:
            response = await self._session.post(
                GOVEE_SCENES_URL, headers=create_headers(self._api_key), json=payload
            )
        except httpx.RequestError as err:
            _LOGGER.error("Connection error while fetching scenes for %s: %s", device, err)
            return []

        if response.status_code >= HTTP_BAD_REQUEST:
            # Devices without dynamic scene support answer 4xx here
            _LOGGER.debug(
                "No dynamic scenes for %s: HTTP %d", device, response.status_code
            )
            return []

        try:
            return extract_dynamic_scenes(response.json())
        except ValueError:
            _LOGGER.exception("Scene response for %s is not valid JSON", device)
            return []
