"""API client for the Tuya cloud.

This module provides the signed Tuya client: access token management,
per-request HMAC signing, command delivery and device discovery. Every
public client operation returns an OperationResult instead of raising for
expected failures.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client

from .const import (
    DEFAULT_BASE_URL,
    HTTP_TIMEOUT,
    SIGN_METHOD,
    TOKEN_REFRESH_MARGIN_MS,
    TUYA_DEVICE_COMMANDS_PATH,
    TUYA_DEVICE_STATUS_PATH,
    TUYA_DEVICES_FALLBACK_PATH,
    TUYA_DEVICES_PATH,
    TUYA_TOKEN_PATH,
)
from .models import (
    AccessToken,
    Credentials,
    DeviceListing,
    OperationResult,
    UnifiedCommand,
    VendorOperation,
)
from .translator import translate

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400

CONFIGURATION_ERROR_MESSAGE = (
    "Configuration error: Tuya client id and client secret are required"
)


class LightdeckApiError(Exception):
    """Base exception for Lightdeck API client errors."""


class LightdeckConfigurationError(LightdeckApiError):
    """Exception raised when vendor credentials are missing."""


class TuyaApiAuthError(LightdeckApiError):
    """Exception raised when Tuya rejects the access token request."""


class LightdeckTransportError(LightdeckApiError):
    """Exception raised for network failures and HTTP error statuses."""


class TuyaVendorRejection(LightdeckApiError):
    """Exception raised when Tuya answers HTTP 200 with success=false.

    Attributes:
        vendor_message: The ``msg`` field exactly as Tuya sent it.
        code: Tuya's numeric error code, if present.

    """

    def __init__(self, vendor_message: str, code: int | None = None) -> None:
        super().__init__(f"Tuya rejected request: {vendor_message} (code {code})")
        self.vendor_message = vendor_message
        self.code = code


class LightdeckMalformedResponse(LightdeckApiError):
    """Exception raised for non-JSON or unexpectedly shaped responses."""


def current_time_ms() -> int:
    """Return the current epoch time in milliseconds."""
    return int(time.time() * 1000)


def encode_body(body: dict[str, Any] | None) -> bytes:
    """Serialize a request body exactly once, compact, for hashing and sending."""
    if body is None:
        return b""
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


def calculate_content_hash(body: bytes) -> str:
    """Return the SHA-256 hex digest of the raw request body."""
    return hashlib.sha256(body).hexdigest()


def build_string_to_sign(method: str, content_hash: str, path: str) -> str:
    """Build Tuya's string-to-sign.

    Args:
        method: HTTP method, upper-case.
        content_hash: SHA-256 hex digest of the body.
        path: Request path including the query string.

    Returns:
        The newline-joined string with an empty signed-headers line.

    """
    return "\n".join([method.upper(), content_hash, "", path])


def calculate_sign(message: str, secret: str) -> str:
    """Return the upper-case hex HMAC-SHA256 of a message."""
    return (
        hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256)
        .hexdigest()
        .upper()
    )


def sign_token_request(
    credentials: Credentials, timestamp: str, string_to_sign: str
) -> str:
    """Sign the access token request (no access token in the message)."""
    message = credentials.client_id + timestamp + string_to_sign
    return calculate_sign(message, credentials.client_secret)


def sign_business_request(
    credentials: Credentials,
    access_token: str,
    timestamp: str,
    string_to_sign: str,
) -> str:
    """Sign an authenticated request."""
    message = credentials.client_id + access_token + timestamp + string_to_sign
    return calculate_sign(message, credentials.client_secret)


def create_token_headers(client_id: str, sign: str, timestamp: str) -> dict[str, str]:
    """Create HTTP headers for the access token request."""
    return {
        "client_id": client_id,
        "sign": sign,
        "t": timestamp,
        "sign_method": SIGN_METHOD,
    }


def create_headers(
    client_id: str, access_token: str, sign: str, timestamp: str
) -> dict[str, str]:
    """Create HTTP headers for authenticated Tuya requests."""
    headers = create_token_headers(client_id, sign, timestamp)
    headers["access_token"] = access_token
    headers["Content-Type"] = "application/json"
    return headers


def is_http_error(status: int) -> bool:
    return status >= HTTP_BAD_REQUEST


def is_api_error(data: dict[str, Any]) -> bool:
    """Check if a Tuya response reports failure."""
    return not data.get("success", False)


def validate_response(response: httpx.Response) -> dict[str, Any]:
    """Validate an HTTP response and return the parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON data from the response.

    Raises:
        LightdeckTransportError: If the HTTP status indicates an error.
        LightdeckMalformedResponse: If the body is not a JSON object.
        TuyaVendorRejection: If Tuya reports success=false.

    """
    if is_http_error(response.status_code):
        error_message = f"Request failed: HTTP {response.status_code}"
        raise LightdeckTransportError(error_message)

    try:
        data = response.json()
    except ValueError as err:
        error_message = f"Response is not valid JSON: {err}"
        raise LightdeckMalformedResponse(error_message) from err

    if not isinstance(data, dict):
        error_message = f"Expected a JSON object, got {type(data).__name__}"
        raise LightdeckMalformedResponse(error_message)

    if is_api_error(data):
        raise TuyaVendorRejection(data.get("msg", "Unknown API error"), data.get("code"))

    return data


def extract_access_token(data: dict[str, Any], now_ms: int) -> AccessToken:
    """Extract the access token and compute its local expiry.

    Args:
        data: Token endpoint response.
        now_ms: Time the request was issued, epoch ms.

    Returns:
        AccessToken expiring one refresh margin before the vendor's expiry.

    Raises:
        LightdeckMalformedResponse: If the token or its lifetime is missing.

    """
    result = data.get("result")
    if not isinstance(result, dict):
        error_message = "Token response has no result object"
        raise LightdeckMalformedResponse(error_message)

    token = result.get("access_token")
    expire_time = result.get("expire_time", result.get("expire_time_seconds"))
    if not token or not isinstance(expire_time, int | float):
        error_message = "Token response is missing access_token or expire_time"
        raise LightdeckMalformedResponse(error_message)

    expire_at_ms = now_ms + int(expire_time * 1000) - TOKEN_REFRESH_MARGIN_MS
    return AccessToken(token=token, expire_at_ms=expire_at_ms)


def parse_device_listing(result: Any) -> DeviceListing:
    """Classify a device listing result into one normalized shape.

    Args:
        result: The ``result`` value of a listing response, either
            ``{"devices": [...]}`` or a bare list.

    Returns:
        DeviceListing tagged with the shape it came from.

    Raises:
        LightdeckMalformedResponse: If the result has neither shape.

    """
    if isinstance(result, list):
        return DeviceListing(kind="array", devices=result)
    if isinstance(result, dict) and isinstance(result.get("devices", []), list):
        return DeviceListing(kind="nested", devices=result.get("devices", []))

    error_message = f"Unexpected device listing shape: {type(result).__name__}"
    raise LightdeckMalformedResponse(error_message)


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create the HTTP client shared by the vendor clients.

    Args:
        hass: Home Assistant instance.

    Returns:
        httpx AsyncClient managed by Home Assistant. No retry transport is
        installed; failures are surfaced once to the caller.

    """
    return create_async_httpx_client(hass, timeout=HTTP_TIMEOUT)


class TuyaApiClient:
    """Signed Tuya cloud client owning a single cached access token."""

    def __init__(
        self,
        session: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        base_url: str = DEFAULT_BASE_URL,
        time_ms: Callable[[], int] = current_time_ms,
    ) -> None:
        """Initialize the client.

        Args:
            session: HTTP client session.
            client_id: Tuya cloud project access id.
            client_secret: Tuya cloud project access secret.
            base_url: Data centre base URL.
            time_ms: Clock returning epoch milliseconds.

        """
        self._session = session
        self._credentials = Credentials(client_id or "", client_secret or "")
        self._base_url = base_url.rstrip("/")
        self._time_ms = time_ms
        self._token: AccessToken | None = None
        self._token_lock = asyncio.Lock()

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def token(self) -> AccessToken | None:
        """Return the cached access token, if any."""
        return self._token

    def _ensure_configured(self) -> None:
        if not self._credentials.is_configured:
            raise LightdeckConfigurationError(CONFIGURATION_ERROR_MESSAGE)

    async def async_ensure_token(self) -> str:
        """Return a valid access token, fetching a new one if needed.

        Concurrent callers share a single in-flight fetch.

        Raises:
            LightdeckConfigurationError: If credentials are missing.
            TuyaApiAuthError: If Tuya rejects the token request.
            LightdeckTransportError: If the token request fails in transit.
            LightdeckMalformedResponse: If the token response is malformed.

        """
        self._ensure_configured()

        if self._token is not None and self._token.is_valid(self._time_ms()):
            return self._token.token

        async with self._token_lock:
            now_ms = self._time_ms()
            if self._token is not None and self._token.is_valid(now_ms):
                return self._token.token

            self._token = None
            self._token = await self._async_fetch_token(now_ms)
            return self._token.token

    async def _async_fetch_token(self, now_ms: int) -> AccessToken:
        timestamp = str(now_ms)
        string_to_sign = build_string_to_sign(
            "GET", calculate_content_hash(b""), TUYA_TOKEN_PATH
        )
        sign = sign_token_request(self._credentials, timestamp, string_to_sign)
        headers = create_token_headers(self._credentials.client_id, sign, timestamp)

        _LOGGER.debug("Requesting Tuya access token")
        try:
            response = await self._session.get(
                f"{self._base_url}{TUYA_TOKEN_PATH}", headers=headers
            )
        except httpx.RequestError as err:
            error_message = f"Token request failed: {err}"
            raise LightdeckTransportError(error_message) from err

        try:
            data = validate_response(response)
        except TuyaVendorRejection as err:
            error_message = f"Tuya authentication failed: {err.vendor_message}"
            raise TuyaApiAuthError(error_message) from err

        token = extract_access_token(data, now_ms)
        _LOGGER.info(
            "Obtained Tuya access token, valid for %d s",
            (token.expire_at_ms - now_ms) // 1000,
        )
        return token

    async def async_request(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Send a signed request and return the validated JSON data.

        Args:
            method: HTTP method.
            path: Request path including query string.
            body: Optional JSON body.

        Returns:
            Parsed vendor response.

        Raises:
            LightdeckApiError: Any subclass, for every expected failure.

        """
        access_token = await self.async_ensure_token()
        method = method.upper()
        content = encode_body(body)
        timestamp = str(self._time_ms())
        string_to_sign = build_string_to_sign(
            method, calculate_content_hash(content), path
        )
        sign = sign_business_request(
            self._credentials, access_token, timestamp, string_to_sign
        )
        headers = create_headers(
            self._credentials.client_id, access_token, sign, timestamp
        )

        _LOGGER.debug("Sending %s %s", method, path)
        try:
            response = await self._session.request(
                method,
                f"{self._base_url}{path}",
                headers=headers,
                content=content or None,
            )
        except httpx.RequestError as err:
            error_message = f"Connection error: {err}"
            raise LightdeckTransportError(error_message) from err

        return validate_response(response)

    async def async_execute(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> OperationResult:
        """Execute a signed request and normalize the outcome.

        Args:
            method: HTTP method.
            path: Request path including query string.
            body: Optional JSON body.

        Returns:
            OperationResult. Failures are reported with success=False and a
            descriptive message; nothing is retried.

        """
        try:
            data = await self.async_request(method, path, body)
        except LightdeckConfigurationError as err:
            _LOGGER.error("Not sending %s %s: %s", method, path, err)
            return OperationResult(success=False, message=str(err))
        except TuyaVendorRejection as err:
            _LOGGER.warning(
                "Tuya rejected %s %s: %s (code %s)",
                method,
                path,
                err.vendor_message,
                err.code,
            )
            return OperationResult(success=False, message=err.vendor_message)
        except TuyaApiAuthError as err:
            _LOGGER.warning("Authentication failed for %s %s: %s", method, path, err)
            return OperationResult(success=False, message=str(err))
        except LightdeckApiError as err:
            _LOGGER.error("Request %s %s failed: %s", method, path, err)
            return OperationResult(success=False, message=str(err))

        return OperationResult(
            success=True, message=str(data.get("msg", "success")), data=data
        )

    async def async_control_device(
        self, device_id: str, operations: Sequence[VendorOperation]
    ) -> OperationResult:
        """Send a list of operations to a device's command endpoint."""
        path = TUYA_DEVICE_COMMANDS_PATH.format(device_id=device_id)
        body = {"commands": [operation.as_dict() for operation in operations]}

        _LOGGER.debug("Sending %d operations to device %s", len(operations), device_id)
        result = await self.async_execute("POST", path, body)
        _LOGGER.debug("Command result for device %s: %s", device_id, result.success)
        return result

    async def async_translate_and_send(
        self, device_id: str, command: UnifiedCommand
    ) -> OperationResult:
        """Translate a unified command and deliver it to a device."""
        try:
            operations = translate(command)
        except (KeyError, TypeError, ValueError) as err:
            _LOGGER.error(
                "Invalid value for %s command to device %s: %r",
                command.name,
                device_id,
                command.value,
            )
            return OperationResult(
                success=False, message=f"Invalid {command.name} value: {err}"
            )
        return await self.async_control_device(device_id, operations)

    async def async_get_device_status(self, device_id: str) -> OperationResult:
        """Fetch the current data point values of a device."""
        path = TUYA_DEVICE_STATUS_PATH.format(device_id=device_id)
        return await self.async_execute("GET", path)

    async def _async_fetch_listing(self, path: str) -> list[dict[str, Any]]:
        result = await self.async_execute("GET", path)
        if not result.success or result.data is None:
            return []

        try:
            listing = parse_device_listing(result.data.get("result"))
        except LightdeckMalformedResponse as err:
            _LOGGER.warning("Ignoring device listing from %s: %s", path, err)
            return []

        _LOGGER.debug(
            "Device listing from %s (%s shape): %d devices",
            path,
            listing.kind,
            len(listing.devices),
        )
        return listing.devices

    async def async_list_devices(self) -> list[dict[str, Any]]:
        """List the raw device records of the Tuya project.

        Tries the primary listing endpoint and falls back to the secondary
        one when the first fails or returns nothing.

        Returns:
            Raw device records, or an empty list if both attempts fail.

        """
        devices = await self._async_fetch_listing(TUYA_DEVICES_PATH)
        if devices:
            return devices

        _LOGGER.debug("Primary device listing empty, trying fallback endpoint")
        devices = await self._async_fetch_listing(TUYA_DEVICES_FALLBACK_PATH)
        _LOGGER.debug("Retrieved %d devices from Tuya", len(devices))
        return devices
