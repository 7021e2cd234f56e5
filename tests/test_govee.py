"""Tests for the Govee API client."""

import json
from typing import Any
from unittest.mock import Mock

import httpx
import pytest
from pytest_httpx import HTTPXMock

from custom_components.lightdeck import govee
from custom_components.lightdeck.const import (
    GOVEE_CONTROL_URL,
    GOVEE_DEVICES_URL,
    GOVEE_SCENES_URL,
)
from custom_components.lightdeck.govee import GoveeApiClient
from custom_components.lightdeck.models import UnifiedCommand

TEST_API_KEY = "test_govee_key"
TEST_DEVICE = "AA:BB:CC:DD:EE:FF:00:11"
TEST_MODEL = "H6159"


class TestToGoveeCommand:
    """Tests for to_govee_command function."""

    def test_to_govee_command_passes_known_names(self) -> None:
        """Test that shared command names are sent unchanged."""
        command = UnifiedCommand("color", {"r": 1, "g": 2, "b": 3})
        assert govee.to_govee_command(command) == {
            "name": "color",
            "value": {"r": 1, "g": 2, "b": 3},
        }

    def test_to_govee_command_renames_color_temp(self) -> None:
        """Test that colorTemp is sent as Govee's colorTem."""
        command = UnifiedCommand("colorTemp", 4000)
        assert govee.to_govee_command(command) == {"name": "colorTem", "value": 4000}


class TestExtractDynamicScenes:
    """Tests for extract_dynamic_scenes function."""

    def test_extract_dynamic_scenes_finds_scene_capability(self) -> None:
        """Test that scenes come from the capability that carries them."""
        data = {
            "payload": {
                "capabilities": [
                    {"parameters": {"options": []}},
                    {"parameters": {"dynamicScene": [{"name": "Sunrise"}]}},
                ],
            },
        }
        assert govee.extract_dynamic_scenes(data) == [{"name": "Sunrise"}]

    def test_extract_dynamic_scenes_returns_empty_without_payload(self) -> None:
        """Test that a response without capabilities has no scenes."""
        assert govee.extract_dynamic_scenes({}) == []

    def test_extract_dynamic_scenes_ignores_non_object_body(self) -> None:
        """Test that a body that is not an object has no scenes."""
        assert govee.extract_dynamic_scenes([{"name": "Sunrise"}]) == []


class TestGoveeApiClient:
    """Tests for GoveeApiClient."""

    @pytest.mark.asyncio
    async def test_list_devices_returns_devices(
        self,
        httpx_mock: HTTPXMock,
        sample_govee_devices_response: dict[str, Any],
    ) -> None:
        """Test that devices are read from data.devices."""
        httpx_mock.add_response(
            url=GOVEE_DEVICES_URL, method="GET", json=sample_govee_devices_response
        )
        async with httpx.AsyncClient() as session:
            devices = await GoveeApiClient(session, TEST_API_KEY).async_list_devices()

        assert [device["device"] for device in devices] == [TEST_DEVICE]
        request = httpx_mock.get_request(url=GOVEE_DEVICES_URL)
        assert request.headers["Govee-API-Key"] == TEST_API_KEY

    @pytest.mark.asyncio
    async def test_list_devices_returns_empty_on_http_error(
        self,
        httpx_mock: HTTPXMock,
    ) -> None:
        """Test that a failed listing yields no devices."""
        httpx_mock.add_response(url=GOVEE_DEVICES_URL, method="GET", status_code=401)
        async with httpx.AsyncClient() as session:
            devices = await GoveeApiClient(session, TEST_API_KEY).async_list_devices()
        assert devices == []

    @pytest.mark.asyncio
    async def test_list_devices_returns_empty_for_non_object_body(
        self,
        httpx_mock: HTTPXMock,
    ) -> None:
        """Test that a listing body that is not an object yields no devices."""
        httpx_mock.add_response(url=GOVEE_DEVICES_URL, method="GET", json=[])
        async with httpx.AsyncClient() as session:
            devices = await GoveeApiClient(session, TEST_API_KEY).async_list_devices()
        assert devices == []

    @pytest.mark.asyncio
    async def test_control_reports_non_object_body(
        self,
        httpx_mock: HTTPXMock,
    ) -> None:
        """Test that a control body that is not an object is a failed result."""
        httpx_mock.add_response(url=GOVEE_CONTROL_URL, method="PUT", json=["ok"])
        async with httpx.AsyncClient() as session:
            client = GoveeApiClient(session, TEST_API_KEY)
            result = await client.async_control(
                TEST_DEVICE, TEST_MODEL, UnifiedCommand("turn", "on")
            )
        assert result.success is False
        assert result.message == "Response is not a JSON object"

    @pytest.mark.asyncio
    async def test_list_devices_skips_request_without_api_key(self) -> None:
        """Test that no request is made when no API key is configured."""
        session = Mock(spec=httpx.AsyncClient)
        assert await GoveeApiClient(session, None).async_list_devices() == []
        session.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_control_sends_command(
        self,
        httpx_mock: HTTPXMock,
    ) -> None:
        """Test that control PUTs the device, model and command."""
        httpx_mock.add_response(
            url=GOVEE_CONTROL_URL,
            method="PUT",
            json={"code": 200, "message": "Success", "data": {}},
        )
        async with httpx.AsyncClient() as session:
            client = GoveeApiClient(session, TEST_API_KEY)
            result = await client.async_control(
                TEST_DEVICE, TEST_MODEL, UnifiedCommand("turn", "on")
            )

        assert result.success is True
        assert result.message == "Success"
        request = httpx_mock.get_request(url=GOVEE_CONTROL_URL)
        assert json.loads(request.content) == {
            "device": TEST_DEVICE,
            "model": TEST_MODEL,
            "cmd": {"name": "turn", "value": "on"},
        }

    @pytest.mark.asyncio
    async def test_control_reports_http_error(
        self,
        httpx_mock: HTTPXMock,
    ) -> None:
        """Test that HTTP errors become failed results with the status."""
        httpx_mock.add_response(
            url=GOVEE_CONTROL_URL, method="PUT", status_code=429, text="Too many"
        )
        async with httpx.AsyncClient() as session:
            client = GoveeApiClient(session, TEST_API_KEY)
            result = await client.async_control(
                TEST_DEVICE, TEST_MODEL, UnifiedCommand("brightness", 50)
            )

        assert result.success is False
        assert "429" in result.message
        assert "Too many" in result.message

    @pytest.mark.asyncio
    async def test_control_reports_vendor_rejection(
        self,
        httpx_mock: HTTPXMock,
    ) -> None:
        """Test that a non-200 Govee code is a failed result."""
        httpx_mock.add_response(
            url=GOVEE_CONTROL_URL,
            method="PUT",
            json={"code": 400, "message": "Unsupported Cmd"},
        )
        async with httpx.AsyncClient() as session:
            client = GoveeApiClient(session, TEST_API_KEY)
            result = await client.async_control(
                TEST_DEVICE, TEST_MODEL, UnifiedCommand("countdown", 10)
            )

        assert result.success is False
        assert result.message == "Unsupported Cmd"

    @pytest.mark.asyncio
    async def test_control_without_api_key_is_configuration_error(self) -> None:
        """Test that control fails fast without an API key."""
        session = Mock(spec=httpx.AsyncClient)
        result = await GoveeApiClient(session, "").async_control(
            TEST_DEVICE, TEST_MODEL, UnifiedCommand("turn", "on")
        )
        assert result.success is False
        assert "Configuration error" in result.message
        session.put.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_scenes_returns_dynamic_scenes(
        self,
        httpx_mock: HTTPXMock,
    ) -> None:
        """Test that dynamic scenes are queried with a request id."""
        httpx_mock.add_response(
            url=GOVEE_SCENES_URL,
            method="POST",
            json={
                "payload": {
                    "capabilities": [
                        {"parameters": {"dynamicScene": [{"name": "Aurora"}]}},
                    ],
                },
            },
        )
        async with httpx.AsyncClient() as session:
            client = GoveeApiClient(session, TEST_API_KEY)
            scene_list = await client.async_get_scenes(TEST_DEVICE, TEST_MODEL)

        assert scene_list == [{"name": "Aurora"}]
        body = json.loads(httpx_mock.get_request(url=GOVEE_SCENES_URL).content)
        assert body["payload"] == {"sku": TEST_MODEL, "device": TEST_DEVICE}
        assert body["requestId"]

    @pytest.mark.asyncio
    async def test_get_scenes_returns_empty_on_http_error(
        self,
        httpx_mock: HTTPXMock,
    ) -> None:
        """Test that devices without scene support yield no scenes."""
        httpx_mock.add_response(url=GOVEE_SCENES_URL, method="POST", status_code=404)
        async with httpx.AsyncClient() as session:
            client = GoveeApiClient(session, TEST_API_KEY)
            assert await client.async_get_scenes(TEST_DEVICE, TEST_MODEL) == []
