"""Pytest configuration and fixtures for Lightdeck tests."""

from typing import Any

import pytest

TEST_CLIENT_ID = "test_client_id"
TEST_CLIENT_SECRET = "test_client_secret"
TEST_BASE_URL = "https://openapi.tuyaus.com"
TEST_NOW_MS = 1_700_000_000_000
TOKEN_LIFETIME_SECONDS = 7200


class FakeClock:
    """Controllable epoch-millisecond clock for token lifecycle tests."""

    def __init__(self, now_ms: int) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


@pytest.fixture
def clock() -> FakeClock:
    """Fixture providing a clock frozen at TEST_NOW_MS."""
    return FakeClock(TEST_NOW_MS)


def create_token_response(
    token: str = "test_access_token",
    expire_time: int = TOKEN_LIFETIME_SECONDS,
) -> dict[str, Any]:
    """Create a Tuya token endpoint response.

    Args:
        token: Access token value.
        expire_time: Token lifetime in seconds.

    Returns:
        A dictionary shaped like the /v1.0/token response.

    """
    return {
        "success": True,
        "t": TEST_NOW_MS,
        "result": {
            "access_token": token,
            "expire_time": expire_time,
            "refresh_token": "test_refresh_token",
            "uid": "test_uid",
        },
    }


@pytest.fixture
def sample_token_response() -> dict[str, Any]:
    """Fixture providing a successful token response."""
    return create_token_response()


@pytest.fixture
def sample_devices_response() -> dict[str, Any]:
    """Fixture providing the nested device listing shape."""
    return {
        "success": True,
        "result": {
            "devices": [
                {"id": "tuya1", "name": "Desk Lamp", "category": "dj"},
                {"id": "tuya2", "name": "Strip", "category": "dd"},
            ],
            "has_more": False,
        },
    }


@pytest.fixture
def sample_fallback_devices_response() -> dict[str, Any]:
    """Fixture providing the array device listing shape."""
    return {
        "success": True,
        "result": [
            {"id": "tuya3", "customName": "Hall Bulb", "category": "dj"},
        ],
    }


@pytest.fixture
def sample_command_response() -> dict[str, Any]:
    """Fixture providing a successful command response."""
    return {"success": True, "result": True, "t": TEST_NOW_MS}


@pytest.fixture
def sample_govee_devices_response() -> dict[str, Any]:
    """Fixture providing a Govee device listing."""
    return {
        "code": 200,
        "message": "Success",
        "data": {
            "devices": [
                {
                    "device": "AA:BB:CC:DD:EE:FF:00:11",
                    "model": "H6159",
                    "deviceName": "Living Room Strip",
                    "controllable": True,
                    "retrievable": True,
                    "supportCmds": ["turn", "brightness", "color", "colorTem"],
                },
            ],
        },
    }
