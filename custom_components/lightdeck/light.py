"""Light entities for Tuya and Govee devices.

Each vendor device is exposed as a Home Assistant light. Service calls are
turned into unified commands and handed to the matching vendor client.
State is optimistic: the vendors are not polled after a command.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import voluptuous as vol
from homeassistant.components.light import (
    ATTR_BRIGHTNESS,
    ATTR_COLOR_TEMP_KELVIN,
    ATTR_EFFECT,
    ATTR_RGB_COLOR,
    ColorMode,
    LightEntity,
    LightEntityFeature,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import entity_platform

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import scenes
from .api import TuyaApiClient
from .color import hsv_to_rgb
from .const import (
    ATTR_SECONDS,
    CMD_BRIGHTNESS,
    CMD_COLOR,
    CMD_COLOR_TEMP,
    CMD_COUNTDOWN,
    CMD_SCENE,
    CMD_TURN,
    CODE_BRIGHTNESS,
    CODE_COLOUR_DATA,
    CODE_SWITCH,
    CODE_TEMPERATURE,
    CODE_WORK_MODE,
    DOMAIN,
    MAX_COLOR_TEMP_KELVIN,
    MIN_COLOR_TEMP_KELVIN,
    SERVICE_SET_COUNTDOWN,
    TUYA_LIGHT_CATEGORIES,
    WORK_MODE_COLOUR,
    WORK_MODE_WHITE,
)
from .govee import GoveeApiClient
from .models import OperationResult, UnifiedCommand

_LOGGER = logging.getLogger(__name__)

HA_BRIGHTNESS_MAX = 255
TUYA_LEVEL_MAX = 1000
MAX_COUNTDOWN_SECONDS = 86400


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up light entities for discovered Tuya and Govee devices."""
    entry_data = hass.data[DOMAIN][entry.entry_id]

    entities: list[LightdeckLight] = [
        TuyaLight(entry_data["tuya"], device)
        for device in entry_data["tuya_devices"]
        if is_tuya_light(device)
    ]
    entities.extend(
        GoveeLight(entry_data["govee"], device)
        for device in entry_data["govee_devices"]
        if device.get("controllable", True)
    )
    async_add_entities(entities)

    platform = entity_platform.async_get_current_platform()
    platform.async_register_entity_service(
        SERVICE_SET_COUNTDOWN,
        {
            vol.Required(ATTR_SECONDS): vol.All(
                vol.Coerce(int), vol.Range(min=0, max=MAX_COUNTDOWN_SECONDS)
            )
        },
        "async_set_countdown",
    )


def is_tuya_light(device: dict[str, Any]) -> bool:
    """Check if a Tuya device record looks like a light.

    Records without a category (some listing endpoints omit it) are kept.
    """
    category = device.get("category")
    return not category or category in TUYA_LIGHT_CATEGORIES


def brightness_to_percent(brightness: int) -> int:
    return round(brightness / HA_BRIGHTNESS_MAX * 100)


def kelvin_to_percent(kelvin: int) -> int:
    """Map a color temperature to 0 (warmest) - 100 (coolest)."""
    span = MAX_COLOR_TEMP_KELVIN - MIN_COLOR_TEMP_KELVIN
    percent = (kelvin - MIN_COLOR_TEMP_KELVIN) / span * 100
    return round(max(0, min(100, percent)))


def percent_to_kelvin(percent: float) -> int:
    span = MAX_COLOR_TEMP_KELVIN - MIN_COLOR_TEMP_KELVIN
    return round(MIN_COLOR_TEMP_KELVIN + span * percent / 100)


def build_turn_on_commands(
    is_on: bool | None, **kwargs: Any
) -> list[UnifiedCommand]:
    """Build the unified commands for a light.turn_on service call.

    Args:
        is_on: Current on/off state of the entity.
        **kwargs: Service call attributes.

    Returns:
        Commands in send order. The power command comes first when the
        light is off or when no other attribute was requested.

    """
    commands = []

    if ATTR_BRIGHTNESS in kwargs:
        commands.append(
            UnifiedCommand(CMD_BRIGHTNESS, brightness_to_percent(kwargs[ATTR_BRIGHTNESS]))
        )
    if ATTR_RGB_COLOR in kwargs:
        r, g, b = kwargs[ATTR_RGB_COLOR]
        commands.append(UnifiedCommand(CMD_COLOR, {"r": r, "g": g, "b": b}))
    if ATTR_COLOR_TEMP_KELVIN in kwargs:
        commands.append(
            UnifiedCommand(CMD_COLOR_TEMP, kelvin_to_percent(kwargs[ATTR_COLOR_TEMP_KELVIN]))
        )
    if ATTR_EFFECT in kwargs:
        slot = effect_to_slot(kwargs[ATTR_EFFECT])
        if slot is not None:
            commands.append(UnifiedCommand(CMD_SCENE, {"id": slot}))

    if not is_on or not commands:
        commands.insert(0, UnifiedCommand(CMD_TURN, "on"))
    return commands


def effect_to_slot(effect: str) -> int | None:
    for slot in scenes.available_slots():
        if scenes.scene_name(slot) == effect:
            return slot
    _LOGGER.warning("Unknown effect %s", effect)
    return None


class LightdeckLight(LightEntity, ABC):
    """Base class for vendor light entities."""

    _attr_has_entity_name = True
    _attr_name = None
    _attr_should_poll = False
    _attr_assumed_state = True

    @abstractmethod
    async def _async_send(self, command: UnifiedCommand) -> OperationResult:
        """Deliver one unified command through the vendor client."""

    async def _async_apply(self, command: UnifiedCommand) -> None:
        """Send one command, raising HomeAssistantError on failure."""
        result = await self._async_send(command)
        if not result.success:
            _LOGGER.error(
                "Command %s failed for %s: %s",
                command.name,
                self.entity_id,
                result.message,
            )
            error_message = f"Failed to send {command.name}: {result.message}"
            raise HomeAssistantError(error_message)

    def _apply_optimistic(self, command: UnifiedCommand) -> None:
        if command.name == CMD_TURN:
            self._attr_is_on = command.value == "on"
        elif command.name == CMD_BRIGHTNESS:
            self._attr_brightness = round(command.value / 100 * HA_BRIGHTNESS_MAX)
        elif command.name == CMD_COLOR:
            value = command.value
            self._attr_rgb_color = (value["r"], value["g"], value["b"])
            self._attr_color_mode = ColorMode.RGB
            self._attr_effect = None
        elif command.name == CMD_COLOR_TEMP:
            self._attr_color_temp_kelvin = percent_to_kelvin(command.value)
            self._attr_color_mode = ColorMode.COLOR_TEMP
            self._attr_effect = None
        elif command.name == CMD_SCENE:
            self._attr_effect = scenes.scene_name(command.value["id"])

    async def async_turn_on(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Turn the light on and apply the requested attributes."""
        for command in build_turn_on_commands(self.is_on, **kwargs):
            await self._async_apply(command)
            self._apply_optimistic(command)
        self.async_write_ha_state()

    async def async_turn_off(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Turn the light off."""
        command = UnifiedCommand(CMD_TURN, "off")
        await self._async_apply(command)
        self._apply_optimistic(command)
        self.async_write_ha_state()

    async def async_set_countdown(self, seconds: int) -> None:
        """Switch the light off after a number of seconds; 0 cancels."""
        error_message = f"{self.entity_id} does not support countdown timers"
        raise HomeAssistantError(error_message)


class TuyaLight(LightdeckLight):
    """Light entity backed by the signed Tuya client."""

    _attr_supported_color_modes = {ColorMode.COLOR_TEMP, ColorMode.RGB}
    _attr_supported_features = LightEntityFeature.EFFECT
    _attr_min_color_temp_kelvin = MIN_COLOR_TEMP_KELVIN
    _attr_max_color_temp_kelvin = MAX_COLOR_TEMP_KELVIN

    def __init__(self, client: TuyaApiClient, device: dict[str, Any]) -> None:
        """Initialize the Tuya light.

        Args:
            client: Shared Tuya client.
            device: Raw device record from the Tuya listing.

        """
        self._client = client
        self._device_id = device["id"]
        self._attr_unique_id = f"tuya_{self._device_id}"
        self._attr_device_info = {
            "identifiers": {(DOMAIN, self._attr_unique_id)},
            "name": device.get("name") or device.get("customName") or self._device_id,
            "manufacturer": "Tuya",
            "model": device.get("product_name") or device.get("category"),
        }
        self._attr_effect_list = [
            scenes.scene_name(slot) for slot in scenes.available_slots()
        ]
        self._attr_color_mode = ColorMode.COLOR_TEMP
        self._attr_is_on = None

    async def _async_send(self, command: UnifiedCommand) -> OperationResult:
        return await self._client.async_translate_and_send(self._device_id, command)

    async def async_set_countdown(self, seconds: int) -> None:
        await self._async_apply(UnifiedCommand(CMD_COUNTDOWN, seconds))

    async def async_added_to_hass(self) -> None:
        """Seed entity state from the device's current data points."""
        await super().async_added_to_hass()

        result = await self._client.async_get_device_status(self._device_id)
        if not result.success or result.data is None:
            _LOGGER.debug(
                "No initial status for %s: %s", self._device_id, result.message
            )
            return

        self.update_from_status(result.data.get("result") or [])

    def update_from_status(self, status: list[dict[str, Any]]) -> None:
        """Apply a Tuya status list (``[{"code": ..., "value": ...}]``)."""
        values = {item.get("code"): item.get("value") for item in status}

        if CODE_SWITCH in values:
            self._attr_is_on = bool(values[CODE_SWITCH])
        if isinstance(values.get(CODE_BRIGHTNESS), int):
            self._attr_brightness = round(
                values[CODE_BRIGHTNESS] / TUYA_LEVEL_MAX * HA_BRIGHTNESS_MAX
            )
        if isinstance(values.get(CODE_TEMPERATURE), int):
            self._attr_color_temp_kelvin = percent_to_kelvin(
                values[CODE_TEMPERATURE] / 10
            )

        colour = values.get(CODE_COLOUR_DATA)
        if isinstance(colour, str):
            try:
                colour = json.loads(colour)
            except ValueError:
                _LOGGER.warning("Unreadable colour data for %s", self._device_id)
                colour = None
        if isinstance(colour, dict):
            self._attr_rgb_color = hsv_to_rgb(
                colour.get("h", 0), colour.get("s", 0), colour.get("v", 0)
            )

        work_mode = values.get(CODE_WORK_MODE)
        if work_mode == WORK_MODE_COLOUR:
            self._attr_color_mode = ColorMode.RGB
        elif work_mode == WORK_MODE_WHITE:
            self._attr_color_mode = ColorMode.COLOR_TEMP


class GoveeLight(LightdeckLight):
    """Light entity backed by the Govee developer API."""

    def __init__(self, client: GoveeApiClient, device: dict[str, Any]) -> None:
        self._client = client
        self._device = device["device"]
        self._model = device["model"]
        self._attr_unique_id = f"govee_{self._device}"
        self._attr_device_info = {
            "identifiers": {(DOMAIN, self._attr_unique_id)},
            "name": device.get("deviceName") or self._device,
            "manufacturer": "Govee",
            "model": self._model,
        }
        self._dynamic_scenes: list[str] = []

        support_cmds = device.get("supportCmds") or []
        color_modes = set()
        if "color" in support_cmds:
            color_modes.add(ColorMode.RGB)
        if "colorTem" in support_cmds:
            color_modes.add(ColorMode.COLOR_TEMP)
        if not color_modes:
            color_modes.add(
                ColorMode.BRIGHTNESS if "brightness" in support_cmds else ColorMode.ONOFF
            )
        self._attr_supported_color_modes = color_modes
        self._attr_color_mode = next(iter(sorted(color_modes)))
        self._attr_is_on = None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        return {"dynamic_scenes": self._dynamic_scenes}

    async def _async_send(self, command: UnifiedCommand) -> OperationResult:
        if command.name == CMD_COLOR_TEMP:
            # Govee takes Kelvin directly
            command = UnifiedCommand(command.name, percent_to_kelvin(command.value))
        return await self._client.async_control(self._device, self._model, command)

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        scene_list = await self._client.async_get_scenes(self._device, self._model)
        self._dynamic_scenes = [scene.get("name", "") for scene in scene_list]
