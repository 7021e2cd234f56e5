"""Translate unified light commands into Tuya data point operations."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from . import scenes
from .color import rgb_to_hsv
from .const import (
    BRIGHTNESS_MAX,
    BRIGHTNESS_MIN,
    CMD_BRIGHTNESS,
    CMD_COLOR,
    CMD_COLOR_TEMP,
    CMD_COUNTDOWN,
    CMD_SCENE,
    CMD_TURN,
    CODE_BRIGHTNESS,
    CODE_COLOUR_DATA,
    CODE_COUNTDOWN,
    CODE_SCENE_DATA,
    CODE_SWITCH,
    CODE_TEMPERATURE,
    CODE_WORK_MODE,
    TEMPERATURE_MAX,
    TEMPERATURE_MIN,
    WORK_MODE_COLOUR,
    WORK_MODE_WHITE,
)
from .models import UnifiedCommand, VendorOperation

_LOGGER = logging.getLogger(__name__)


def _scale_percent(value: Any, minimum: int, maximum: int) -> int:
    """Scale a 0-100 percentage to Tuya's 0-1000 range and clamp it."""
    return max(minimum, min(maximum, round(float(value) * 10)))


def _translate_turn(value: Any) -> list[VendorOperation]:
    return [VendorOperation(CODE_SWITCH, value == "on")]


def _translate_brightness(value: Any) -> list[VendorOperation]:
    # Tuya rejects 0, so the floor is the dimmest accepted level
    return [
        VendorOperation(
            CODE_BRIGHTNESS, _scale_percent(value, BRIGHTNESS_MIN, BRIGHTNESS_MAX)
        )
    ]


def _translate_color(value: Any) -> list[VendorOperation]:
    h, s, v = rgb_to_hsv(value["r"], value["g"], value["b"])
    return [
        VendorOperation(CODE_WORK_MODE, WORK_MODE_COLOUR),
        VendorOperation(CODE_COLOUR_DATA, {"h": h, "s": s, "v": v}),
    ]


def _translate_color_temp(value: Any) -> list[VendorOperation]:
    return [
        VendorOperation(CODE_WORK_MODE, WORK_MODE_WHITE),
        VendorOperation(
            CODE_TEMPERATURE, _scale_percent(value, TEMPERATURE_MIN, TEMPERATURE_MAX)
        ),
    ]


def _translate_scene(value: Any) -> list[VendorOperation]:
    descriptor = scenes.lookup(int(value["id"]))
    return [VendorOperation(CODE_SCENE_DATA, descriptor.as_dict())]


def _translate_countdown(value: Any) -> list[VendorOperation]:
    return [VendorOperation(CODE_COUNTDOWN, int(value))]


TRANSLATORS: dict[str, Callable[[Any], list[VendorOperation]]] = {
    CMD_TURN: _translate_turn,
    CMD_BRIGHTNESS: _translate_brightness,
    CMD_COLOR: _translate_color,
    CMD_COLOR_TEMP: _translate_color_temp,
    CMD_SCENE: _translate_scene,
    CMD_COUNTDOWN: _translate_countdown,
}


def translate(command: UnifiedCommand) -> list[VendorOperation]:
    """Map a unified command to an ordered list of Tuya operations.

    Args:
        command: The unified command to translate.

    Returns:
        Zero, one or two VendorOperation objects. Unknown command names
        produce an empty list; the caller still sends the (empty) request.

    """
    translator = TRANSLATORS.get(command.name)
    if translator is None:
        _LOGGER.warning("Unsupported command %s, sending no operations", command.name)
        return []

    operations = translator(command.value)
    _LOGGER.debug("Translated %s=%s into %s", command.name, command.value, operations)
    return operations
