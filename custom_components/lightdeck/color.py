"""RGB to HSV conversion in Tuya's integer ranges."""

from __future__ import annotations

import colorsys

HUE_RANGE = 360
SATURATION_RANGE = 1000
VALUE_RANGE = 1000
CHANNEL_MAX = 255


def _clamp_channel(channel: float) -> float:
    return max(0, min(CHANNEL_MAX, channel))


def rgb_to_hsv(r: float, g: float, b: float) -> tuple[int, int, int]:
    """Convert an RGB triple to Tuya HSV.

    Args:
        r: Red channel, 0-255. Out of range values are clamped.
        g: Green channel, 0-255.
        b: Blue channel, 0-255.

    Returns:
        Tuple of (h, s, v) with h in [0, 360), s and v in [0, 1000].
        Black and greys have hue 0; black has saturation 0.

    """
    red, green, blue = (_clamp_channel(c) / CHANNEL_MAX for c in (r, g, b))
    hue, saturation, value = colorsys.rgb_to_hsv(red, green, blue)

    h = round(hue * HUE_RANGE) % HUE_RANGE
    s = round(saturation * SATURATION_RANGE)
    v = round(value * VALUE_RANGE)
    return h, s, v


def hsv_to_rgb(h: float, s: float, v: float) -> tuple[int, int, int]:
    """Convert Tuya HSV back to an RGB triple with channels in 0-255."""
    red, green, blue = colorsys.hsv_to_rgb(
        (h % HUE_RANGE) / HUE_RANGE,
        max(0, min(SATURATION_RANGE, s)) / SATURATION_RANGE,
        max(0, min(VALUE_RANGE, v)) / VALUE_RANGE,
    )
    return round(red * CHANNEL_MAX), round(green * CHANNEL_MAX), round(blue * CHANNEL_MAX)
