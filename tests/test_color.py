"""Tests for the RGB/HSV conversion helpers."""

import itertools

import pytest

from custom_components.lightdeck.color import hsv_to_rgb, rgb_to_hsv


class TestRgbToHsv:
    """Tests for rgb_to_hsv function."""

    @pytest.mark.parametrize(
        ("rgb", "expected"),
        [
            ((255, 255, 255), (0, 0, 1000)),
            ((255, 0, 0), (0, 1000, 1000)),
            ((0, 255, 0), (120, 1000, 1000)),
            ((0, 0, 255), (240, 1000, 1000)),
            ((0, 0, 0), (0, 0, 0)),
        ],
    )
    def test_rgb_to_hsv_converts_reference_colors(
        self,
        rgb: tuple[int, int, int],
        expected: tuple[int, int, int],
    ) -> None:
        """Test that rgb_to_hsv converts the reference colors exactly."""
        assert rgb_to_hsv(*rgb) == expected

    def test_rgb_to_hsv_returns_zero_hue_for_greys(self) -> None:
        """Test that achromatic colors have hue 0 and saturation 0."""
        h, s, v = rgb_to_hsv(128, 128, 128)
        assert h == 0
        assert s == 0
        assert v == 502

    def test_rgb_to_hsv_stays_within_ranges(self) -> None:
        """Test that results stay inside Tuya's ranges across the cube."""
        steps = (0, 1, 63, 127, 128, 200, 254, 255)
        for r, g, b in itertools.product(steps, repeat=3):
            h, s, v = rgb_to_hsv(r, g, b)
            assert 0 <= h < 360
            assert 0 <= s <= 1000
            assert 0 <= v <= 1000

    def test_rgb_to_hsv_wraps_hue_near_360(self) -> None:
        """Test that a hue rounding up to 360 wraps to 0."""
        h, _, _ = rgb_to_hsv(255, 0, 1)
        assert h == 0

    def test_rgb_to_hsv_clamps_out_of_range_channels(self) -> None:
        """Test that out of range channels are clamped before conversion."""
        assert rgb_to_hsv(300, -20, 0) == rgb_to_hsv(255, 0, 0)


class TestHsvToRgb:
    """Tests for hsv_to_rgb function."""

    def test_hsv_to_rgb_converts_primary_colors(self) -> None:
        """Test that hsv_to_rgb converts Tuya HSV back to RGB."""
        assert hsv_to_rgb(0, 1000, 1000) == (255, 0, 0)
        assert hsv_to_rgb(120, 1000, 1000) == (0, 255, 0)
        assert hsv_to_rgb(240, 1000, 1000) == (0, 0, 255)

    def test_hsv_to_rgb_returns_black_for_zero_value(self) -> None:
        """Test that value 0 is black regardless of hue."""
        assert hsv_to_rgb(200, 1000, 0) == (0, 0, 0)
