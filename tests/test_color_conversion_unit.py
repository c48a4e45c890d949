"""
Unit tests for color space conversion.

Covers hex encoding/decoding, RGB to HSL with its hue sectors and rounding,
and the squared RGB distance used by the distinctness filter.
"""

import pytest

from chromalens.services.colors.conversion import (
    HSL, RGB, color_distance_sq, hex_to_rgb, rgb_to_hex, rgb_to_hsl
)


class TestRgbToHex:
    """Test RGB to hex conversion"""

    def test_basic_colors(self):
        assert rgb_to_hex(RGB(255, 0, 0)) == "#ff0000"
        assert rgb_to_hex(RGB(0, 255, 0)) == "#00ff00"
        assert rgb_to_hex(RGB(0, 0, 255)) == "#0000ff"
        assert rgb_to_hex(RGB(0, 0, 0)) == "#000000"
        assert rgb_to_hex(RGB(255, 255, 255)) == "#ffffff"

    def test_lowercase_and_zero_padded(self):
        assert rgb_to_hex(RGB(31, 78, 121)) == "#1f4e79"
        assert rgb_to_hex(RGB(1, 2, 3)) == "#010203"

    def test_out_of_range_channel_rejected(self):
        with pytest.raises(ValueError):
            RGB(256, 0, 0)
        with pytest.raises(ValueError):
            RGB(0, -1, 0)


class TestHexToRgb:
    """Test hex parsing"""

    def test_with_and_without_hash(self):
        assert hex_to_rgb("#1f4e79") == RGB(31, 78, 121)
        assert hex_to_rgb("1f4e79") == RGB(31, 78, 121)

    def test_case_insensitive(self):
        assert hex_to_rgb("#1F4E79") == RGB(31, 78, 121)
        assert hex_to_rgb("#AbCdEf") == RGB(171, 205, 239)

    @pytest.mark.parametrize("value", [
        "not-a-color",
        "",
        "#fff",
        "#1f4e7",
        "#1f4e79ff",
        "#1f4e7g",
        "##1f4e79",
        "#1f4e79\n",
        " #1f4e79",
    ])
    def test_malformed_returns_none(self, value):
        assert hex_to_rgb(value) is None

    def test_non_string_returns_none(self):
        assert hex_to_rgb(None) is None
        assert hex_to_rgb(0xff0000) is None

    def test_round_trip(self):
        for rgb in [RGB(0, 0, 0), RGB(255, 255, 255), RGB(12, 200, 99), RGB(254, 1, 128)]:
            assert hex_to_rgb(rgb_to_hex(rgb)) == rgb


class TestRgbToHsl:
    """Test RGB to HSL conversion"""

    def test_gray_has_no_hue_or_saturation(self):
        hsl = rgb_to_hsl(RGB(128, 128, 128))
        assert hsl.h == 0
        assert hsl.s == 0
        assert hsl.l == pytest.approx(128 / 255)

    def test_black_and_white(self):
        assert rgb_to_hsl(RGB(0, 0, 0)) == HSL(0, 0.0, 0.0)
        assert rgb_to_hsl(RGB(255, 255, 255)) == HSL(0, 0.0, 1.0)

    def test_primary_hues(self):
        assert rgb_to_hsl(RGB(255, 0, 0)).h == 0
        assert rgb_to_hsl(RGB(0, 255, 0)).h == 120
        assert rgb_to_hsl(RGB(0, 0, 255)).h == 240

    def test_secondary_hues(self):
        # Red wins ties for the dominant channel
        assert rgb_to_hsl(RGB(255, 255, 0)).h == 60
        assert rgb_to_hsl(RGB(0, 255, 255)).h == 180
        assert rgb_to_hsl(RGB(255, 0, 255)).h == 300

    def test_saturation_and_lightness(self):
        hsl = rgb_to_hsl(RGB(255, 0, 0))
        assert hsl.s == pytest.approx(1.0)
        assert hsl.l == pytest.approx(0.5)

        # Light branch: l > 0.5
        light = rgb_to_hsl(RGB(255, 128, 128))
        assert light.l > 0.5
        assert light.s == pytest.approx(1.0)

        # Dark branch
        dark = rgb_to_hsl(RGB(100, 50, 50))
        assert dark.l == pytest.approx(150 / 510)
        assert dark.s == pytest.approx(50 / 150)

    def test_red_wraparound_rounds_up_to_360(self):
        # (g - b) / d + 6 puts this just under 360 degrees
        assert rgb_to_hsl(RGB(255, 0, 1)).h == 360

    def test_hue_is_integer(self):
        hsl = rgb_to_hsl(RGB(255, 136, 0))
        assert isinstance(hsl.h, int)
        assert hsl.h == 32


class TestColorDistance:

    def test_squared_euclidean(self):
        assert color_distance_sq(RGB(0, 0, 0), RGB(3, 4, 0)) == 25
        assert color_distance_sq(RGB(0, 0, 0), RGB(50, 0, 0)) == 2500

    def test_symmetric(self):
        a, b = RGB(10, 20, 30), RGB(200, 100, 0)
        assert color_distance_sq(a, b) == color_distance_sq(b, a)
