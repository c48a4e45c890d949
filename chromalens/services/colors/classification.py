"""
Rule-based color classification.

Buckets an HSL color into warm, cool or neutral and flags accent colors.
"""

from enum import Enum

from .conversion import HSL

NEUTRAL_MAX_SATURATION = 0.18
NEUTRAL_MAX_LIGHTNESS_DARK = 0.12
NEUTRAL_MIN_LIGHTNESS_LIGHT = 0.95

WARM_HUE_END = 90
WARM_HUE_WRAP_START = 315

ACCENT_MIN_SATURATION = 0.45
ACCENT_MIN_LIGHTNESS = 0.2
ACCENT_MAX_LIGHTNESS = 0.85


class Category(str, Enum):
    WARM = "Warm"
    COOL = "Cool"
    NEUTRAL = "Neutral"


def categorize_color(hsl: HSL) -> Category:
    """
    Classify a color. The first matching rule wins:

    1. Neutral: low saturation, very dark, or very light.
    2. Warm: reds, oranges, yellows and pinks (hue in [0, 90) or [315, 360]).
    3. Cool: everything else (greens, cyans, blues, purples).
    """
    if (hsl.s <= NEUTRAL_MAX_SATURATION
            or hsl.l <= NEUTRAL_MAX_LIGHTNESS_DARK
            or hsl.l >= NEUTRAL_MIN_LIGHTNESS_LIGHT):
        return Category.NEUTRAL

    if 0 <= hsl.h < WARM_HUE_END or WARM_HUE_WRAP_START <= hsl.h <= 360:
        return Category.WARM

    return Category.COOL


def is_accent_color(hsl: HSL) -> bool:
    """True for saturated mid-lightness colors, whatever their category."""
    return (hsl.s >= ACCENT_MIN_SATURATION
            and ACCENT_MIN_LIGHTNESS <= hsl.l <= ACCENT_MAX_LIGHTNESS)
