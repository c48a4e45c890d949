"""
Color space conversion utilities.

Pure helpers for moving between RGB, HSL and ``#rrggbb`` hex strings.
"""

import math
import re
from dataclasses import dataclass
from typing import Optional

HEX_PATTERN = re.compile(r"#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})", re.IGNORECASE)


@dataclass(frozen=True)
class RGB:
    """8-bit RGB triple."""
    r: int
    g: int
    b: int

    def __post_init__(self):
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"RGB channel out of range: {channel}")

    def as_tuple(self):
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class HSL:
    """Hue in integer degrees, saturation and lightness in [0, 1]."""
    h: int
    s: float
    l: float


def rgb_to_hex(rgb: RGB) -> str:
    """Convert RGB to a lowercase ``#rrggbb`` string."""
    return f"#{rgb.r:02x}{rgb.g:02x}{rgb.b:02x}"


def hex_to_rgb(hex_color) -> Optional[RGB]:
    """
    Parse a hex color string.

    Accepts an optional leading ``#`` followed by exactly six hex digits in
    either case. Anything else, including non-string input, yields ``None``.
    """
    if not isinstance(hex_color, str):
        return None
    match = HEX_PATTERN.fullmatch(hex_color)
    if match is None:
        return None
    r, g, b = (int(part, 16) for part in match.groups())
    return RGB(r, g, b)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rgb_to_hsl(rgb: RGB) -> HSL:
    """
    Convert RGB to HSL.

    Gray inputs (all channels equal) yield hue 0 and saturation 0. Hue is
    rounded half-up to whole degrees, so reds just below 360 may round to 360.
    """
    r = rgb.r / 255
    g = rgb.g / 255
    b = rgb.b / 255
    c_max = max(r, g, b)
    c_min = min(r, g, b)
    h = 0.0
    s = 0.0
    l = (c_max + c_min) / 2

    if c_max != c_min:
        d = c_max - c_min
        s = d / (2 - c_max - c_min) if l > 0.5 else d / (c_max + c_min)
        if c_max == r:
            h = (g - b) / d + (6 if g < b else 0)
        elif c_max == g:
            h = (b - r) / d + 2
        else:
            h = (r - g) / d + 4
        h /= 6

    return HSL(h=_round_half_up(h * 360), s=s, l=l)


def color_distance_sq(c1: RGB, c2: RGB) -> int:
    """Squared Euclidean distance between two RGB colors."""
    return (c1.r - c2.r) ** 2 + (c1.g - c2.g) ** 2 + (c1.b - c2.b) ** 2
