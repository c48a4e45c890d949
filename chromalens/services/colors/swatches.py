"""
Swatch Rendering Module

Provides utilities for creating visual color palette representations:
a compact swatch strip for API previews and the exportable palette card.
"""

import base64
from datetime import date as date_cls
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np
from loguru import logger

from .conversion import hex_to_rgb

CARD_WIDTH = 800
CARD_HEIGHT = 450
CARD_PADDING = 50
CARD_HEADER_HEIGHT = 100
CARD_GAP = 20
CARD_SWATCH_HEIGHT = 180
CARD_MAX_COLORS = 8

# BGR
CARD_BACKGROUND = (255, 255, 255)
CARD_TITLE_COLOR = (59, 41, 30)      # slate-800
CARD_SUBTITLE_COLOR = (184, 163, 148)  # slate-400
CARD_LABEL_COLOR = (85, 65, 51)      # slate-700


def hex_to_bgr(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to BGR tuple for OpenCV."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    return (rgb.b, rgb.g, rgb.r)


def _encode_png(img: np.ndarray) -> bytes:
    success, buffer = cv2.imencode(".png", img)
    if not success:
        raise RuntimeError("Failed to encode image as PNG")
    return buffer.tobytes()


def render_swatch_strip(hex_colors: List[str], chip_size: int = 40) -> str:
    """
    Render a horizontal strip of color swatches.

    Args:
        hex_colors: List of hex color strings
        chip_size: Size of each color chip in pixels

    Returns:
        Base64-encoded PNG image string
    """
    if not hex_colors:
        raise ValueError("Empty hex_colors list provided")

    k = len(hex_colors)
    logger.debug(f"Rendering swatch strip with {k} colors, chip_size={chip_size}")

    img = np.zeros((chip_size, chip_size * k, 3), dtype=np.uint8)
    for i, hex_color in enumerate(hex_colors):
        img[:, i * chip_size:(i + 1) * chip_size, :] = hex_to_bgr(hex_color)

    b64_string = base64.b64encode(_encode_png(img)).decode("ascii")
    logger.debug(f"Encoded swatch strip: {chip_size * k}x{chip_size} -> {len(b64_string)} chars")
    return b64_string


def _put_centered_text(img: np.ndarray, text: str, center_x: int, baseline_y: int,
                       font, scale: float, color, thickness: int):
    (text_width, _), _ = cv2.getTextSize(text, font, scale, thickness)
    origin = (int(center_x - text_width / 2), baseline_y)
    cv2.putText(img, text, origin, font, scale, color, thickness, cv2.LINE_AA)


def render_palette_card(hex_colors: Sequence[str],
                        title: str = "ChromaLens Palette",
                        date: Optional[date_cls] = None) -> bytes:
    """
    Render the downloadable palette card: a title and date header above up to
    eight equal-width swatches, each labelled with its hex code.

    Returns:
        PNG bytes
    """
    colors = list(hex_colors)[:CARD_MAX_COLORS]
    if not colors:
        raise ValueError("Cannot render a palette card without colors")
    if date is None:
        date = date_cls.today()

    img = np.full((CARD_HEIGHT, CARD_WIDTH, 3), CARD_BACKGROUND, dtype=np.uint8)

    cv2.putText(img, title, (CARD_PADDING, 60), cv2.FONT_HERSHEY_DUPLEX,
                1.1, CARD_TITLE_COLOR, 2, cv2.LINE_AA)
    cv2.putText(img, date.isoformat(), (CARD_PADDING, 85), cv2.FONT_HERSHEY_SIMPLEX,
                0.5, CARD_SUBTITLE_COLOR, 1, cv2.LINE_AA)

    available_width = CARD_WIDTH - CARD_PADDING * 2
    swatch_width = (available_width - CARD_GAP * (len(colors) - 1)) / len(colors)
    start_y = CARD_HEADER_HEIGHT + 20

    for i, hex_color in enumerate(colors):
        x = CARD_PADDING + i * (swatch_width + CARD_GAP)
        cv2.rectangle(
            img,
            (int(round(x)), start_y),
            (int(round(x + swatch_width)) - 1, start_y + CARD_SWATCH_HEIGHT - 1),
            hex_to_bgr(hex_color),
            thickness=-1,
        )
        _put_centered_text(img, hex_color, int(x + swatch_width / 2),
                           start_y + CARD_SWATCH_HEIGHT + 30,
                           cv2.FONT_HERSHEY_PLAIN, 1.1, CARD_LABEL_COLOR, 1)

    logger.debug(f"Rendered palette card with {len(colors)} swatches")
    return _encode_png(img)
