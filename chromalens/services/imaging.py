"""
ChromaLens Imaging Utilities
Handles upload validation, image decoding, pre-scaling and single-pixel reads.
"""
import io
import math
from typing import Optional, Tuple

import cv2
import numpy as np
from fastapi import HTTPException, UploadFile
from PIL import Image

from chromalens.config import config
from chromalens.services.colors.conversion import RGB


def validate_file_upload(file: UploadFile) -> None:
    """
    Validate uploaded file for size and format compliance.

    Args:
        file: FastAPI UploadFile object

    Raises:
        HTTPException: 400 for oversized files, 415 for unsupported formats
    """
    # file.size might be None for some clients
    if getattr(file, "size", None) and file.size > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    if file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )

    if file.filename and "." in file.filename:
        ext = "." + file.filename.lower().rsplit(".", 1)[-1]
        if ext not in config.SUPPORTED_EXTENSIONS:
            raise HTTPException(
                status_code=415,
                detail=f"Unsupported file extension. Supported: {', '.join(sorted(config.SUPPORTED_EXTENSIONS))}"
            )


def validate_magic_bytes(file_bytes: bytes) -> str:
    """
    Validate file magic bytes to ensure it's actually an image.

    Returns:
        Detected MIME type

    Raises:
        HTTPException: 400 for invalid/corrupt files
    """
    if len(file_bytes) < 12:
        raise HTTPException(status_code=400, detail="File too small or corrupt")

    if file_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if file_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if file_bytes[:4] == b"RIFF" and file_bytes[8:12] == b"WEBP":
        return "image/webp"

    raise HTTPException(
        status_code=400,
        detail="Invalid image file. Magic bytes don't match supported formats."
    )


def decode_image_bytes(file_bytes: bytes) -> np.ndarray:
    """
    Decode image bytes into an RGBA array.

    Returns:
        numpy array (H, W, 4) uint8

    Raises:
        HTTPException: 400 for decode errors
    """
    try:
        pil_image = Image.open(io.BytesIO(file_bytes))
        if pil_image.mode != "RGBA":
            pil_image = pil_image.convert("RGBA")
        rgba = np.array(pil_image, dtype=np.uint8)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to decode image: {str(e)}")

    return rgba


async def read_image(file: UploadFile) -> np.ndarray:
    """
    Safely read and decode an uploaded image to an RGBA numpy array.

    Raises:
        HTTPException: 400 for read/decode errors or oversized payloads
    """
    try:
        file_bytes = await file.read()
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {str(e)}")

    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    validate_magic_bytes(file_bytes)
    return decode_image_bytes(file_bytes)


def prescale_rgba(rgba: np.ndarray, max_edge: int = None) -> np.ndarray:
    """
    Shrink an image so its longest edge is at most ``max_edge`` pixels.

    New sizes are floored, with a minimum of one pixel. Images already within
    bounds are returned unchanged.
    """
    if max_edge is None:
        max_edge = config.PRESCALE_MAX_EDGE

    height, width = rgba.shape[:2]
    scale = min(1.0, max_edge / max(width, height))
    if scale >= 1.0:
        return rgba

    new_width = max(1, math.floor(width * scale))
    new_height = max(1, math.floor(height * scale))

    # Average in premultiplied space so transparent pixels add no color
    premultiplied = rgba.astype(np.float32)
    alpha = premultiplied[..., 3:4] / 255.0
    premultiplied[..., :3] *= alpha

    # INTER_AREA for downscaling
    resized = cv2.resize(premultiplied, (new_width, new_height), interpolation=cv2.INTER_AREA)

    alpha = resized[..., 3:4] / 255.0
    rgb = np.divide(resized[..., :3], alpha, out=np.zeros_like(resized[..., :3]), where=alpha > 0)
    resized[..., :3] = rgb
    return np.clip(np.rint(resized), 0, 255).astype(np.uint8)


def pixel_at(rgba: np.ndarray, x: int, y: int) -> Optional[RGB]:
    """Read one pixel's color; None outside the image."""
    height, width = rgba.shape[:2]
    if x < 0 or y < 0 or x >= width or y >= height:
        return None
    r, g, b = (int(channel) for channel in rgba[y, x, :3])
    return RGB(r, g, b)


def map_display_to_image(x: float, y: float,
                         display_width: float, display_height: float,
                         natural_width: int, natural_height: int) -> Optional[Tuple[int, int]]:
    """
    Map a pointer position on a displayed (possibly resized) image to
    natural image coordinates.

    Returns:
        (pixel_x, pixel_y), or None when the point falls outside the image
    """
    if display_width <= 0 or display_height <= 0:
        return None

    pixel_x = math.floor(x * (natural_width / display_width))
    pixel_y = math.floor(y * (natural_height / display_height))

    if pixel_x < 0 or pixel_y < 0 or pixel_x >= natural_width or pixel_y >= natural_height:
        return None
    return pixel_x, pixel_y


def get_image_dimensions(image: np.ndarray) -> Tuple[int, int]:
    """Get image (width, height)."""
    height, width = image.shape[:2]
    return width, height
