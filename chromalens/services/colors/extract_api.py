"""
Palette Extraction API Orchestrator

Coordinates an uploaded image through decoding, pre-scaling and palette
extraction, and serves the single-color helpers (pixel inspection and
hand-picked colors). Handles request ids, stage timings, logging and metrics.
"""

import math
import time
from typing import Any, Dict, List, Optional, Sequence

from fastapi import HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from chromalens.config import config
from chromalens.schemas import PaletteResponse
from chromalens.services.colors.conversion import RGB, hex_to_rgb
from chromalens.services.colors.extraction import (
    ColorData, Raster, color_data_from_rgb, extract_palette
)
from chromalens.services.colors.swatches import render_swatch_strip
from chromalens.services.imaging import (
    get_image_dimensions, map_display_to_image, pixel_at, prescale_rgba,
    read_image, validate_file_upload
)
from chromalens.utils.ids import generate_request_id
from chromalens.utils.logging import get_logger
from chromalens.utils.metrics import get_metrics

logger = get_logger()


def color_entry(color: ColorData) -> Dict[str, Any]:
    """Serialize a ColorData for API responses."""
    entry = color.to_dict()
    entry["is_accent"] = color.is_accent
    return entry


def parse_hex_colors(values: Sequence[str]) -> List[ColorData]:
    """
    Turn hex strings into hand-picked ColorData entries (population 0).

    Raises:
        ValueError: On the first malformed hex string
    """
    colors = []
    for value in values:
        rgb = hex_to_rgb(value)
        if rgb is None:
            raise ValueError(f"Invalid hex color: {value!r}")
        colors.append(color_data_from_rgb(rgb))
    return colors


def sampled_pixel_estimate(pixel_count: int, sample_rate: int) -> int:
    """Number of pixels a stride of ``sample_rate`` visits."""
    return math.ceil(pixel_count / sample_rate)


async def handle_extract(file: UploadFile, params: Optional[Dict[str, Any]] = None) -> PaletteResponse:
    """
    Extract a palette from an uploaded image.

    Args:
        file: Uploaded image file
        params: Dictionary of extraction parameters

    Returns:
        PaletteResponse with the five palette views

    Raises:
        HTTPException: For invalid uploads
        InvalidInput: For bad raster geometry or parameters
    """
    params = params or {}
    request_id = generate_request_id("pal")
    start_time = time.time()
    metrics = get_metrics()

    sample_rate = params.get("sample_rate", config.DEFAULT_SAMPLE_RATE)
    max_colors = params.get("max_colors", config.DEFAULT_MAX_COLORS)
    max_edge = params.get("max_edge", config.PRESCALE_MAX_EDGE)
    include_swatch = params.get("include_swatch", False)
    quantize_step = config.QUANTIZE_STEP
    min_distance_sq = config.MIN_DISTANCE_SQ

    logger.info("Starting palette extraction", extra={"request_id": request_id})
    metrics.increment_counter("extract_requests_total")

    try:
        validate_file_upload(file)
        rgba = await read_image(file)
        source_width, source_height = get_image_dimensions(rgba)

        scaled = prescale_rgba(rgba, max_edge)
        width, height = get_image_dimensions(scaled)
        raster = Raster.from_array(scaled)
        decode_time = time.time() - start_time

        logger.info(f"Decoded {source_width}x{source_height} -> {width}x{height}",
                    extra={"request_id": request_id, "ms_decode": decode_time * 1000})

        extract_start = time.time()
        palette = await run_in_threadpool(
            extract_palette, raster, sample_rate, max_colors,
            quantize_step=quantize_step, min_distance_sq=min_distance_sq
        )
        extract_time = time.time() - extract_start

        swatch_b64 = None
        if include_swatch and palette.all:
            try:
                swatch_b64 = render_swatch_strip(palette.top_hexes(len(palette.all)))
            except (ValueError, RuntimeError) as e:
                logger.warning(f"Swatch generation failed: {str(e)}",
                               extra={"request_id": request_id})

        views = {
            view: [color_entry(c) for c in getattr(palette, view)]
            for view in ("all", "warm", "cool", "neutral", "accents")
        }
        response = PaletteResponse(
            request_id=request_id,
            width=width,
            height=height,
            source_width=source_width,
            source_height=source_height,
            sampled_pixels=sampled_pixel_estimate(raster.pixel_count, sample_rate),
            swatch_png_b64=swatch_b64,
            debug={
                "sample_rate": sample_rate,
                "max_colors": max_colors,
                "max_edge": max_edge,
                "quantize_step": quantize_step,
                "min_distance_sq": min_distance_sq,
            },
            **views
        )

        total_time = time.time() - start_time
        logger.info("Palette extraction completed successfully",
                    extra={
                        "request_id": request_id,
                        "dims": f"{width}x{height}",
                        "colors": len(palette.all),
                        "warm": len(palette.warm),
                        "cool": len(palette.cool),
                        "neutral": len(palette.neutral),
                        "accents": len(palette.accents),
                        "ms_extract": extract_time * 1000,
                        "ms_total": total_time * 1000,
                        "result": "ok"
                    })

        metrics.record_timing("extract", extract_time * 1000)
        metrics.record_timing("request", total_time * 1000)
        metrics.record_palette_size(len(palette.all))
        return response

    except Exception as e:
        error_time = time.time() - start_time
        logger.error(f"Palette extraction failed: {str(e)}",
                     extra={
                         "request_id": request_id,
                         "ms_total": error_time * 1000,
                         "result": "error",
                         "error_type": type(e).__name__
                     })
        metrics.increment_failure_count(type(e).__name__)
        raise


async def handle_inspect(file: UploadFile, x: float, y: float,
                         display_width: Optional[float] = None,
                         display_height: Optional[float] = None) -> Dict[str, Any]:
    """
    Read the color under a pointer position.

    Coordinates are natural image pixels unless a display size is given, in
    which case they are mapped from the displayed image first.

    Raises:
        HTTPException: 404 when the point is outside the image
    """
    validate_file_upload(file)
    rgba = await read_image(file)
    width, height = get_image_dimensions(rgba)

    if display_width is not None and display_height is not None:
        point = map_display_to_image(x, y, display_width, display_height, width, height)
    else:
        point = (int(x), int(y)) if x >= 0 and y >= 0 else None

    rgb: Optional[RGB] = pixel_at(rgba, *point) if point is not None else None
    if rgb is None:
        raise HTTPException(status_code=404, detail=f"Point ({x}, {y}) is outside the image")

    get_metrics().increment_counter("inspect_requests_total")
    logger.debug(f"Inspected pixel {point} of {width}x{height}")
    return color_entry(color_data_from_rgb(rgb))
