"""
Palette extraction service.

This module implements the core palette pipeline for ChromaLens: strided
pixel sampling, floor-to-bucket quantization, frequency counting, dominance
ranking, greedy distinctness filtering and categorization.

Everything here is synchronous and keeps no state between calls; bucket
counts live only for the duration of one ``extract_palette`` call.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
from loguru import logger

from .classification import Category, categorize_color, is_accent_color
from .conversion import HSL, RGB, color_distance_sq, rgb_to_hex, rgb_to_hsl

ALPHA_THRESHOLD = 200
DEFAULT_QUANTIZE_STEP = 12
DEFAULT_MIN_DISTANCE_SQ = 50 * 50
DEFAULT_SAMPLE_RATE = 10
DEFAULT_MAX_COLORS = 8


class InvalidInput(ValueError):
    """Raised for malformed rasters or extraction parameters."""
    pass


@dataclass(frozen=True)
class Raster:
    """Decoded image: ``width * height`` pixels of row-major RGBA bytes."""
    width: int
    height: int
    data: Any = field(repr=False)

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> "Raster":
        """Build a raster from an ``(H, W, 4)`` uint8 array."""
        array = np.asarray(rgba)
        if array.ndim != 3 or array.shape[2] != 4:
            raise InvalidInput(f"Expected an (H, W, 4) RGBA array, got shape {array.shape}")
        height, width = array.shape[:2]
        return cls(width=width, height=height,
                   data=np.ascontiguousarray(array, dtype=np.uint8).tobytes())

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class ColorData:
    """A finished palette entry."""
    hex: str
    rgb: RGB
    hsl: HSL
    category: Category
    population: int = 0

    @property
    def is_accent(self) -> bool:
        return is_accent_color(self.hsl)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hex": self.hex,
            "rgb": {"r": self.rgb.r, "g": self.rgb.g, "b": self.rgb.b},
            "hsl": {"h": self.hsl.h, "s": self.hsl.s, "l": self.hsl.l},
            "category": self.category.value,
            "population": self.population,
        }


@dataclass(frozen=True)
class PaletteResult:
    """Dominance-ordered palette plus its category and accent views."""
    all: Tuple[ColorData, ...] = ()
    warm: Tuple[ColorData, ...] = ()
    cool: Tuple[ColorData, ...] = ()
    neutral: Tuple[ColorData, ...] = ()
    accents: Tuple[ColorData, ...] = ()

    @classmethod
    def from_colors(cls, colors: Sequence[ColorData]) -> "PaletteResult":
        """Partition an ordered color list into the result views."""
        colors = tuple(colors)
        return cls(
            all=colors,
            warm=tuple(c for c in colors if c.category is Category.WARM),
            cool=tuple(c for c in colors if c.category is Category.COOL),
            neutral=tuple(c for c in colors if c.category is Category.NEUTRAL),
            accents=tuple(c for c in colors if c.is_accent),
        )

    def top_hexes(self, n: int) -> List[str]:
        return [c.hex for c in self.all[:n]]

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            view: [c.to_dict() for c in getattr(self, view)]
            for view in ("all", "warm", "cool", "neutral", "accents")
        }


@dataclass
class QuantizedBucket:
    """Running count for one quantized color during a single extraction."""
    key: int
    rgb: RGB
    count: int
    first_seen: int


def _raster_buffer(raster: Raster) -> np.ndarray:
    data = raster.data
    if isinstance(data, np.ndarray):
        if data.dtype == np.uint8:
            return data.reshape(-1)
        if not np.issubdtype(data.dtype, np.integer):
            raise InvalidInput(f"Raster buffer must hold integers, got dtype {data.dtype}")
        if data.size and (data.min() < 0 or data.max() > 255):
            raise InvalidInput("Raster buffer values must be in range 0-255")
        return data.astype(np.uint8).reshape(-1)

    try:
        return np.frombuffer(bytes(data), dtype=np.uint8)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Raster buffer is not a byte sequence: {e}") from e


def validate_raster(raster: Raster) -> np.ndarray:
    """
    Check raster geometry and return its pixels as an ``(N, 4)`` array.

    Raises:
        InvalidInput: For non-positive dimensions or a buffer whose length
            does not match ``width * height * 4``.
    """
    if raster.width <= 0 or raster.height <= 0:
        raise InvalidInput(f"Raster dimensions must be positive: {raster.width}x{raster.height}")

    buffer = _raster_buffer(raster)
    expected = raster.width * raster.height * 4
    if buffer.size != expected:
        raise InvalidInput(
            f"Raster buffer length mismatch: expected {expected} bytes "
            f"for {raster.width}x{raster.height}, got {buffer.size}"
        )
    return buffer.reshape(-1, 4)


def sample_pixels(pixels_rgba: np.ndarray, sample_rate: int,
                  alpha_threshold: int = ALPHA_THRESHOLD) -> np.ndarray:
    """
    Take every ``sample_rate``-th pixel and drop the near-transparent ones.

    Returns:
        RGB samples (N, 3) uint8, in sampling order
    """
    sampled = pixels_rgba[::sample_rate]
    opaque = sampled[sampled[:, 3] >= alpha_threshold]
    logger.debug(f"Sampled {len(sampled)} pixels, {len(opaque)} opaque enough")
    return opaque[:, :3]


def quantize_pixels(pixels_rgb: np.ndarray, step: int = DEFAULT_QUANTIZE_STEP) -> np.ndarray:
    """Floor each channel to a multiple of ``step`` (e.g. 37 -> 36 for step 12)."""
    return (pixels_rgb.astype(np.int64) // step) * step


def count_buckets(quantized_rgb: np.ndarray) -> List[QuantizedBucket]:
    """
    Count samples per quantized color.

    Returns:
        Buckets in the order their key was first sampled
    """
    if len(quantized_rgb) == 0:
        return []

    channels = np.asarray(quantized_rgb, dtype=np.int64)
    keys = (channels[:, 0] << 16) | (channels[:, 1] << 8) | channels[:, 2]
    unique_keys, first_index, counts = np.unique(keys, return_index=True, return_counts=True)

    buckets = []
    for i in np.argsort(first_index, kind="stable"):
        key = int(unique_keys[i])
        buckets.append(QuantizedBucket(
            key=key,
            rgb=RGB((key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF),
            count=int(counts[i]),
            first_seen=int(first_index[i]),
        ))
    return buckets


def rank_buckets(buckets: Sequence[QuantizedBucket]) -> List[QuantizedBucket]:
    """Sort by descending count; ties keep first-seen order."""
    return sorted(buckets, key=lambda bucket: (-bucket.count, bucket.first_seen))


def select_distinct(ranked: Sequence[QuantizedBucket], max_colors: int,
                    min_distance_sq: int = DEFAULT_MIN_DISTANCE_SQ) -> List[QuantizedBucket]:
    """
    Greedy single pass over the ranked buckets.

    A bucket is accepted only if it is farther than ``min_distance_sq`` from
    every bucket accepted so far. Rejected buckets are never revisited.
    """
    accepted: List[QuantizedBucket] = []
    for bucket in ranked:
        if len(accepted) >= max_colors:
            break
        if all(color_distance_sq(kept.rgb, bucket.rgb) > min_distance_sq for kept in accepted):
            accepted.append(bucket)
    return accepted


def color_data_from_rgb(rgb: RGB, population: int = 0) -> ColorData:
    """Classify a single color. Hand-picked colors keep population 0."""
    if population < 0:
        raise InvalidInput(f"Population must be non-negative: {population}")
    hsl = rgb_to_hsl(rgb)
    return ColorData(
        hex=rgb_to_hex(rgb),
        rgb=rgb,
        hsl=hsl,
        category=categorize_color(hsl),
        population=population,
    )


def extract_palette(raster: Raster,
                    sample_rate: int = DEFAULT_SAMPLE_RATE,
                    max_colors: int = DEFAULT_MAX_COLORS,
                    *,
                    quantize_step: int = DEFAULT_QUANTIZE_STEP,
                    min_distance_sq: int = DEFAULT_MIN_DISTANCE_SQ) -> PaletteResult:
    """
    Extract a dominance-ordered, visually distinct palette from a raster.

    Args:
        raster: Decoded RGBA raster (any pre-scaling is the caller's job)
        sample_rate: Pixel index stride between samples (>= 1)
        max_colors: Maximum palette size (>= 1)
        quantize_step: Channel bucket width
        min_distance_sq: Squared RGB distance two palette colors must exceed

    Returns:
        PaletteResult; empty when every sampled pixel is near-transparent

    Raises:
        InvalidInput: For bad raster geometry or parameters
    """
    if sample_rate < 1:
        raise InvalidInput(f"sample_rate must be >= 1, got {sample_rate}")
    if max_colors < 1:
        raise InvalidInput(f"max_colors must be >= 1, got {max_colors}")
    if quantize_step < 1:
        raise InvalidInput(f"quantize_step must be >= 1, got {quantize_step}")

    pixels = validate_raster(raster)

    samples = sample_pixels(pixels, sample_rate)
    buckets = count_buckets(quantize_pixels(samples, quantize_step))
    ranked = rank_buckets(buckets)
    distinct = select_distinct(ranked, max_colors, min_distance_sq)

    logger.debug(f"Extraction: {len(samples)} samples -> {len(buckets)} buckets "
                 f"-> {len(distinct)} distinct colors")

    return PaletteResult.from_colors(
        color_data_from_rgb(bucket.rgb, population=bucket.count) for bucket in distinct
    )
