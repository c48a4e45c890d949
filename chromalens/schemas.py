"""
ChromaLens API Schemas
Pydantic models for palette extraction, inspection, export and mood request/response validation.
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("chromalens", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")


# ============================================================================
# COLOR SCHEMAS
# ============================================================================

class RGBModel(BaseModel):
    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)


class HSLModel(BaseModel):
    h: int = Field(..., ge=0, le=360, description="Hue in whole degrees")
    s: float = Field(..., ge=0.0, le=1.0, description="Saturation")
    l: float = Field(..., ge=0.0, le=1.0, description="Lightness")


class ColorEntry(BaseModel):
    """Single palette color."""
    hex: str = Field(
        ...,
        pattern=r"^#[0-9a-f]{6}$",
        description="Lowercase hex color code in format #rrggbb"
    )
    rgb: RGBModel
    hsl: HSLModel
    category: str = Field(..., pattern="^(Warm|Cool|Neutral)$", description="Temperature category")
    population: int = Field(
        ...,
        ge=0,
        description="Sampled pixels in this color's quantization bucket (0 for hand-picked colors)"
    )
    is_accent: bool = Field(..., description="Saturated, mid-lightness accent color")


class PaletteDebug(BaseModel):
    """Parameters used for the extraction."""
    sample_rate: int
    max_colors: int
    max_edge: int
    quantize_step: int
    min_distance_sq: int


class PaletteResponse(BaseModel):
    """Palette extraction response."""
    request_id: str = Field(..., description="Request ID for tracing")
    width: int = Field(..., description="Width of the sampled (pre-scaled) raster")
    height: int = Field(..., description="Height of the sampled (pre-scaled) raster")
    source_width: int = Field(..., description="Width of the uploaded image")
    source_height: int = Field(..., description="Height of the uploaded image")
    sampled_pixels: int = Field(..., ge=1, description="Pixels visited by the sampling stride, before the alpha filter")
    all: List[ColorEntry] = Field(default_factory=list, description="Distinct colors in dominance order")
    warm: List[ColorEntry] = Field(default_factory=list)
    cool: List[ColorEntry] = Field(default_factory=list)
    neutral: List[ColorEntry] = Field(default_factory=list)
    accents: List[ColorEntry] = Field(default_factory=list)
    swatch_png_b64: Optional[str] = Field(None, description="Base64-encoded PNG swatch strip")
    debug: PaletteDebug


# ============================================================================
# EXPORT / MOOD SCHEMAS
# ============================================================================

class ExportRequest(BaseModel):
    """Colors to export."""
    dominant: List[str] = Field(..., min_length=1, max_length=64, description="Palette hex colors, dominant first")
    custom: List[str] = Field(default_factory=list, max_length=64, description="Hand-picked hex colors")


class MoodRequest(BaseModel):
    """Colors to describe; only the first few are sent for analysis."""
    colors: List[str] = Field(..., min_length=1, max_length=64)


class MoodAnalysisModel(BaseModel):
    palette_name: str
    mood_description: str
    design_tips: List[str]


class MoodResponse(BaseModel):
    """Mood analysis response; analysis is null when the service is unavailable."""
    analysis: Optional[MoodAnalysisModel] = None
