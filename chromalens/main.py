"""
ChromaLens HTTP Service
FastAPI routes for palette extraction, pixel inspection, export and mood analysis.
"""
from typing import Optional

from fastapi import FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from chromalens import __version__
from chromalens.config import config
from chromalens.schemas import (
    ColorEntry, ErrorResponse, ExportRequest, HealthResponse, MoodRequest, MoodResponse,
    PaletteResponse
)
from chromalens.services.colors.conversion import hex_to_rgb
from chromalens.services.colors.extract_api import (
    color_entry, handle_extract, handle_inspect, parse_hex_colors
)
from chromalens.services.colors.extraction import InvalidInput, color_data_from_rgb
from chromalens.services.colors.swatches import render_palette_card
from chromalens.services.export import build_export_document, export_filename
from chromalens.services.mood import analyze_palette_mood
from chromalens.utils.metrics import get_metrics

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid upload or parameters"},
    415: {"model": ErrorResponse, "description": "Unsupported image type"},
}

app = FastAPI(
    title="ChromaLens",
    description="Dominant color palette extraction with warm/cool/neutral/accent grouping",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins(),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"]
)


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    return JSONResponse(status_code=400, content=ErrorResponse(detail=str(exc)).model_dump())


@app.get("/healthz", response_model=HealthResponse)
def health_check():
    """ChromaLens service health check."""
    return HealthResponse(ok=True, version=f"v{__version__}", service="chromalens")


@app.post("/colors/extract", response_model=PaletteResponse, responses=ERROR_RESPONSES)
async def extract_colors(
    file: UploadFile = File(...),
    sample_rate: int = Query(config.DEFAULT_SAMPLE_RATE, ge=1, le=1000, description="Pixel stride between samples"),
    max_colors: int = Query(config.DEFAULT_MAX_COLORS, ge=1, le=32, description="Maximum palette size"),
    max_edge: int = Query(config.PRESCALE_MAX_EDGE, ge=16, le=4096, description="Pre-scale long edge in pixels"),
    include_swatch: bool = Query(False, description="Include a swatch strip PNG in the response")
):
    """
    Extract the dominant, visually distinct colors of an uploaded image.

    - **file**: PNG, JPEG or WEBP image
    - **sample_rate**: Sample every Nth pixel of the pre-scaled image
    - **max_colors**: Upper bound on the palette size
    - **max_edge**: The image is shrunk so its long edge fits before sampling
    - **include_swatch**: Return a base64 PNG strip of the palette

    Returns the palette in dominance order plus warm, cool, neutral and accent views.
    """
    params = {
        "sample_rate": sample_rate,
        "max_colors": max_colors,
        "max_edge": max_edge,
        "include_swatch": include_swatch
    }
    return await handle_extract(file=file, params=params)


@app.post(
    "/colors/inspect",
    response_model=ColorEntry,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse, "description": "Point outside the image"}}
)
async def inspect_color(
    file: UploadFile = File(...),
    x: float = Query(..., description="Pointer x (image pixels, or display pixels with display_width)"),
    y: float = Query(..., description="Pointer y (image pixels, or display pixels with display_height)"),
    display_width: Optional[float] = Query(None, gt=0, description="Rendered image width"),
    display_height: Optional[float] = Query(None, gt=0, description="Rendered image height")
):
    """Read and classify the color under a pointer position."""
    if (display_width is None) != (display_height is None):
        raise HTTPException(status_code=400, detail="display_width and display_height must be given together")
    return await handle_inspect(file, x, y, display_width, display_height)


@app.get("/colors/describe", response_model=ColorEntry, responses={400: ERROR_RESPONSES[400]})
def describe_color(hex_color: str = Query(..., alias="hex", description="Hex color, with or without '#'")):
    """Describe a hand-picked color as a palette entry with population 0."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        raise HTTPException(status_code=400, detail=f"Invalid hex color: {hex_color!r}")
    return color_entry(color_data_from_rgb(rgb))


@app.post("/colors/export/json", responses={400: ERROR_RESPONSES[400]})
def export_json(body: ExportRequest):
    """Download the palette as a JSON document."""
    try:
        dominant = parse_hex_colors(body.dominant)
        custom = parse_hex_colors(body.custom)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return JSONResponse(
        content=build_export_document(dominant, custom),
        headers={"Content-Disposition": f'attachment; filename="{export_filename("json")}"'}
    )


@app.post("/colors/export/png", responses={400: ERROR_RESPONSES[400]})
async def export_png(body: ExportRequest):
    """Download the palette as a PNG card."""
    try:
        dominant = parse_hex_colors(body.dominant)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    png_bytes = await run_in_threadpool(render_palette_card, [c.hex for c in dominant])
    return Response(
        content=png_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{export_filename("png")}"'}
    )


@app.post("/colors/mood", response_model=MoodResponse, responses={400: ERROR_RESPONSES[400]})
async def palette_mood(body: MoodRequest):
    """Name the palette and describe its mood. Analysis is null if unavailable."""
    try:
        colors = parse_hex_colors(body.colors)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    top = [c.hex for c in colors[:config.MOOD_TOP_N]]
    analysis = await run_in_threadpool(analyze_palette_mood, top)
    get_metrics().increment_counter("mood_requests_total")
    return MoodResponse(analysis=analysis.to_dict() if analysis else None)


@app.get("/metrics")
def metrics_summary():
    """Get ChromaLens metrics."""
    return get_metrics().get_summary()
