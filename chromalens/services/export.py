"""
Palette export documents.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from chromalens.services.colors.extraction import ColorData

APP_NAME = "ChromaLens"
EXPORT_KINDS = ("json", "png")


def _entries(colors: Iterable[ColorData], dedupe: bool = False) -> List[Dict[str, str]]:
    seen = set()
    entries = []
    for color in colors:
        if dedupe:
            if color.hex in seen:
                continue
            seen.add(color.hex)
        entries.append({"hex": color.hex, "category": color.category.value})
    return entries


def build_export_document(dominant: Iterable[ColorData],
                          custom: Iterable[ColorData] = (),
                          app_name: str = APP_NAME,
                          now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Build the JSON export for a palette.

    Custom colors are de-duplicated by hex, keeping the first occurrence.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return {
        "appName": app_name,
        "date": now.isoformat(),
        "dominantColors": _entries(dominant),
        "customColors": _entries(custom, dedupe=True),
    }


def export_filename(kind: str, now: Optional[datetime] = None) -> str:
    """Download filename, e.g. ``chromalens-palette-1700000000000.json``."""
    if kind not in EXPORT_KINDS:
        raise ValueError(f"Unsupported export kind: {kind}")
    if now is None:
        now = datetime.now(timezone.utc)
    return f"chromalens-palette-{int(now.timestamp() * 1000)}.{kind}"
