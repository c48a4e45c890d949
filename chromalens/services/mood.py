"""
Palette mood analysis via the Gemini API.

Sends the top palette colors to Gemini and asks for a short palette name,
a one-sentence mood description and a few design tips. This is best effort:
any failure is logged and reported as ``None`` so the palette itself is
never affected.
"""
import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import requests
from loguru import logger

from chromalens.config import config

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "paletteName": {"type": "STRING"},
        "moodDescription": {"type": "STRING"},
        "designTips": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
}


@dataclass(frozen=True)
class MoodAnalysis:
    palette_name: str
    mood_description: str
    design_tips: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["MoodAnalysis"]:
        """Build from the model's JSON object; None if it isn't one."""
        if not isinstance(payload, dict):
            return None
        tips = payload.get("designTips") or []
        if not isinstance(tips, list):
            tips = []
        return cls(
            palette_name=str(payload.get("paletteName") or ""),
            mood_description=str(payload.get("moodDescription") or ""),
            design_tips=[str(tip) for tip in tips],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_prompt(colors: Sequence[str]) -> str:
    return (
        f"Analyze this color palette: {', '.join(colors)}.\n"
        "Provide a creative, short 2-3 word name for this palette.\n"
        "Provide a single sentence description of the mood or vibe it conveys.\n"
        "Provide 3 short, punchy design tips for using these colors together.\n"
        "Return JSON."
    )


def build_request_body(colors: Sequence[str]) -> Dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": build_prompt(colors)}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def _response_text(data: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts)


def analyze_palette_mood(colors: Sequence[str],
                         api_key: Optional[str] = None,
                         session: Optional[requests.Session] = None,
                         model: Optional[str] = None,
                         timeout: Optional[float] = None) -> Optional[MoodAnalysis]:
    """
    Ask Gemini to name and describe a palette.

    Args:
        colors: Hex strings, most dominant first
        api_key: Gemini API key (default from config)
        session: Optional requests session, mainly for tests
        model: Gemini model name (default from config)
        timeout: Request timeout in seconds (default from config)

    Returns:
        MoodAnalysis, or None when unconfigured, empty or on any failure
    """
    api_key = api_key or config.GEMINI_API_KEY
    if not api_key:
        logger.warning("Gemini API key is not configured; skipping mood analysis")
        return None
    if not colors:
        return None

    model = model or config.GEMINI_MODEL
    timeout = timeout if timeout is not None else config.GEMINI_TIMEOUT_S
    http = session or requests.Session()
    url = f"{GEMINI_API_BASE}/models/{model}:generateContent"

    try:
        response = http.post(
            url,
            headers={"x-goog-api-key": api_key, "Content-Type": "application/json"},
            json=build_request_body(colors),
            timeout=timeout,
        )
        response.raise_for_status()
        text = _response_text(response.json())
        if not text:
            logger.warning("Gemini returned an empty response")
            return None
        return MoodAnalysis.from_payload(json.loads(text))
    except (requests.RequestException, ValueError, AttributeError, TypeError) as e:
        logger.error(f"Gemini analysis failed: {e}")
        return None
    finally:
        if session is None:
            http.close()
