"""
ChromaLens Configuration
Manages environment variables and defaults for palette extraction and the HTTP service.
"""
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Configuration class for ChromaLens services."""

    # Upload limits
    MAX_FILE_MB: int = int(os.environ.get("CHROMALENS_MAX_FILE_MB", "10"))

    # Extraction defaults
    PRESCALE_MAX_EDGE: int = int(os.environ.get("CHROMALENS_PRESCALE_MAX_EDGE", "150"))
    DEFAULT_SAMPLE_RATE: int = int(os.environ.get("CHROMALENS_SAMPLE_RATE", "10"))
    DEFAULT_MAX_COLORS: int = int(os.environ.get("CHROMALENS_MAX_COLORS", "8"))
    QUANTIZE_STEP: int = int(os.environ.get("CHROMALENS_QUANTIZE_STEP", "12"))
    MIN_DISTANCE_SQ: int = int(os.environ.get("CHROMALENS_MIN_DISTANCE_SQ", "2500"))

    # Logging
    LOG_LEVEL: str = os.environ.get("CHROMALENS_LOG_LEVEL", "INFO")

    # Mood analysis (Gemini)
    GEMINI_API_KEY: Optional[str] = os.environ.get("CHROMALENS_GEMINI_API_KEY") or os.environ.get("API_KEY")
    GEMINI_MODEL: str = os.environ.get("CHROMALENS_GEMINI_MODEL", "gemini-2.5-flash")
    GEMINI_TIMEOUT_S: float = float(os.environ.get("CHROMALENS_GEMINI_TIMEOUT_S", "20"))
    MOOD_TOP_N: int = 5

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get("CHROMALENS_ALLOWED_ORIGINS", "*")

    # Supported image formats
    SUPPORTED_MIME_TYPES = ["image/png", "image/jpeg", "image/webp"]
    SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}

    @classmethod
    def allowed_origins(cls) -> list:
        """Parse the comma-separated CORS origin list."""
        return [origin.strip() for origin in cls.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Global config instance
config = Config()
