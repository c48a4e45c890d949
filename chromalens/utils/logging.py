"""
ChromaLens Structured Logging
Centralized logging configuration using loguru.
"""
import sys
from typing import Any, Dict, Optional

from loguru import logger

from chromalens.config import config


class StructuredLogger:
    """Structured logger for the ChromaLens service."""

    def __init__(self, level: Optional[str] = None):
        """Initialize structured logger."""
        self.level = level or config.LOG_LEVEL
        self._configure_logger()

    def _configure_logger(self):
        """Configure loguru logger with structured format."""
        logger.remove()
        logger.add(
            sys.stdout,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}",
            level=self.level,
            serialize=False  # Set to True for JSON output
        )

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log info message with optional extra data."""
        logger.bind(**(extra or {})).info(message)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log warning message with optional extra data."""
        logger.bind(**(extra or {})).warning(message)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log error message with optional extra data."""
        logger.bind(**(extra or {})).error(message)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log debug message with optional extra data."""
        logger.bind(**(extra or {})).debug(message)


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get or create global logger instance."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger
