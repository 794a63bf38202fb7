"""
Palette Maker Structured Logging
Centralized logging configuration using loguru.
"""
import sys
from typing import Dict, Any, Optional

from loguru import logger

from palette_maker.config import config


LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}"


def configure_logging(level: Optional[str] = None) -> None:
    """Replace loguru's default handler with the service format."""
    logger.remove()
    logger.add(
        sys.stdout,
        format=LOG_FORMAT,
        level=level or config.LOG_LEVEL,
        serialize=False  # Set to True for JSON output
    )


class StructuredLogger:
    """Structured logger binding request context onto loguru records."""

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
