"""
Palette Maker Configuration
Manages environment variables and defaults for the extraction service.
"""
import os
from typing import List, Optional

from dotenv import load_dotenv

# Pick up a local .env before reading the environment
load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


class Config:
    """Configuration class for Palette Maker services."""

    # Upload limits
    MAX_FILE_MB: int = int(os.environ.get("PALETTE_MAX_FILE_MB", "10"))

    # Extraction engine
    MAX_DIMENSION: int = int(os.environ.get("PALETTE_MAX_DIMENSION", "100"))
    CLUSTER_COUNT: int = int(os.environ.get("PALETTE_CLUSTER_COUNT", "12"))
    MAX_ITERATIONS: int = int(os.environ.get("PALETTE_MAX_ITERATIONS", "25"))
    # Unset means system entropy on every request
    RANDOM_SEED: Optional[int] = _optional_int("PALETTE_RANDOM_SEED")

    # Thumbnails stored alongside a palette
    THUMBNAIL_MAX_EDGE: int = int(os.environ.get("PALETTE_THUMBNAIL_MAX_EDGE", "256"))
    THUMBNAIL_QUALITY: int = int(os.environ.get("PALETTE_THUMBNAIL_QUALITY", "30"))

    # Logging
    LOG_LEVEL: str = os.environ.get("PALETTE_LOG_LEVEL", "INFO")

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get("PALETTE_ALLOWED_ORIGINS", "")

    # Supported image formats
    SUPPORTED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp", "image/heic"]
    SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".heic"}

    @classmethod
    def allowed_origins(cls) -> List[str]:
        """Parse the comma separated origin list."""
        return [origin.strip() for origin in cls.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @classmethod
    def validate_max_dimension(cls, max_dimension: int) -> bool:
        """Validate working resolution."""
        return 16 <= max_dimension <= 512

    @classmethod
    def validate_cluster_count(cls, k: int) -> bool:
        """Validate cluster count; must leave room for a full palette."""
        return 6 <= k <= 32

    @classmethod
    def validate_thumbnail_quality(cls, quality: int) -> bool:
        """Validate JPEG quality."""
        return 1 <= quality <= 95

    @classmethod
    def check(cls) -> None:
        """Fail fast on out-of-range settings."""
        if not cls.validate_max_dimension(cls.MAX_DIMENSION):
            raise ValueError(f"PALETTE_MAX_DIMENSION out of range: {cls.MAX_DIMENSION}")
        if not cls.validate_cluster_count(cls.CLUSTER_COUNT):
            raise ValueError(f"PALETTE_CLUSTER_COUNT out of range: {cls.CLUSTER_COUNT}")
        if not cls.validate_thumbnail_quality(cls.THUMBNAIL_QUALITY):
            raise ValueError(f"PALETTE_THUMBNAIL_QUALITY out of range: {cls.THUMBNAIL_QUALITY}")


# Global config instance
config = Config()
