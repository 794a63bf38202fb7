"""
Palette Maker Colors Module

Extracts a small, ordered palette of dominant vivid colors from a photo:
pixel filtering, seeded k-means in LAB space, diverse selection and
prominence ordering.
"""

from .extraction import (
    ColorExtractor,
    ExtractionResult,
    extract_palette,
    extract_palette_from_bytes,
)
from .palettes import DEFAULT_PALETTE, TARGET_COLOR_COUNT

__all__ = [
    "ColorExtractor",
    "ExtractionResult",
    "extract_palette",
    "extract_palette_from_bytes",
    "DEFAULT_PALETTE",
    "TARGET_COLOR_COUNT",
]
