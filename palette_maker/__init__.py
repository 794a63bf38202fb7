"""
Palette Maker

Dominant color palette extraction for photographs.
"""

from palette_maker.services.colors import (
    DEFAULT_PALETTE,
    ColorExtractor,
    extract_palette,
    extract_palette_from_bytes,
)

__version__ = "1.0.0"

__all__ = [
    "DEFAULT_PALETTE",
    "ColorExtractor",
    "extract_palette",
    "extract_palette_from_bytes",
]
