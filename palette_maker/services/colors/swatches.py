"""
Swatch Rendering Module

Renders an extracted palette as a horizontal strip of color chips for
previews and quick visual QA.
"""

import base64
from typing import List, Optional, Tuple

import cv2
import numpy as np
from loguru import logger

from .color_space import hex_to_rgb


FALLBACK_CHIP_BGR = (128, 128, 128)


def hex_to_bgr(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to BGR tuple for OpenCV."""
    r, g, b = hex_to_rgb(hex_color)
    return (b, g, r)


def render_swatch_strip(hex_colors: List[str],
                        chip_size: int = 40,
                        highlight_index: Optional[int] = None,
                        border_color: Tuple[int, int, int] = (0, 0, 0),
                        border_width: int = 2) -> str:
    """
    Render a horizontal strip of color swatches.

    Args:
        hex_colors: List of hex color strings
        chip_size: Size of each color chip in pixels
        highlight_index: Index of color to outline
        border_color: BGR color for highlight border
        border_width: Width of highlight border in pixels

    Returns:
        Base64-encoded PNG image string

    Raises:
        ValueError: If ``hex_colors`` is empty or ``chip_size`` is not positive
        RuntimeError: If PNG encoding fails
    """
    if not hex_colors:
        raise ValueError("Empty hex_colors list provided")
    if chip_size <= 0:
        raise ValueError(f"chip_size must be positive, got {chip_size}")

    k = len(hex_colors)
    logger.debug(f"Rendering swatch strip with {k} colors, chip_size={chip_size}")

    img = np.zeros((chip_size, chip_size * k, 3), dtype=np.uint8)

    for i, hex_color in enumerate(hex_colors):
        x_start = i * chip_size
        x_end = (i + 1) * chip_size
        try:
            img[:, x_start:x_end, :] = hex_to_bgr(hex_color)
        except ValueError as e:
            logger.warning(f"Failed to render color {hex_color}: {e}")
            img[:, x_start:x_end, :] = FALLBACK_CHIP_BGR

    if highlight_index is not None and 0 <= highlight_index < k:
        x_start = highlight_index * chip_size
        x_end = (highlight_index + 1) * chip_size
        cv2.rectangle(
            img,
            (x_start, 0),
            (x_end - 1, chip_size - 1),
            border_color,
            border_width
        )

    success, buffer = cv2.imencode('.png', img)
    if not success:
        raise RuntimeError("Failed to encode swatch strip as PNG")

    return base64.b64encode(buffer.tobytes()).decode('ascii')
