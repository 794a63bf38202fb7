"""Fixed fallback palette returned whenever an image cannot be analyzed."""

from typing import List

from .color_space import RGB, hex_to_rgb


TARGET_COLOR_COUNT = 6

DEFAULT_PALETTE: List[str] = [
    "#E74C3C",
    "#3498DB",
    "#2ECC71",
    "#F39C12",
    "#9B59B6",
    "#1ABC9C",
]

DEFAULT_RGB_PALETTE: List[RGB] = [hex_to_rgb(hex_color) for hex_color in DEFAULT_PALETTE]


def default_palette() -> List[str]:
    """Fresh copy of the fallback palette."""
    return list(DEFAULT_PALETTE)
