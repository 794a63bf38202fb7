"""
Color space utilities.

Pure conversions between sRGB, HSL and CIE LAB (D65), plus the weighted
perceptual distance used by every stage of the extraction pipeline.

The vectorized ``*_array`` functions operate on (N, 3) arrays and are the
single implementation of each formula; the scalar helpers wrap them for
individual colors.
"""

import re
from typing import NamedTuple, Tuple

import numpy as np


class RGB(NamedTuple):
    """Opaque sRGB color, each channel an int in [0, 255]."""
    r: int
    g: int
    b: int


class HSL(NamedTuple):
    """Hue in degrees [0, 360), saturation in [0, 1], lightness in [0, 255]."""
    h: float
    s: float
    l: float


class LAB(NamedTuple):
    """CIE L*a*b* relative to the D65 white point."""
    l: float
    a: float
    b: float


# sRGB -> XYZ (D65)
SRGB_TO_XYZ = np.array([
    [0.4124, 0.3576, 0.1805],
    [0.2126, 0.7152, 0.0722],
    [0.0193, 0.1192, 0.9505],
])

D65_WHITE = np.array([0.95047, 1.00000, 1.08883])

# Luminance differences count half as much as chroma differences
LIGHTNESS_WEIGHT = 0.5

_NON_ALNUM = re.compile(r"[^0-9A-Za-z]")
_HEX6 = re.compile(r"^#?[0-9A-Fa-f]{6}$")


def _as_pixel_array(rgb) -> np.ndarray:
    arr = np.asarray(rgb, dtype=np.float64)
    return arr.reshape(-1, 3)


def rgb_to_hsl_array(rgb: np.ndarray) -> np.ndarray:
    """
    Convert RGB pixels (N, 3) in [0, 255] to HSL.

    Returns:
        (N, 3) float array of hue degrees, saturation [0, 1] and
        lightness rescaled to [0, 255].
    """
    norm = _as_pixel_array(rgb) / 255.0
    r, g, b = norm[:, 0], norm[:, 1], norm[:, 2]

    max_val = norm.max(axis=1)
    min_val = norm.min(axis=1)
    delta = max_val - min_val
    lightness = (max_val + min_val) / 2.0

    chromatic = delta != 0
    safe_delta = np.where(chromatic, delta, 1.0)

    # Saturation depends on which half of the lightness range we are in
    low = max_val + min_val
    high = 2.0 - max_val - min_val
    denom = np.where(lightness < 0.5, low, high)
    saturation = np.where(chromatic, delta / np.where(denom == 0, 1.0, denom), 0.0)

    hue = np.where(
        max_val == r,
        (g - b) / safe_delta + np.where(g < b, 6.0, 0.0),
        np.where(
            max_val == g,
            (b - r) / safe_delta + 2.0,
            (r - g) / safe_delta + 4.0,
        ),
    )
    hue = np.where(chromatic, hue * 60.0, 0.0)

    return np.column_stack([hue, saturation, lightness * 255.0])


def rgb_to_lab_array(rgb: np.ndarray) -> np.ndarray:
    """Convert RGB pixels (N, 3) in [0, 255] to LAB (N, 3)."""
    norm = _as_pixel_array(rgb) / 255.0

    # sRGB gamma decode
    linear = np.where(norm > 0.04045, ((norm + 0.055) / 1.055) ** 2.4, norm / 12.92)

    xyz = linear @ SRGB_TO_XYZ.T
    xyz = xyz / D65_WHITE

    f = np.where(xyz > 0.008856, np.cbrt(xyz), 7.787 * xyz + 16.0 / 116.0)
    fx, fy, fz = f[:, 0], f[:, 1], f[:, 2]

    L = 116.0 * fy - 16.0
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)

    return np.column_stack([L, a, b])


def perceptual_distance_matrix(lab_a: np.ndarray, lab_b: np.ndarray) -> np.ndarray:
    """
    Pairwise perceptual distance between two LAB arrays.

    Args:
        lab_a: (N, 3) LAB values
        lab_b: (M, 3) LAB values

    Returns:
        (N, M) distance matrix
    """
    diff = lab_a[:, np.newaxis, :] - lab_b[np.newaxis, :, :]
    diff[..., 0] *= LIGHTNESS_WEIGHT
    return np.sqrt(np.sum(diff * diff, axis=-1))


def rgb_to_hsl(color: Tuple[int, int, int]) -> HSL:
    """Convert a single RGB color to HSL."""
    h, s, l = rgb_to_hsl_array(color)[0]
    return HSL(float(h), float(s), float(l))


def rgb_to_lab(color: Tuple[int, int, int]) -> LAB:
    """Convert a single RGB color to LAB."""
    l, a, b = rgb_to_lab_array(color)[0]
    return LAB(float(l), float(a), float(b))


def perceptual_distance(lab1: Tuple[float, float, float], lab2: Tuple[float, float, float]) -> float:
    """Perceptual distance between two LAB triples."""
    d_l = (lab1[0] - lab2[0]) * LIGHTNESS_WEIGHT
    d_a = lab1[1] - lab2[1]
    d_b = lab1[2] - lab2[2]
    return float(np.sqrt(d_l * d_l + d_a * d_a + d_b * d_b))


def rgb_distance(c1: Tuple[int, int, int], c2: Tuple[int, int, int]) -> float:
    """Perceptual distance between two RGB colors."""
    return perceptual_distance(rgb_to_lab(c1), rgb_to_lab(c2))


def rgb_to_hex(color: Tuple[int, int, int]) -> str:
    """Convert RGB to an uppercase ``#RRGGBB`` string."""
    r, g, b = [int(x) for x in color]
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_color: str) -> RGB:
    """
    Parse a strict 6-digit hex color, with or without leading ``#``.

    Raises:
        ValueError: If the string is not a 6-digit hex color
    """
    if not _HEX6.match(hex_color):
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    hex_color = hex_color.lstrip('#')
    return RGB(*(int(hex_color[i:i+2], 16) for i in (0, 2, 4)))


def color_from_hex(hex_color: str) -> RGB:
    """
    Lenient hex parser for user-supplied colors.

    Strips non-alphanumeric characters, expands 3-digit shorthand
    (``F00`` -> ``FF0000``) and maps anything unparseable to mid gray.
    """
    clean = _NON_ALNUM.sub("", hex_color)
    try:
        value = int(clean, 16) if clean else 0
    except ValueError:
        value = 0

    if len(clean) == 3:
        return RGB((value >> 8) * 17, (value >> 4 & 0xF) * 17, (value & 0xF) * 17)
    if len(clean) == 6:
        return RGB(value >> 16, value >> 8 & 0xFF, value & 0xFF)
    return RGB(128, 128, 128)
