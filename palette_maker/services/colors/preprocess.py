"""
Pixel preprocessing for palette extraction.

Downsamples the input to a small working resolution and keeps only the
opaque pixels that carry useful color: vivid darks survive, near-black
noise, blown highlights and flat gray midtones are dropped.
"""

from typing import Tuple, Union

import cv2
import numpy as np
from loguru import logger
from PIL import Image

from .color_space import HSL, rgb_to_hsl_array


MAX_DIMENSION = 100
ALPHA_THRESHOLD = 128
MIN_VALID_PIXELS = 10

# Lightness thresholds are on the 0-255 scale
DARK_LIGHTNESS = 15.0
DARK_MIN_SATURATION = 0.15
HIGHLIGHT_LIGHTNESS = 240.0
MIDTONE_RANGE = (30.0, 210.0)
MIDTONE_MIN_SATURATION = 0.08

ImageInput = Union[Image.Image, np.ndarray]


def to_rgba_array(image: ImageInput) -> np.ndarray:
    """
    Normalize a decoded bitmap to an (H, W, 4) uint8 RGBA array.

    Args:
        image: PIL image in any mode, or an (H, W, 3|4) uint8 array in RGB(A) order

    Returns:
        RGBA array; 3-channel inputs get an opaque alpha channel

    Raises:
        ValueError: If the array shape is not an RGB(A) bitmap
    """
    if isinstance(image, Image.Image):
        if image.width == 0 or image.height == 0:
            raise ValueError(f"Expected non-empty bitmap, got size {image.size}")
        if image.mode != 'RGBA':
            image = image.convert('RGBA')
        return np.asarray(image, dtype=np.uint8)

    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4) or arr.shape[0] == 0 or arr.shape[1] == 0:
        raise ValueError(f"Expected (H, W, 3|4) bitmap, got shape {arr.shape}")

    arr = arr.astype(np.uint8, copy=False)
    if arr.shape[2] == 3:
        alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
        arr = np.concatenate([arr, alpha], axis=2)
    return arr


def working_size(width: int, height: int, max_dimension: int = MAX_DIMENSION) -> Tuple[int, int]:
    """Target (width, height) for the working bitmap; never upscales."""
    scale = min(max_dimension / width, max_dimension / height, 1.0)
    return max(1, int(width * scale)), max(1, int(height * scale))


def resize_to_working_size(rgba: np.ndarray, max_dimension: int = MAX_DIMENSION) -> np.ndarray:
    """
    Downscale so the longer side is at most ``max_dimension`` pixels.

    Aspect ratio is preserved. Bitmaps already within bounds are returned
    unchanged. Color is resampled premultiplied by alpha so transparent
    pixels contribute nothing to the visible pixels they blend into.
    """
    height, width = rgba.shape[:2]
    new_width, new_height = working_size(width, height, max_dimension)

    if (new_width, new_height) == (width, height):
        return rgba

    rgba_f = rgba.astype(np.float32)
    alpha = rgba_f[:, :, 3:4]
    premultiplied = np.concatenate([rgba_f[:, :, :3] * (alpha / 255.0), alpha], axis=2)

    # INTER_AREA for downscaling (better quality)
    resized = cv2.resize(premultiplied, (new_width, new_height), interpolation=cv2.INTER_AREA)

    out_alpha = resized[:, :, 3:4]
    rgb = np.where(out_alpha > 0, resized[:, :, :3] * 255.0 / np.maximum(out_alpha, 1e-6), 0.0)
    out = np.concatenate([rgb, out_alpha], axis=2)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def is_valid_color(hsl: HSL) -> bool:
    """Apply the filtering rules to a single HSL color."""
    if hsl.l < DARK_LIGHTNESS:
        return hsl.s > DARK_MIN_SATURATION

    if hsl.l > HIGHLIGHT_LIGHTNESS:
        return False

    if MIDTONE_RANGE[0] < hsl.l < MIDTONE_RANGE[1] and hsl.s < MIDTONE_MIN_SATURATION:
        return False

    return True


def valid_color_mask(hsl: np.ndarray) -> np.ndarray:
    """Vectorized :func:`is_valid_color` over an (N, 3) HSL array."""
    saturation = hsl[:, 1]
    lightness = hsl[:, 2]

    dark = lightness < DARK_LIGHTNESS
    highlight = lightness > HIGHLIGHT_LIGHTNESS
    flat_midtone = (
        (lightness > MIDTONE_RANGE[0])
        & (lightness < MIDTONE_RANGE[1])
        & (saturation < MIDTONE_MIN_SATURATION)
    )

    return np.where(dark, saturation > DARK_MIN_SATURATION, ~highlight & ~flat_midtone)


def preprocess_pixels(image: ImageInput,
                      max_dimension: int = MAX_DIMENSION,
                      alpha_threshold: int = ALPHA_THRESHOLD) -> np.ndarray:
    """
    Produce the list of opaque, useful pixels of an image.

    Args:
        image: Decoded bitmap (PIL image or RGB(A) array)
        max_dimension: Longest side of the working bitmap
        alpha_threshold: Pixels with alpha at or below this are discarded

    Returns:
        (N, 3) uint8 array of RGB pixels in row-major order; may be empty

    Raises:
        ValueError: If the bitmap cannot be interpreted as RGB(A)
    """
    rgba = resize_to_working_size(to_rgba_array(image), max_dimension)
    total = rgba.shape[0] * rgba.shape[1]

    flat = rgba.reshape(-1, 4)
    opaque = flat[flat[:, 3] > alpha_threshold][:, :3]

    if len(opaque) == 0:
        logger.debug(f"Filtered: 0 valid pixels from {total} total (no opaque pixels)")
        return opaque

    keep = valid_color_mask(rgb_to_hsl_array(opaque))
    pixels = opaque[keep]

    logger.debug(f"Filtered: {len(pixels)} valid pixels from {total} total "
                 f"({len(opaque)} opaque)")
    return pixels


def has_enough_pixels(pixels: np.ndarray, minimum: int = MIN_VALID_PIXELS) -> bool:
    """Whether enough pixels survived filtering to run clustering."""
    return len(pixels) >= minimum
