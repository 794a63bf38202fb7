"""
Palette extraction service.

This module wires the extraction pipeline together: preprocessing, seeded
perceptual k-means, diverse selection and prominence ordering. The engine
is total: every entry point returns exactly six ``#RRGGBB`` strings and
degrades to the default palette instead of raising.
"""

import io
import time
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
from loguru import logger
from PIL import Image, UnidentifiedImageError

from .clustering import CLUSTER_COUNT, MAX_ITERATIONS, kmeans_palette
from .palettes import TARGET_COLOR_COUNT, default_palette
from .preprocess import (
    MAX_DIMENSION,
    MIN_VALID_PIXELS,
    ImageInput,
    has_enough_pixels,
    preprocess_pixels,
)
from .selection import select_best_colors, sort_by_prominence, to_hex_palette


@dataclass
class ExtractionResult:
    """Outcome of a single extraction run."""
    colors: List[str]
    fallback_used: bool = False
    valid_pixel_count: int = 0
    iterations: int = 0
    duration_ms: float = 0.0
    centroids: List[str] = field(default_factory=list)


class ColorExtractor:
    """
    Extracts a six-color palette from a decoded bitmap.

    Instances hold only configuration, so one extractor can serve
    concurrent calls from several threads.

    Args:
        rng: Random generator shared across calls; the caller owns its state
        seed: Seed for a fresh generator on every call, making repeated
            extractions of the same image identical
        cluster_count: Number of k-means clusters
        max_dimension: Longest side of the working bitmap
        max_iterations: Lloyd iteration cap
    """

    def __init__(self,
                 rng: Optional[np.random.Generator] = None,
                 seed: Optional[int] = None,
                 cluster_count: int = CLUSTER_COUNT,
                 max_dimension: int = MAX_DIMENSION,
                 max_iterations: int = MAX_ITERATIONS):
        if rng is not None and seed is not None:
            raise ValueError("Pass either rng or seed, not both")
        self.rng = rng
        self.seed = seed
        self.cluster_count = cluster_count
        self.max_dimension = max_dimension
        self.max_iterations = max_iterations

    def _generator(self) -> np.random.Generator:
        if self.rng is not None:
            return self.rng
        return np.random.default_rng(self.seed)

    def extract(self, image: Optional[ImageInput]) -> ExtractionResult:
        """Run the full pipeline on a decoded bitmap."""
        start_time = time.time()

        if image is None:
            logger.warning("No bitmap supplied, returning default colors")
            return ExtractionResult(colors=default_palette(), fallback_used=True,
                                    duration_ms=(time.time() - start_time) * 1000)

        try:
            pixels = preprocess_pixels(image, max_dimension=self.max_dimension)
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to get pixel data: {e}")
            return ExtractionResult(colors=default_palette(), fallback_used=True,
                                    duration_ms=(time.time() - start_time) * 1000)

        logger.info(f"Processing {len(pixels)} valid pixels after filtering")

        if not has_enough_pixels(pixels):
            logger.warning(f"Too few valid pixels: {len(pixels)} < {MIN_VALID_PIXELS}")
            return ExtractionResult(
                colors=default_palette(),
                fallback_used=True,
                valid_pixel_count=len(pixels),
                duration_ms=(time.time() - start_time) * 1000
            )

        centroids, iterations = kmeans_palette(
            pixels,
            k=self.cluster_count,
            rng=self._generator(),
            max_iterations=self.max_iterations
        )
        selected = select_best_colors(centroids, pixels, target_count=TARGET_COLOR_COUNT)
        ordered = sort_by_prominence(selected, pixels)
        colors = to_hex_palette(ordered)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(f"Extraction complete: {colors} ({iterations} iterations, {duration_ms:.1f}ms)")

        return ExtractionResult(
            colors=colors,
            valid_pixel_count=len(pixels),
            iterations=iterations,
            duration_ms=duration_ms,
            centroids=to_hex_palette(centroids)
        )

    def extract_from_bytes(self, data: bytes) -> ExtractionResult:
        """Decode an encoded image (PNG, JPEG, ...) and extract its palette."""
        image = decode_image_bytes(data)
        return self.extract(image)


def decode_image_bytes(data: bytes) -> Optional[Image.Image]:
    """
    Decode encoded image bytes with Pillow.

    Returns:
        Loaded RGBA image, or None if the data is not a decodable image
    """
    if not data:
        return None
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        logger.warning(f"Failed to decode image data: {e}")
        return None
    return image.convert('RGBA')


def extract_palette(image: Optional[ImageInput],
                    rng: Optional[np.random.Generator] = None,
                    seed: Optional[int] = None) -> List[str]:
    """
    Extract six ``#RRGGBB`` colors from a decoded bitmap, most prominent first.

    >>> extract_palette(None)
    ['#E74C3C', '#3498DB', '#2ECC71', '#F39C12', '#9B59B6', '#1ABC9C']
    """
    return ColorExtractor(rng=rng, seed=seed).extract(image).colors


def extract_palette_from_bytes(data: bytes,
                               rng: Optional[np.random.Generator] = None,
                               seed: Optional[int] = None) -> List[str]:
    """Like :func:`extract_palette` for encoded image bytes."""
    return ColorExtractor(rng=rng, seed=seed).extract_from_bytes(data).colors
