"""
Palette selection and ordering.

Scores cluster centroids by how much of the image they cover and how vivid
they are, greedily picks a visually diverse subset, and orders the final
colors by prominence.
"""

from typing import List, NamedTuple, Sequence

import numpy as np
from loguru import logger

from .color_space import (
    RGB,
    perceptual_distance_matrix,
    rgb_to_hex,
    rgb_to_hsl_array,
    rgb_to_lab_array,
)
from .palettes import DEFAULT_RGB_PALETTE, TARGET_COLOR_COUNT


FREQUENCY_RADIUS = 30.0
MIN_DELTA_E = 20.0
FREQUENCY_WEIGHT = 0.6
SATURATION_WEIGHT = 0.4


class ScoredColor(NamedTuple):
    color: RGB
    score: float


def color_frequencies(colors: Sequence[RGB], pixels: np.ndarray,
                      radius: float = FREQUENCY_RADIUS) -> np.ndarray:
    """
    Share of pixels lying within ``radius`` perceptual units of each color.

    Returns:
        (len(colors),) float array in [0, 1]; zeros if ``pixels`` is empty
    """
    if len(pixels) == 0:
        return np.zeros(len(colors))
    distances = perceptual_distance_matrix(rgb_to_lab_array(colors), rgb_to_lab_array(pixels))
    return np.count_nonzero(distances < radius, axis=1) / len(pixels)


def score_centroids(centroids: Sequence[RGB], pixels: np.ndarray) -> List[ScoredColor]:
    """Score centroids and return them sorted by score, best first."""
    frequency = color_frequencies(centroids, pixels)
    saturation = rgb_to_hsl_array(centroids)[:, 1]
    scores = FREQUENCY_WEIGHT * frequency + SATURATION_WEIGHT * saturation

    scored = [ScoredColor(RGB(*centroid), float(score)) for centroid, score in zip(centroids, scores)]
    # sorted() is stable, equal scores keep centroid order
    return sorted(scored, key=lambda item: -item.score)


def _min_distance_to(candidate: RGB, selected: List[RGB]) -> float:
    if not selected:
        return float("inf")
    distances = perceptual_distance_matrix(rgb_to_lab_array(candidate), rgb_to_lab_array(selected))
    return float(distances.min())


def select_best_colors(centroids: Sequence[RGB],
                       pixels: np.ndarray,
                       target_count: int = TARGET_COLOR_COUNT,
                       min_delta_e: float = MIN_DELTA_E) -> List[RGB]:
    """
    Pick exactly ``target_count`` colors favoring coverage, vividness and diversity.

    Args:
        centroids: Cluster centroids
        pixels: (N, 3) filtered pixels the centroids were computed from
        target_count: Palette size
        min_delta_e: Minimum perceptual separation for the diverse pass

    Returns:
        List of ``target_count`` RGB colors. Exact duplicates only appear
        when the centroids themselves have collapsed to fewer distinct
        values than ``target_count``.
    """
    if len(centroids) == 0:
        logger.warning("No centroids to select from, using default colors")
        centroids = DEFAULT_RGB_PALETTE

    centroids = [RGB(*c) for c in centroids]
    ranked = score_centroids(centroids, pixels)

    selected: List[RGB] = []
    for candidate in ranked:
        if _min_distance_to(candidate.color, selected) >= min_delta_e:
            selected.append(candidate.color)
        if len(selected) >= target_count:
            break
    diverse_count = len(selected)

    # Relax the diversity constraint, still no repeated values
    if len(selected) < target_count:
        for candidate in ranked:
            if candidate.color not in selected:
                selected.append(candidate.color)
                if len(selected) >= target_count:
                    break

    # Centroids have collapsed: reuse unused slots, then cycle
    if len(selected) < target_count:
        used = set()
        for color in selected:
            used.add(centroids.index(color))
        remaining = [c for i, c in enumerate(centroids) if i not in used]
        while len(selected) < target_count:
            if remaining:
                selected.append(remaining.pop(0))
            else:
                selected.append(centroids[len(selected) % len(centroids)])
        logger.debug(f"Padded palette with duplicates: {len(set(selected))} distinct colors")

    logger.debug(f"Selected {diverse_count} diverse colors of {target_count}")
    return selected


def sort_by_prominence(colors: Sequence[RGB], pixels: np.ndarray) -> List[RGB]:
    """Order colors by frequency * (1 + saturation), most dominant first."""
    colors = [RGB(*c) for c in colors]
    if not colors:
        return []

    frequency = color_frequencies(colors, pixels)
    saturation = rgb_to_hsl_array(colors)[:, 1]
    prominence = frequency * (1.0 + saturation)

    order = sorted(range(len(colors)), key=lambda i: -prominence[i])
    return [colors[i] for i in order]


def to_hex_palette(colors: Sequence[RGB]) -> List[str]:
    """Render colors as uppercase ``#RRGGBB`` strings."""
    return [rgb_to_hex(color) for color in colors]
