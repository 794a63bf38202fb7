"""
Seeded, saturation-weighted k-means in perceptual color space.

Seeding follows k-means++ but starts from the most saturated pixel so the
search is biased toward vivid colors. Lloyd iterations assign pixels by
perceptual (LAB) distance and move each centroid to the mean of its pixels
weighted by ``1 + saturation``.
"""

from typing import List, Optional, Tuple

import numpy as np
from loguru import logger

from .color_space import (
    RGB,
    perceptual_distance_matrix,
    rgb_to_hsl_array,
    rgb_to_lab_array,
)
from .palettes import DEFAULT_RGB_PALETTE


CLUSTER_COUNT = 12
MAX_ITERATIONS = 25
CONVERGENCE_THRESHOLD = 3.0


def _resolve_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def initialize_centroids(pixels: np.ndarray,
                         k: int,
                         rng: Optional[np.random.Generator] = None,
                         saturation: Optional[np.ndarray] = None,
                         lab: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Choose ``k`` initial centroids from the pixel set.

    Args:
        pixels: (N, 3) uint8 RGB pixels, N > 0
        k: Number of centroids
        rng: Random source for roulette draws and fallbacks
        saturation: Precomputed HSL saturation per pixel
        lab: Precomputed LAB values per pixel

    Returns:
        (k, 3) int array of RGB centroids, each one an input pixel
    """
    rng = _resolve_rng(rng)
    if saturation is None:
        saturation = rgb_to_hsl_array(pixels)[:, 1]
    if lab is None:
        lab = rgb_to_lab_array(pixels)

    n = len(pixels)
    # argmax returns the first occurrence on ties
    chosen = [int(np.argmax(saturation))]
    nearest = perceptual_distance_matrix(lab, lab[chosen])[:, 0]

    while len(chosen) < k:
        weights = nearest * nearest
        total = float(weights.sum())

        if total > 0:
            threshold = rng.uniform(0.0, total)
            cumulative = np.cumsum(weights)
            index = int(np.searchsorted(cumulative, threshold, side='right'))
            if index >= n:
                # Round-off pushed the threshold past the last bucket
                index = int(rng.integers(n))
        else:
            # Every pixel coincides with a chosen centroid
            index = int(rng.integers(n))

        chosen.append(index)
        distances = perceptual_distance_matrix(lab, lab[[index]])[:, 0]
        nearest = np.minimum(nearest, distances)

    return pixels[chosen].astype(np.int64)


def assign_clusters(lab: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the perceptually nearest centroid for every pixel."""
    distances = perceptual_distance_matrix(lab, rgb_to_lab_array(centroids))
    return np.argmin(distances, axis=1)


def update_centroids(pixels: np.ndarray,
                     labels: np.ndarray,
                     weights: np.ndarray,
                     centroids: np.ndarray) -> np.ndarray:
    """
    Move each centroid to the weighted mean of its assigned pixels.

    Empty clusters keep their previous centroid. Means are truncated to
    integers.
    """
    k = len(centroids)
    weighted = pixels.astype(np.float64) * weights[:, np.newaxis]

    totals = np.zeros((k, 3), dtype=np.float64)
    np.add.at(totals, labels, weighted)
    weight_sums = np.bincount(labels, weights=weights, minlength=k)

    updated = centroids.copy()
    occupied = weight_sums > 0
    updated[occupied] = (totals[occupied] / weight_sums[occupied, np.newaxis]).astype(np.int64)
    return updated


def kmeans_palette(pixels: np.ndarray,
                   k: int = CLUSTER_COUNT,
                   rng: Optional[np.random.Generator] = None,
                   max_iterations: int = MAX_ITERATIONS,
                   convergence_threshold: float = CONVERGENCE_THRESHOLD) -> Tuple[List[RGB], int]:
    """
    Cluster pixels into ``k`` representative colors.

    Args:
        pixels: (N, 3) uint8 RGB pixels
        k: Number of clusters
        rng: Random source used for seeding
        max_iterations: Hard cap on Lloyd iterations
        convergence_threshold: Stop once no centroid moves this far

    Returns:
        Tuple of:
        - centroids: list of ``k`` RGB colors (the default palette if
          ``pixels`` is empty)
        - iterations: number of Lloyd iterations run
    """
    if len(pixels) == 0:
        logger.warning("No pixels to cluster, using default centroids")
        return list(DEFAULT_RGB_PALETTE), 0

    pixels = np.asarray(pixels, dtype=np.uint8).reshape(-1, 3)
    hsl = rgb_to_hsl_array(pixels)
    lab = rgb_to_lab_array(pixels)
    weights = 1.0 + hsl[:, 1]

    centroids = initialize_centroids(pixels, k, rng=rng, saturation=hsl[:, 1], lab=lab)
    logger.debug(f"Seeded {k} centroids from {len(pixels)} pixels")

    iteration = 0
    while iteration < max_iterations:
        labels = assign_clusters(lab, centroids)
        new_centroids = update_centroids(pixels, labels, weights, centroids)

        shifts = np.diagonal(perceptual_distance_matrix(
            rgb_to_lab_array(centroids), rgb_to_lab_array(new_centroids)
        ))
        centroids = new_centroids
        iteration += 1

        if np.all(shifts < convergence_threshold):
            logger.debug(f"K-means converged at iteration {iteration}")
            break

    return [RGB(*(int(c) for c in centroid)) for centroid in centroids], iteration
