"""
Test configuration and fixtures for Palette Maker tests.
"""
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from palette_maker.main import app


RED = (255, 0, 0)
BLUE = (0, 0, 255)


def solid_image(color, width=100, height=100, alpha=255) -> np.ndarray:
    """RGBA array filled with one color."""
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[:, :, :3] = color
    img[:, :, 3] = alpha
    return img


def split_image(left, right, width=100, height=100) -> np.ndarray:
    """RGBA array with distinct left and right halves."""
    img = solid_image(left, width, height)
    img[:, width // 2:, :3] = right
    return img


def gradient_image(start, end, width=100, height=100) -> np.ndarray:
    """Opaque horizontal linear gradient between two colors."""
    t = np.linspace(0.0, 1.0, width)[np.newaxis, :, np.newaxis]
    row = (1 - t) * np.array(start) + t * np.array(end)
    rgb = np.repeat(row, height, axis=0).astype(np.uint8)
    alpha = np.full((height, width, 1), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=2)


def png_bytes(rgba: np.ndarray) -> bytes:
    """Encode an RGBA array as PNG."""
    buffer = io.BytesIO()
    Image.fromarray(rgba).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def rng():
    """Seeded random generator for reproducible clustering."""
    return np.random.default_rng(1234)


@pytest.fixture
def noise_image():
    """Opaque 64x64 image of random colors."""
    generator = np.random.default_rng(0)
    rgb = generator.integers(0, 256, size=(64, 64, 3), dtype=np.uint8)
    alpha = np.full((64, 64, 1), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=2)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from palette_maker.utils.metrics import reset_metrics
    reset_metrics()
