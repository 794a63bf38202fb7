"""
Unit tests for pixel preprocessing.

Tests:
- working resolution and resizing
- HSL validity rules
- alpha filtering and input normalization
"""

import numpy as np
import pytest
from PIL import Image

from palette_maker.services.colors.color_space import HSL, rgb_to_hsl_array
from palette_maker.services.colors.preprocess import (
    has_enough_pixels,
    is_valid_color,
    preprocess_pixels,
    resize_to_working_size,
    to_rgba_array,
    valid_color_mask,
    working_size,
)

from conftest import BLUE, RED, solid_image, split_image


class TestWorkingSize:
    """Test downscaling to the working resolution"""

    def test_longer_side_capped(self):
        """Longer side becomes 100 and aspect ratio is kept"""
        assert working_size(400, 200) == (100, 50)
        assert working_size(200, 800) == (25, 100)

    def test_never_upscales(self):
        """Small images keep their size"""
        assert working_size(50, 20) == (50, 20)
        assert working_size(100, 100) == (100, 100)

    def test_extreme_aspect_keeps_one_pixel(self):
        """A very thin image never collapses to zero pixels"""
        assert working_size(1000, 1) == (100, 1)

    def test_resize_returns_input_when_in_bounds(self):
        """No resampling happens when the image already fits"""
        img = solid_image(RED, 40, 30)
        assert resize_to_working_size(img) is img

    def test_resize_downscales(self):
        """Large bitmaps are resampled to the working size"""
        img = solid_image(RED, 400, 200)
        resized = resize_to_working_size(img)
        assert resized.shape == (50, 100, 4)
        assert np.all(resized[:, :, :3] == RED)

    def test_resize_ignores_transparent_color(self):
        """Partially covered pixels keep the color of their opaque part"""
        img = solid_image(BLUE, 150, 150)
        img[:, :71] = (255, 0, 0, 0)
        resized = resize_to_working_size(img)
        assert resized.shape == (100, 100, 4)

        visible = resized[resized[:, :, 3] > 0]
        assert np.all(visible[:, :3] == BLUE)
        assert np.all(resized[resized[:, :, 3] == 0][:, :3] == 0)
        # the boundary column is partially covered
        assert 0 < resized[0, 47, 3] < 255


class TestValidityRules:
    """Test HSL filtering rules"""

    @pytest.mark.parametrize("hsl,expected", [
        (HSL(0, 0.50, 10), True),     # vivid dark survives
        (HSL(0, 0.10, 10), False),    # near-black noise
        (HSL(0, 1.00, 245), False),   # blown highlight
        (HSL(0, 0.05, 128), False),   # flat gray midtone
        (HSL(0, 0.09, 128), True),    # just saturated enough
        (HSL(0, 0.05, 20), True),     # dark gray outside midtone band
        (HSL(0, 0.05, 220), True),    # light gray outside midtone band
        (HSL(0, 0.00, 30), True),     # band is exclusive
        (HSL(0, 1.00, 127.5), True),  # pure hue
    ])
    def test_is_valid_color(self, hsl, expected):
        """Each rule applies in order"""
        assert is_valid_color(hsl) is expected

    def test_mask_matches_scalar_rules(self):
        """Vectorized mask agrees with the scalar rules on a color grid"""
        levels = np.arange(0, 256, 17)
        grid = np.array(np.meshgrid(levels, levels, levels)).reshape(3, -1).T
        hsl = rgb_to_hsl_array(grid)
        mask = valid_color_mask(hsl)
        expected = [is_valid_color(HSL(*row)) for row in hsl]
        assert mask.tolist() == expected


class TestInputNormalization:
    """Test conversion of decoded bitmaps to RGBA arrays"""

    def test_rgb_array_gets_opaque_alpha(self):
        """Three channel arrays are treated as fully opaque"""
        rgba = to_rgba_array(np.zeros((4, 5, 3), dtype=np.uint8))
        assert rgba.shape == (4, 5, 4)
        assert np.all(rgba[:, :, 3] == 255)

    def test_pil_image_any_mode(self):
        """PIL images in other modes are converted"""
        rgba = to_rgba_array(Image.new("L", (8, 6), color=90))
        assert rgba.shape == (6, 8, 4)
        assert np.all(rgba[:, :, :3] == 90)

    @pytest.mark.parametrize("shape", [(10, 10), (10, 10, 2), (0, 10, 4)])
    def test_rejects_non_bitmaps(self, shape):
        """Arrays that are not RGB(A) bitmaps raise ValueError"""
        with pytest.raises(ValueError):
            to_rgba_array(np.zeros(shape, dtype=np.uint8))


class TestPreprocessPixels:
    """Test the full preprocessing step"""

    def test_solid_color_keeps_every_pixel(self):
        """A saturated solid image yields one pixel per input pixel"""
        pixels = preprocess_pixels(solid_image(RED, 20, 20))
        assert pixels.shape == (400, 3)
        assert np.all(pixels == RED)

    def test_alpha_threshold_is_exclusive(self):
        """Alpha of exactly 128 is dropped, 129 is kept"""
        assert len(preprocess_pixels(solid_image(RED, 10, 10, alpha=128))) == 0
        assert len(preprocess_pixels(solid_image(RED, 10, 10, alpha=129))) == 100

    @pytest.mark.parametrize("color", [(0, 0, 0), (255, 255, 255), (128, 128, 128)])
    def test_neutral_images_filtered_out(self, color):
        """Black, white and mid gray carry no usable color"""
        assert len(preprocess_pixels(solid_image(color, 10, 10))) == 0

    def test_transparent_half_ignored(self):
        """Only the opaque half contributes pixels"""
        img = split_image(RED, (0, 0, 255), 20, 10)
        img[:, :10, 3] = 0
        pixels = preprocess_pixels(img)
        assert len(pixels) == 100
        assert np.all(pixels == (0, 0, 255))

    def test_large_image_downsampled(self):
        """Pixel count is bounded by the working resolution"""
        pixels = preprocess_pixels(solid_image(RED, 400, 400))
        assert len(pixels) == 100 * 100

    def test_has_enough_pixels(self):
        """Ten pixels is the minimum for clustering"""
        assert not has_enough_pixels(np.zeros((9, 3), dtype=np.uint8))
        assert has_enough_pixels(np.zeros((10, 3), dtype=np.uint8))
