"""
Unit tests for color space utilities.

Tests the pure conversions used by every pipeline stage:
- RGB to HSL with lightness on the 0-255 scale
- RGB to LAB (D65)
- weighted perceptual distance
- hex encoding and parsing
"""

import numpy as np
import pytest

from palette_maker.services.colors.color_space import (
    HSL,
    LAB,
    RGB,
    color_from_hex,
    hex_to_rgb,
    perceptual_distance,
    perceptual_distance_matrix,
    rgb_distance,
    rgb_to_hex,
    rgb_to_hsl,
    rgb_to_hsl_array,
    rgb_to_lab,
    rgb_to_lab_array,
)


class TestRgbToHsl:
    """Test HSL derivation"""

    def test_primary_hues(self):
        """Primaries land on 0/120/240 degrees, fully saturated"""
        assert rgb_to_hsl((255, 0, 0)) == pytest.approx(HSL(0.0, 1.0, 127.5))
        assert rgb_to_hsl((0, 255, 0)) == pytest.approx(HSL(120.0, 1.0, 127.5))
        assert rgb_to_hsl((0, 0, 255)) == pytest.approx(HSL(240.0, 1.0, 127.5))

    def test_magenta_wraps_hue(self):
        """Hue for red-max colors with g < b wraps into [300, 360)"""
        h, s, _ = rgb_to_hsl((255, 0, 128))
        assert 300.0 <= h < 360.0
        assert s == pytest.approx(1.0)

    def test_grays_have_no_saturation(self):
        """Achromatic colors have zero hue and saturation"""
        for value in (0, 64, 128, 255):
            h, s, l = rgb_to_hsl((value, value, value))
            assert h == 0.0
            assert s == 0.0
            assert l == pytest.approx(value)

    def test_light_saturation_branch(self):
        """Colors above mid lightness use the 2 - max - min denominator"""
        # max=1.0, min=0.6 -> l=0.8, s=0.4/0.4
        h, s, l = rgb_to_hsl((255, 153, 153))
        assert s == pytest.approx(1.0)
        assert l == pytest.approx(204.0)

    def test_array_matches_scalar(self):
        """Vectorized conversion agrees with the scalar helper"""
        colors = np.array([[12, 200, 90], [250, 250, 10], [30, 30, 31], [0, 0, 0]])
        hsl = rgb_to_hsl_array(colors)
        for color, row in zip(colors, hsl):
            assert tuple(row) == pytest.approx(tuple(rgb_to_hsl(tuple(color))))


class TestRgbToLab:
    """Test LAB conversion"""

    def test_white_and_black(self):
        """White maps to L=100 and black to L=0, both neutral"""
        white = rgb_to_lab((255, 255, 255))
        assert white.l == pytest.approx(100.0, abs=0.1)
        assert white.a == pytest.approx(0.0, abs=0.5)
        assert white.b == pytest.approx(0.0, abs=0.5)

        black = rgb_to_lab((0, 0, 0))
        assert black == pytest.approx(LAB(0.0, 0.0, 0.0), abs=1e-9)

    def test_red_reference_values(self):
        """sRGB red matches published L*a*b* within rounding of the matrix"""
        red = rgb_to_lab((255, 0, 0))
        assert red.l == pytest.approx(53.24, abs=0.5)
        assert red.a == pytest.approx(80.09, abs=0.5)
        assert red.b == pytest.approx(67.20, abs=0.5)

    def test_dark_values_use_linear_branch(self):
        """Very dark colors stay finite and ordered by lightness"""
        l1 = rgb_to_lab((1, 1, 1)).l
        l2 = rgb_to_lab((5, 5, 5)).l
        assert 0.0 < l1 < l2

    def test_array_shape(self):
        """Array conversion keeps one row per pixel"""
        lab = rgb_to_lab_array(np.zeros((7, 3), dtype=np.uint8))
        assert lab.shape == (7, 3)


class TestPerceptualDistance:
    """Test the weighted LAB distance"""

    def test_lightness_is_half_weighted(self):
        """A lightness step of 10 counts as 5"""
        assert perceptual_distance((50.0, 0.0, 0.0), (60.0, 0.0, 0.0)) == pytest.approx(5.0)

    def test_chroma_is_full_weight(self):
        """Chroma differences use plain Euclidean distance"""
        assert perceptual_distance((50.0, 0.0, 0.0), (50.0, 3.0, 4.0)) == pytest.approx(5.0)

    def test_identity_and_symmetry(self):
        """Distance is zero for equal colors and symmetric otherwise"""
        assert rgb_distance((10, 20, 30), (10, 20, 30)) == 0.0
        assert rgb_distance((255, 0, 0), (0, 0, 255)) == pytest.approx(rgb_distance((0, 0, 255), (255, 0, 0)))

    def test_hues_separate_more_than_shades(self):
        """Two shades of red are closer than red and blue"""
        assert rgb_distance((255, 0, 0), (180, 0, 0)) < rgb_distance((255, 0, 0), (0, 0, 255))

    def test_matrix_matches_pairwise(self):
        """Distance matrix agrees with pairwise distances"""
        a = np.array([[255, 0, 0], [0, 128, 0]])
        b = np.array([[0, 0, 255], [255, 255, 0], [10, 10, 10]])
        matrix = perceptual_distance_matrix(rgb_to_lab_array(a), rgb_to_lab_array(b))
        assert matrix.shape == (2, 3)
        for i, ca in enumerate(a):
            for j, cb in enumerate(b):
                assert matrix[i, j] == pytest.approx(rgb_distance(tuple(ca), tuple(cb)))


class TestHexCodec:
    """Test hex encoding and parsing"""

    def test_rgb_to_hex_uppercase(self):
        """Output is uppercase and zero padded"""
        assert rgb_to_hex((231, 76, 60)) == "#E74C3C"
        assert rgb_to_hex((0, 10, 255)) == "#000AFF"
        assert rgb_to_hex(np.array([171, 205, 239])) == "#ABCDEF"

    def test_hex_to_rgb(self):
        """Strict parsing accepts either case, with or without #"""
        assert hex_to_rgb("#3498db") == RGB(52, 152, 219)
        assert hex_to_rgb("1ABC9C") == RGB(26, 188, 156)

    @pytest.mark.parametrize("bad", ["", "#12345", "#GGGGGG", "#1234567", "red"])
    def test_hex_to_rgb_rejects_malformed(self, bad):
        """Malformed strings raise ValueError"""
        with pytest.raises(ValueError):
            hex_to_rgb(bad)

    def test_color_from_hex_lenient(self):
        """Lenient parsing handles shorthand, missing # and junk"""
        assert color_from_hex("#FF0000") == RGB(255, 0, 0)
        assert color_from_hex("00FF00") == RGB(0, 255, 0)
        assert color_from_hex("F00") == RGB(255, 0, 0)
        assert color_from_hex("#abc") == RGB(170, 187, 204)
        assert color_from_hex("12345") == RGB(128, 128, 128)
        assert color_from_hex("") == RGB(128, 128, 128)
