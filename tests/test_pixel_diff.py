"""Tests for canvas normalization and the perceptual pixel diff."""

import numpy as np
import pytest

from src.comparison.image_ops import ImageBuffer, load_image, normalize, save_image
from src.comparison.pixel_diff import DiffOptions, color_delta, pixel_diff

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
RED = (255, 0, 0, 255)


def _edge_image(middle_gray: int) -> ImageBuffer:
    """5x5: two black columns, one gray column, two white columns."""
    data = np.zeros((5, 5, 4), dtype=np.uint8)
    data[..., 3] = 255
    data[:, 2, :3] = middle_gray
    data[:, 3:, :3] = 255
    return ImageBuffer(data)


class TestNormalize:
    """Tests for padding an image onto a larger canvas."""

    def test_same_size_is_identity(self, solid):
        img = solid(4, 3, RED)
        assert normalize(img, 4, 3) is img

    def test_pads_bottom_with_transparent_black(self, solid):
        img = solid(4, 3, RED)
        padded = normalize(img, 4, 5)
        assert padded.size == (4, 5)
        assert np.all(padded.data[:3] == RED)
        assert np.all(padded.data[3:] == 0)

    def test_pads_right_and_bottom(self, solid):
        img = solid(2, 2, WHITE)
        padded = normalize(img, 3, 4)
        assert np.all(padded.data[:2, :2] == WHITE)
        assert np.all(padded.data[:, 2] == 0)
        assert np.all(padded.data[2:] == 0)

    def test_original_is_not_mutated(self, solid):
        img = solid(2, 2, WHITE)
        normalize(img, 3, 3)
        assert img.size == (2, 2)
        assert np.all(img.data == WHITE)


class TestImageIO:
    """Tests for PNG load and save."""

    def test_round_trip_preserves_pixels(self, tmp_path, solid):
        path = tmp_path / "nested" / "img.png"
        save_image(solid(3, 2, RED), path)
        assert path.exists()
        loaded = load_image(path)
        assert loaded.size == (3, 2)
        assert np.all(loaded.data == RED)

    def test_rgb_png_is_loaded_as_rgba(self, tmp_path):
        from PIL import Image

        path = tmp_path / "rgb.png"
        Image.new("RGB", (2, 2), (10, 20, 30)).save(path)
        loaded = load_image(path)
        assert loaded.data.shape == (2, 2, 4)
        assert tuple(loaded.data[0, 0]) == (10, 20, 30, 255)


class TestColorDelta:
    """Tests for the signed YIQ distance."""

    def test_identical_is_zero(self):
        a = np.array([[[12, 34, 56, 255]]], dtype=np.uint8)
        assert color_delta(a, a)[0, 0] == 0

    def test_sign_follows_brightness(self):
        white = np.array([[WHITE]], dtype=np.uint8)
        black = np.array([[BLACK]], dtype=np.uint8)
        assert color_delta(white, black)[0, 0] < 0
        assert color_delta(black, white)[0, 0] > 0

    def test_transparent_pixels_blend_to_white(self):
        transparent = np.zeros((1, 1, 4), dtype=np.uint8)
        white = np.array([[WHITE]], dtype=np.uint8)
        assert color_delta(transparent, white)[0, 0] == 0


class TestPixelDiff:
    """Tests for pixel_diff counting and diff image rendering."""

    def test_identical_images_have_no_diff(self, solid):
        count, diff = pixel_diff(solid(10, 10, RED), solid(10, 10, RED))
        assert count == 0
        assert diff.size == (10, 10)
        # no highlighted pixels, only the faded original
        assert not np.any(np.all(diff.data[..., :3] == (255, 0, 0), axis=-1))
        assert not np.any(np.all(diff.data[..., :3] == (0, 255, 0), axis=-1))
        assert np.all(diff.data[..., 3] == 255)

    def test_faded_background_is_gray(self, solid):
        _, diff = pixel_diff(solid(2, 2, RED), solid(2, 2, RED))
        r, g, b, a = diff.data[0, 0]
        assert r == g == b
        assert r > 128  # faded toward white

    def test_white_vs_black_differs_everywhere(self, solid):
        count, diff = pixel_diff(solid(10, 10, WHITE), solid(10, 10, BLACK))
        assert count == 100
        # current darker than baseline uses the alternate color
        assert np.all(diff.data[..., :3] == (0, 255, 0))

    def test_black_vs_white_uses_primary_color(self, solid):
        count, diff = pixel_diff(solid(4, 4, BLACK), solid(4, 4, WHITE))
        assert count == 16
        assert np.all(diff.data[..., :3] == (255, 0, 0))

    def test_small_color_change_is_within_threshold(self, solid):
        count, _ = pixel_diff(solid(5, 5, (200, 200, 200, 255)), solid(5, 5, (202, 200, 200, 255)))
        assert count == 0

    def test_single_changed_pixel_in_flat_region(self, solid):
        baseline = solid(5, 5, WHITE)
        current = solid(5, 5, WHITE)
        current.data[2, 2] = BLACK
        count, diff = pixel_diff(baseline, current)
        assert count == 1
        assert tuple(diff.data[2, 2, :3]) == (0, 255, 0)

    def test_antialiased_edge_is_excluded(self):
        count, diff = pixel_diff(_edge_image(128), _edge_image(100))
        assert count == 0
        assert np.all(diff.data[:, 2, :3] == (255, 255, 0))

    def test_include_aa_counts_antialiased_edge(self):
        count, _ = pixel_diff(_edge_image(128), _edge_image(100), DiffOptions(include_aa=True))
        assert count == 5

    def test_size_mismatch_is_rejected(self, solid):
        with pytest.raises(ValueError, match="sizes do not match"):
            pixel_diff(solid(2, 2), solid(2, 3))

    def test_padded_region_counts_dark_content(self, solid):
        baseline = normalize(solid(10, 10, WHITE), 10, 15)
        current = solid(10, 15, WHITE)
        current.data[10:] = BLACK
        count, _ = pixel_diff(baseline, current)
        assert count == 50

    def test_padded_region_matches_white_content(self, solid):
        baseline = normalize(solid(10, 10, WHITE), 10, 15)
        count, _ = pixel_diff(baseline, solid(10, 15, WHITE))
        assert count == 0
