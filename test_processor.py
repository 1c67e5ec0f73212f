"""
Tests for per-pixel filtering of ARGB buffers.
"""

import numpy as np
import pytest

from image_transformer.errors import InternalInvariantError
from image_transformer.filters import FilterKind, FilterSpec, parse_filter
from image_transformer.processor import apply_filter

ALL_FILTERS = [
    FilterSpec(FilterKind.GRAYSCALE),
    FilterSpec(FilterKind.SEPIA),
    FilterSpec(FilterKind.THRESHOLD, 127),
]


def _argb(a, r, g, b):
    return (a << 24) | (r << 16) | (g << 8) | b


@pytest.fixture
def random_pixels():
    rng = np.random.default_rng(7)
    return rng.integers(0, 1 << 32, size=4096, dtype=np.uint64).astype(np.uint32)


@pytest.mark.parametrize("spec", ALL_FILTERS)
def test_alpha_is_preserved(spec, random_pixels):
    out = apply_filter(random_pixels, 64, 64, spec)
    assert out.dtype == np.uint32
    assert np.array_equal(out >> 24, random_pixels >> 24)


def test_input_is_not_modified(random_pixels):
    before = random_pixels.copy()
    apply_filter(random_pixels, 64, 64, FilterSpec(FilterKind.SEPIA))
    assert np.array_equal(random_pixels, before)


def test_grayscale_is_achromatic(random_pixels):
    out = apply_filter(random_pixels, 64, 64, FilterSpec(FilterKind.GRAYSCALE))
    assert np.array_equal((out >> 16) & 0xFF, (out >> 8) & 0xFF)
    assert np.array_equal((out >> 8) & 0xFF, out & 0xFF)


def test_sepia_spot_check():
    pixels = np.array([_argb(0x80, 200, 150, 100)], dtype=np.uint32)
    out = apply_filter(pixels, 1, 1, FilterSpec(FilterKind.SEPIA))
    assert int(out[0]) == _argb(0x80, 212, 189, 147)


def test_threshold_output_is_black_or_white(random_pixels):
    out = apply_filter(random_pixels, 64, 64, parse_filter("threshold(30)"))
    assert set(np.unique(out & 0x00FFFFFF).tolist()) <= {0x000000, 0xFFFFFF}


@pytest.mark.parametrize("rgb, expected", [
    ((100, 100, 100), 0x000000),
    ((126, 127, 127), 0x000000),  # average 126
    ((127, 127, 127), 0xFFFFFF),  # equal to level
    ((255, 255, 255), 0xFFFFFF),
])
def test_threshold_boundary(rgb, expected):
    pixels = np.array([_argb(0xFF, *rgb)], dtype=np.uint32)
    out = apply_filter(pixels, 1, 1, parse_filter("threshold(50)"))
    assert int(out[0]) == (0xFF000000 | expected)


def test_threshold_zero_is_all_white():
    pixels = np.array([_argb(0x10, 0, 0, 0), _argb(0x20, 1, 0, 0)], dtype=np.uint32)
    out = apply_filter(pixels, 2, 1, parse_filter("threshold(0)"))
    assert out.tolist() == [_argb(0x10, 255, 255, 255), _argb(0x20, 255, 255, 255)]


def test_pixel_count_mismatch_fails_loudly():
    with pytest.raises(InternalInvariantError):
        apply_filter(np.zeros(10, dtype=np.uint32), 3, 3, FilterSpec(FilterKind.GRAYSCALE))
