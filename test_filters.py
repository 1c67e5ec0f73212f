"""
Tests for filter token parsing.
"""

import pytest

from image_transformer.errors import InvalidFilterError
from image_transformer.filters import FILTER_NAMES, FilterKind, FilterSpec, parse_filter, scale_level


def test_registered_names():
    assert FILTER_NAMES == ("grayscale", "sepia", "threshold")


@pytest.mark.parametrize("token, expected", [
    ("grayscale", FilterSpec(FilterKind.GRAYSCALE, 0)),
    ("sepia", FilterSpec(FilterKind.SEPIA, 0)),
    ("threshold(0)", FilterSpec(FilterKind.THRESHOLD, 0)),
    ("threshold(7)", FilterSpec(FilterKind.THRESHOLD, 17)),
    ("threshold(50)", FilterSpec(FilterKind.THRESHOLD, 127)),
    ("threshold(100)", FilterSpec(FilterKind.THRESHOLD, 255)),
])
def test_parse_valid(token, expected):
    assert parse_filter(token) == expected


@pytest.mark.parametrize("token", [
    "",
    "blur",
    "Grayscale",
    "sepia()",
    "threshold",
    "threshold()",
    "threshold(101)",
    "threshold(-1)",
    "threshold(00)",
    "threshold(050)",
    "threshold(1.5)",
    "threshold(5",
    "threshold(5)x",
])
def test_parse_invalid(token):
    with pytest.raises(InvalidFilterError):
        parse_filter(token)


def test_scale_level_floors():
    assert [scale_level(p) for p in (0, 1, 33, 99, 100)] == [0, 2, 84, 252, 255]


def test_scale_level_range():
    with pytest.raises(InvalidFilterError):
        scale_level(101)
