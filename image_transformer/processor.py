"""Apply a filter to a flat buffer of packed ARGB pixels."""

import numpy as np

from image_transformer import color_table
from image_transformer.color_table import ALPHA_MASK, RGB_MASK
from image_transformer.errors import InternalInvariantError
from image_transformer.filters import FilterKind, FilterSpec

WHITE = np.uint32(0x00FFFFFF)
BLACK = np.uint32(0x00000000)


def _transform(rgb: np.ndarray, spec: FilterSpec) -> np.ndarray:
    if spec.kind is FilterKind.GRAYSCALE:
        return color_table.grayscale_table()[rgb]
    if spec.kind is FilterKind.SEPIA:
        return color_table.sepia_table()[rgb]
    if spec.kind is FilterKind.THRESHOLD:
        # Blue byte of the average table is the pixel intensity
        intensity = color_table.grayscale_table()[rgb] & 0xFF
        return np.where(intensity < spec.level, BLACK, WHITE)
    raise InternalInvariantError(f"No transform for filter kind {spec.kind!r}")


def apply_filter(pixels: np.ndarray, width: int, height: int, spec: FilterSpec) -> np.ndarray:
    """Return a new ``uint32`` array with *spec* applied to every pixel.

    ``pixels`` must hold exactly ``width * height`` packed ARGB values; the
    alpha byte of each input pixel is copied to the output unchanged.
    """
    pixels = np.asarray(pixels, dtype=np.uint32).ravel()
    if pixels.size != width * height:
        raise InternalInvariantError(
            f"Pixel buffer holds {pixels.size} values, expected {width}x{height}"
        )

    rgb = pixels & np.uint32(RGB_MASK)
    alpha = pixels & np.uint32(ALPHA_MASK)
    result = (_transform(rgb, spec) & np.uint32(RGB_MASK)) | alpha
    return result.astype(np.uint32, copy=False)
