"""
Precomputed colour lookup tables.

Every possible 24-bit RGB value is mapped to its grayscale (average) and
sepia result once, at import time, so that filtering a region is a single
numpy gather instead of per-pixel floating point math. The tables are
flagged read-only and shared by all requests without locking.
"""

import logging
import time
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

TABLE_SIZE = 1 << 24
RGB_MASK = 0x00FFFFFF
ALPHA_MASK = 0xFF000000

# (red, green, blue) weights for each output channel
SEPIA_WEIGHTS = (
    (0.393, 0.769, 0.189),
    (0.349, 0.686, 0.168),
    (0.272, 0.534, 0.131),
)


@dataclass(frozen=True)
class ColorTables:
    """Packed RGB outputs indexed by ``r << 16 | g << 8 | b``. Alpha bytes are 0."""

    grayscale: np.ndarray
    sepia: np.ndarray


def _pack_rgb(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    return (r.astype(np.uint32) << 16) | (g.astype(np.uint32) << 8) | b.astype(np.uint32)


def build_tables() -> ColorTables:
    """Compute both tables, one red plane (65,536 entries) at a time."""
    started = time.perf_counter()
    gray = np.empty(TABLE_SIZE, dtype=np.uint32)
    sepia = np.empty(TABLE_SIZE, dtype=np.uint32)

    green, blue = np.meshgrid(np.arange(256), np.arange(256), indexing="ij")
    green = green.ravel()
    blue = blue.ravel()
    green_f = green.astype(np.float64)
    blue_f = blue.astype(np.float64)
    plane = green.size

    for red in range(256):
        start = red << 16
        avg = ((red + green + blue) // 3).astype(np.uint32)
        gray[start:start + plane] = (avg << 16) | (avg << 8) | avg

        # Weighted sums are truncated toward zero, then clamped
        channels = [
            np.minimum((red * wr + green_f * wg + blue_f * wb).astype(np.int64), 255)
            for wr, wg, wb in SEPIA_WEIGHTS
        ]
        sepia[start:start + plane] = _pack_rgb(*channels)

    gray.flags.writeable = False
    sepia.flags.writeable = False
    logger.debug("Colour tables built in %.2fs", time.perf_counter() - started)
    return ColorTables(grayscale=gray, sepia=sepia)


TABLES = build_tables()


def grayscale_table() -> np.ndarray:
    return TABLES.grayscale


def sepia_table() -> np.ndarray:
    return TABLES.sepia
