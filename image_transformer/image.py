"""
Immutable packed-ARGB image buffer.

Pixels are stored as a read-only ``(height, width)`` ``uint32`` array, each
value laid out as ``A << 24 | R << 16 | G << 8 | B``.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from image_transformer.clipping import Rect
from image_transformer.errors import InternalInvariantError


def pack_rgba(rgba: np.ndarray) -> np.ndarray:
    """``(H, W, 4)`` uint8 RGBA -> ``(H, W)`` uint32 ARGB."""
    channels = rgba.astype(np.uint32)
    return (
        (channels[..., 3] << 24)
        | (channels[..., 0] << 16)
        | (channels[..., 1] << 8)
        | channels[..., 2]
    )


def unpack_argb(argb: np.ndarray) -> np.ndarray:
    """``(H, W)`` uint32 ARGB -> ``(H, W, 4)`` uint8 RGBA."""
    return np.stack(
        [(argb >> 16) & 0xFF, (argb >> 8) & 0xFF, argb & 0xFF, (argb >> 24) & 0xFF],
        axis=-1,
    ).astype(np.uint8)


@dataclass(frozen=True)
class ArgbImage:
    pixels: np.ndarray  # Shape (H, W), dtype uint32, read-only.
    format: str = "PNG"  # Encoded format the image arrived in.

    def __post_init__(self):
        if self.pixels.ndim != 2 or self.pixels.dtype != np.uint32:
            raise InternalInvariantError(
                f"Expected a 2-D uint32 buffer, got {self.pixels.ndim}-D {self.pixels.dtype}"
            )
        if self.pixels.flags.writeable:
            frozen = self.pixels.copy()
            frozen.flags.writeable = False
            object.__setattr__(self, "pixels", frozen)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @classmethod
    def from_flat(cls, pixels: np.ndarray, width: int, height: int, fmt: str = "PNG") -> ArgbImage:
        if pixels.size != width * height:
            raise InternalInvariantError(
                f"Cannot shape {pixels.size} pixels into {width}x{height}"
            )
        return cls(pixels.reshape(height, width).astype(np.uint32, copy=False), fmt)

    def region(self, rect: Rect) -> np.ndarray:
        """Flat copy of the pixels inside *rect*, row by row.

        *rect* must already be clipped to the image bounds.
        """
        if rect.x < 0 or rect.y < 0 or rect.right > self.width or rect.bottom > self.height:
            raise InternalInvariantError(f"{rect} lies outside {self.width}x{self.height}")
        return self.pixels[rect.y:rect.bottom, rect.x:rect.right].ravel()
