"""Pillow-backed decoding and encoding of request/response bodies."""

import io

import numpy as np
from PIL import Image, UnidentifiedImageError

from image_transformer.errors import InvalidImageError
from image_transformer.image import ArgbImage, pack_rgba, unpack_argb

# Only images that decode straight to 8-bit-per-channel ARGB are accepted
ACCEPTED_MODE = "RGBA"
DEFAULT_FORMAT = "PNG"

# Formats Pillow writes back pixel for pixel; others (ICO resamples, PSD is
# read-only) are refused at decode time
ROUND_TRIP_FORMATS = {"PNG", "WEBP", "TIFF", "BMP", "TGA"}

# Keep re-encoded output lossless in formats that would otherwise compress
_SAVE_OPTIONS = {
    "WEBP": {"lossless": True},
}


def decode(data: bytes, max_dimension: int = 1000) -> ArgbImage:
    """Decode *data* into an ``ArgbImage``.

    Raises ``InvalidImageError`` when the bytes are not an image, the image is
    not 32-bit RGBA, is in a format that cannot be written back unchanged,
    or either side exceeds *max_dimension*.
    """
    if not data:
        raise InvalidImageError("Empty request body")

    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.mode != ACCEPTED_MODE:
                raise InvalidImageError(f"Unsupported pixel format: {img.mode}")
            if img.width > max_dimension or img.height > max_dimension:
                raise InvalidImageError(
                    f"Image is {img.width}x{img.height}, limit is {max_dimension}px"
                )
            fmt = img.format or DEFAULT_FORMAT
            if fmt not in ROUND_TRIP_FORMATS:
                raise InvalidImageError(f"Unsupported image format: {fmt}")
            img.load()
            rgba = np.asarray(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise InvalidImageError(f"Undecodable image: {exc}") from exc

    return ArgbImage(pack_rgba(rgba), fmt)


def encode(image: ArgbImage) -> bytes:
    buf = io.BytesIO()
    fmt = image.format.upper()
    Image.fromarray(unpack_argb(image.pixels)).save(buf, format=fmt, **_SAVE_OPTIONS.get(fmt, {}))
    return buf.getvalue()


def mimetype(image: ArgbImage) -> str:
    return Image.MIME.get(image.format.upper(), "application/octet-stream")
