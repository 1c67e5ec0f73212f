"""Exceptions raised by the filtering pipeline."""


class ImageTransformerError(Exception):
    """Base class for every error raised by this package."""


class InvalidImageError(ImageTransformerError):
    """The request body is not a usable 32-bit ARGB image."""


class InvalidFilterError(ImageTransformerError):
    """The filter token does not name a known filter or its level is out of range."""


class InternalInvariantError(ImageTransformerError):
    """A pipeline contract was broken. Always a defect, never bad user input."""
