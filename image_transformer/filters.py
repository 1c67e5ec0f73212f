"""
Filter registry: turns the filter segment of a request path into a
``FilterSpec``.

Only three families exist, so a ``FilterSpec`` is a closed variant rather than an
open plugin table::

    grayscale      -> FilterSpec(GRAYSCALE, 0)
    sepia          -> FilterSpec(SEPIA, 0)
    threshold(50)  -> FilterSpec(THRESHOLD, 127)
"""

import re
from dataclasses import dataclass
from enum import Enum

from image_transformer.errors import InvalidFilterError


class FilterKind(Enum):
    GRAYSCALE = "grayscale"
    SEPIA = "sepia"
    THRESHOLD = "threshold"


FILTER_NAMES = tuple(kind.value for kind in FilterKind)

_THRESHOLD_RE = re.compile(r"threshold\((0|[1-9][0-9]?|100)\)")


@dataclass(frozen=True)
class FilterSpec:
    kind: FilterKind
    level: int = 0  # byte scale, only meaningful for THRESHOLD


def scale_level(percent: int) -> int:
    """Map a 0–100 threshold percentage onto the 0–255 intensity scale (floored)."""
    if not 0 <= percent <= 100:
        raise InvalidFilterError(f"Threshold level out of range: {percent}")
    return 255 * percent // 100


def parse_filter(token: str) -> FilterSpec:
    """Validate *token* and resolve it to a ``FilterSpec``.

    Raises ``InvalidFilterError`` for unknown names and malformed or
    out-of-range threshold levels.
    """
    if token == FilterKind.GRAYSCALE.value:
        return FilterSpec(FilterKind.GRAYSCALE)
    if token == FilterKind.SEPIA.value:
        return FilterSpec(FilterKind.SEPIA)

    match = _THRESHOLD_RE.fullmatch(token)
    if match:
        return FilterSpec(FilterKind.THRESHOLD, scale_level(int(match.group(1))))

    raise InvalidFilterError(f"Unknown filter: {token!r}")
