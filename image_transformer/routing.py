"""
Two-stage request routing.

``resolve`` never raises: it returns a ``RouteMatch`` when the path fits
``/process/<filter>/<x>,<y>,<w>,<h>`` and the method is POST, and a
``RouteMismatch`` otherwise. The filter segment is only checked for shape
here; whether it names a real filter is decided later, so an unknown
filter is a bad request rather than a missing route.
"""

import re
from dataclasses import dataclass
from typing import Union

from image_transformer.clipping import Rect

ALLOWED_METHOD = "POST"

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

_PATH_RE = re.compile(
    r"/process/(?P<filter>[^/]+)/"
    r"(?P<x>-?[0-9]+),(?P<y>-?[0-9]+),(?P<w>-?[0-9]+),(?P<h>-?[0-9]+)/?"
)


@dataclass(frozen=True)
class RouteMatch:
    filter_token: str
    rect: Rect


@dataclass(frozen=True)
class RouteMismatch:
    status: int  # 404 unknown path, 405 known path with the wrong method


RouteOutcome = Union[RouteMatch, RouteMismatch]

NOT_FOUND = RouteMismatch(404)
METHOD_NOT_ALLOWED = RouteMismatch(405)


def _coordinate(text: str):
    value = int(text)
    if INT32_MIN <= value <= INT32_MAX:
        return value
    return None


def parse_path(path: str):
    """Return ``(filter_token, Rect)`` for a path in the service grammar, else ``None``."""
    match = _PATH_RE.fullmatch(path)
    if match is None:
        return None

    coords = [_coordinate(match.group(name)) for name in ("x", "y", "w", "h")]
    if any(value is None for value in coords):
        return None
    return match.group("filter"), Rect(*coords)


def resolve(method: str, path: str) -> RouteOutcome:
    parsed = parse_path(path)
    if parsed is None:
        return NOT_FOUND
    if method.upper() != ALLOWED_METHOD:
        return METHOD_NOT_ALLOWED

    token, rect = parsed
    return RouteMatch(token, rect)
