"""Rectangle intersection with the image bounds."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return max(self.width, 0) * max(self.height, 0)


def clip(rect: Rect, width: int, height: int) -> Optional[Rect]:
    """Intersect *rect* with ``[0, width) x [0, height)``.

    Returns ``None`` when the overlap has no area; a requested rectangle with
    non-positive width or height never overlaps anything.
    """
    if rect.width <= 0 or rect.height <= 0:
        return None

    left = max(rect.x, 0)
    top = max(rect.y, 0)
    right = min(rect.right, width)
    bottom = min(rect.bottom, height)

    if right <= left or bottom <= top:
        return None
    return Rect(left, top, right - left, bottom - top)
