# delve/world/rect.py
from typing import NamedTuple, Tuple


class Rect(NamedTuple):
    """An axis-aligned rectangle on the map.

    Room builders carve the tiles strictly inside the ``x1``/``y1`` edge, so a
    room's floor spans ``x1 + 1 .. x2`` and ``y1 + 1 .. y2``.
    """

    x1: int
    y1: int
    x2: int
    y2: int

    @classmethod
    def from_size(cls, x: int, y: int, w: int, h: int) -> "Rect":
        return cls(x, y, x + w, y + h)

    @property
    def center(self) -> Tuple[int, int]:
        """Center coordinates of the rectangle."""
        return (self.x1 + self.x2) // 2, (self.y1 + self.y2) // 2

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    def intersects(self, other: "Rect") -> bool:
        """Returns True if this rectangle touches or overlaps another one."""
        return (
            self.x1 <= other.x2
            and self.x2 >= other.x1
            and self.y1 <= other.y2
            and self.y2 >= other.y1
        )

    def contains(self, x: int, y: int) -> bool:
        return self.x1 <= x <= self.x2 and self.y1 <= y <= self.y2
