# autozoner/geometry.py
"""Rectangles, points and the coordinate conversions between zone-local,
work-area-relative and global screen space."""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in global screen coordinates"""

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
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, point: Point) -> bool:
        """Closed-interval test: points on any edge count as inside"""
        return (self.x <= point.x <= self.right and
                self.y <= point.y <= self.bottom)

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_ltrb(cls, left: int, top: int, right: int, bottom: int) -> 'Rect':
        """Build from the (L, T, R, B) tuples Win32 hands back"""
        return cls(left, top, right - left, bottom - top)


def absolute_zone_rect(work_area: Rect, zone) -> Rect:
    """Translate a monitor-relative zone into global screen coordinates"""
    return Rect(work_area.x + zone.x, work_area.y + zone.y, zone.width, zone.height)


def resolve_work_area(layout, monitor_index: int) -> Rect:
    """
    Work area for ``monitor_index``, falling back to the primary monitor
    when the index is out of range (-1 included). The fallback is policy,
    not an error.
    """
    if monitor_index is None or monitor_index < 0 or monitor_index >= layout.get_monitor_count():
        return layout.get_work_area(layout.get_primary_monitor())
    return layout.get_work_area(monitor_index)
