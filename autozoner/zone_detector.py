# autozoner/zone_detector.py
"""Point-in-zone hit testing"""

import logging
from typing import Optional, Sequence

from .geometry import Point, Rect, absolute_zone_rect, resolve_work_area
from .zone import Zone

log = logging.getLogger(__name__)


def find_zone_at(zones: Sequence[Zone], point: Point, monitor_index: int,
                 work_area: Rect) -> Optional[Zone]:
    """
    Return the first zone on ``monitor_index`` whose absolute rectangle
    contains ``point`` (edges inclusive), or None.

    Overlaps resolve by order: the earliest matching zone wins.
    """
    for zone in zones:
        if zone.monitor_index != monitor_index:
            continue
        if absolute_zone_rect(work_area, zone).contains(point):
            return zone
    return None


class ZoneDetector:
    """Binds hit testing to a monitor layout (anything that answers
    get_monitor_count / get_primary_monitor / get_work_area)."""

    def __init__(self, layout):
        self.layout = layout

    def find_target_zone(self, zones: Sequence[Zone], point: Point,
                         monitor_index: int) -> Optional[Zone]:
        work_area = resolve_work_area(self.layout, monitor_index)
        zone = find_zone_at(zones, point, monitor_index, work_area)
        log.debug("[DETECT] mon=%s point=(%s, %s) work_area=%s -> %s",
                  monitor_index, point.x, point.y, work_area.as_tuple(),
                  zone.zone_id if zone else None)
        return zone
