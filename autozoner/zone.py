# autozoner/zone.py
"""Zone records as read from the settings file"""

import json
import logging
from dataclasses import dataclass, asdict
from typing import Any, List, Optional

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Zone:
    """A named rectangle, relative to one monitor's work area.

    Names are not required to be unique; detection breaks ties by
    definition order.
    """

    name: str
    monitor_index: int
    x: int
    y: int
    width: int
    height: int

    @property
    def zone_id(self) -> str:
        """Stable identity used for membership and highlight comparison"""
        if self.name:
            return self.name
        return json.dumps(asdict(self), sort_keys=True)

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'monitorIndex': self.monitor_index,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
        }


def _parse_zone(entry: Any) -> Optional[Zone]:
    if not isinstance(entry, dict):
        raise ValueError(f"zone entry must be a mapping, got {type(entry).__name__}")

    monitor_index = entry.get('monitorIndex', entry.get('monitor_index', 0))
    return Zone(
        name=str(entry.get('name', '') or ''),
        monitor_index=int(monitor_index),
        x=int(entry['x']),
        y=int(entry['y']),
        width=int(entry['width']),
        height=int(entry['height']),
    )


def parse_zones(raw: Any) -> List[Zone]:
    """
    Turn raw config data into an ordered zone list.

    Never raises: a non-list becomes an empty list, and entries that
    cannot be parsed are logged and skipped.
    """
    if raw is None:
        return []
    if not isinstance(raw, list):
        log.warning("[CONFIG] 'zones' is not a list (%s); treating as empty", type(raw).__name__)
        return []

    zones = []
    for index, entry in enumerate(raw):
        try:
            zones.append(_parse_zone(entry))
        except (KeyError, TypeError, ValueError) as e:
            log.warning("[CONFIG] Skipping malformed zone #%d: %s", index, e)
    return zones
