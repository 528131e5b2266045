# autozoner/highlight_manager.py
"""Hover highlighting while a window is being dragged"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .compositor import Compositor, ZoneHighlighter
from .geometry import absolute_zone_rect, resolve_work_area
from .scheduler import CONTINUE, STOP, Scheduler, TimerHandle
from .settings_manager import SettingsManager
from .zone import Zone
from .zone_detector import ZoneDetector

log = logging.getLogger(__name__)


@dataclass
class HighlightSession:
    """The zone currently shown highlighted during a drag"""
    monitor_index: int
    zone: Zone
    highlighter: ZoneHighlighter


class HighlightManager:
    """
    Polls the pointer during a drag and keeps one highlight overlay in
    sync with what zone detection would pick for it.

    Only one poll loop exists at a time; start_updating() replaces any
    running loop.
    """

    def __init__(self, settings: SettingsManager, compositor: Compositor,
                 scheduler: Scheduler, interval: Optional[float] = None):
        self.settings = settings
        self.compositor = compositor
        self.scheduler = scheduler
        self.detector = ZoneDetector(compositor)
        self._interval = interval

        self.highlighters: Dict[int, ZoneHighlighter] = {}
        self.current: Optional[HighlightSession] = None
        self._timer: Optional[TimerHandle] = None

        self._init_highlighters()

    @property
    def interval(self) -> float:
        if self._interval is not None:
            return self._interval
        return self.settings.get_timing()['highlight_interval_seconds']

    @property
    def is_updating(self) -> bool:
        return self._timer is not None and self._timer.active

    # ===== Overlay lifecycle =====

    def _init_highlighters(self) -> None:
        self._destroy_highlighters()
        for index in range(self.compositor.get_monitor_count()):
            self.highlighters[index] = self.compositor.create_highlighter(index)
        log.info("[HIGHLIGHT] Initialized %d highlighters", len(self.highlighters))

    def _destroy_highlighters(self) -> None:
        for highlighter in self.highlighters.values():
            highlighter.destroy()
        self.highlighters.clear()

    def reinit_highlighters(self) -> None:
        """Rebuild overlays after a monitor topology change"""
        self.stop_updating()
        self._init_highlighters()

    # ===== Poll loop =====

    def _evasion_held(self) -> bool:
        key = self.settings.get_snap_evasion_key()
        return bool(key) and self.compositor.is_modifier_held(key)

    def _hide_current(self) -> None:
        if self.current:
            self.current.highlighter.request_hide()
            self.current = None

    def _hide_all_active_highlighters(self) -> None:
        for highlighter in self.highlighters.values():
            if highlighter.is_showing_intent:
                highlighter.request_hide()

    def _update_highlight_on_drag(self) -> bool:
        if not self.settings.is_highlight_on_hover_enabled():
            self._hide_current()
            log.debug("[HIGHLIGHT] Highlighting disabled mid-drag; stopping loop")
            return STOP

        if self._evasion_held():
            self._hide_current()
            return CONTINUE

        pointer = self.compositor.get_pointer()
        monitor_index = self.compositor.get_monitor_index_at(pointer)

        if monitor_index < 0:
            self._hide_current()
            return CONTINUE

        hovered = self.detector.find_target_zone(self.settings.get_zones(), pointer, monitor_index)

        if hovered is None:
            self._hide_current()
            return CONTINUE

        if (self.current is not None and
                self.current.monitor_index == monitor_index and
                self.current.zone == hovered):
            return CONTINUE

        self._hide_current()
        highlighter = self.highlighters.get(monitor_index)
        if highlighter is None:
            return CONTINUE

        work_area = resolve_work_area(self.compositor, monitor_index)
        highlighter.show_at(absolute_zone_rect(work_area, hovered))
        self.current = HighlightSession(monitor_index, hovered, highlighter)
        return CONTINUE

    def start_updating(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        if self._evasion_held():
            log.info("[HIGHLIGHT] Snap evasion key held; not starting highlight updates")
            self._hide_all_active_highlighters()
            return

        if not self.settings.is_highlight_on_hover_enabled():
            log.info("[HIGHLIGHT] Highlighting disabled, not starting updates")
            self._hide_all_active_highlighters()
            return

        self._timer = self.scheduler.call_repeating(self.interval, self._update_highlight_on_drag)
        log.info("[HIGHLIGHT] Started highlight updates")

    def stop_updating(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._hide_all_active_highlighters()
        self.current = None
        log.debug("[HIGHLIGHT] Stopped highlight updates")

    def destroy(self) -> None:
        self.stop_updating()
        self._destroy_highlighters()
        log.info("[HIGHLIGHT] Destroyed")
