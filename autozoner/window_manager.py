# autozoner/window_manager.py
"""Drag-to-zone snapping, new-window tiling and restore-on-untile"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .compositor import Compositor, GrabOp, WindowHandle, WindowType
from .geometry import Rect, absolute_zone_rect, resolve_work_area
from .highlight_manager import HighlightManager
from .scheduler import Scheduler, TimerHandle
from .settings_manager import SettingsManager
from .signals import SignalTracker
from .zone import Zone
from .zone_detector import ZoneDetector

log = logging.getLogger(__name__)


@dataclass
class TilingState:
    """What the engine remembers about one window"""
    is_zoned: bool = False
    original_rect: Optional[Rect] = None
    zone_id: Optional[str] = None


class WindowManager:
    """
    Owns the per-window tiling state and is the only component that moves
    or resizes windows.

    Each drag-end or new-window attempt issues at most one move/resize.
    """

    def __init__(self, settings: SettingsManager, compositor: Compositor,
                 scheduler: Scheduler, highlight_manager: Optional[HighlightManager] = None):
        self.settings = settings
        self.compositor = compositor
        self.scheduler = scheduler
        self.highlight_manager = highlight_manager
        self.detector = ZoneDetector(compositor)

        self._connections = SignalTracker()
        self._states: Dict[WindowHandle, TilingState] = {}
        self._pending_settles: Dict[WindowHandle, TimerHandle] = {}

        # zone_id -> windows in snap order, and the cycle cursor per zone
        self._zone_members: Dict[str, List[WindowHandle]] = {}
        self._cycle_index_by_zone: Dict[str, int] = {}

        log.info("[WM] Initialized")

    # ===== Signal wiring =====

    def connect_signals(self) -> None:
        """(Re)subscribe according to the zoning-enabled flag"""
        self._connections.disconnect_all()

        # destruction is always tracked so state never outlives its window
        self._connections.connect(self.compositor.window_destroyed, self._on_window_destroyed)

        if not self.settings.is_zoning_enabled():
            self._cancel_pending_settles()
            log.info("[WM] Zoning disabled; not listening for drags or new windows")
            return

        self._connections.connect(self.compositor.drag_begin, self._on_grab_op_begin)
        self._connections.connect(self.compositor.drag_end, self._on_grab_op_end)
        self._connections.connect(self.compositor.window_created, self._on_window_created)
        log.info("[WM] Signals connected")

    # ===== State helpers =====

    def get_state(self, window: WindowHandle) -> Optional[TilingState]:
        return self._states.get(window)

    def tracked_windows(self) -> List[WindowHandle]:
        return list(self._states)

    def _state_for(self, window: WindowHandle) -> TilingState:
        state = self._states.get(window)
        if state is None:
            state = self._states[window] = TilingState()
        return state

    def _is_tileable(self, window: WindowHandle) -> bool:
        return self.compositor.get_window_type(window) == WindowType.NORMAL

    def _title(self, window: WindowHandle) -> str:
        return self.compositor.get_window_title(window) or str(window)

    def _join_zone(self, window: WindowHandle, zone: Zone) -> None:
        zone_id = zone.zone_id
        state = self._state_for(window)
        if state.zone_id == zone_id and window in self._zone_members.get(zone_id, []):
            return
        self._leave_zone(window)
        self._zone_members.setdefault(zone_id, []).append(window)
        self._cycle_index_by_zone[zone_id] = len(self._zone_members[zone_id]) - 1
        state.zone_id = zone_id

    def _leave_zone(self, window: WindowHandle) -> None:
        state = self._states.get(window)
        zone_id = state.zone_id if state else None
        if zone_id is None:
            return
        members = self._zone_members.get(zone_id, [])
        if window in members:
            members.remove(window)
        if not members:
            self._zone_members.pop(zone_id, None)
            self._cycle_index_by_zone.pop(zone_id, None)
        state.zone_id = None

    def _end_zoning_episode(self, window: WindowHandle) -> None:
        state = self._states.get(window)
        if state is None:
            return
        self._leave_zone(window)
        state.is_zoned = False

    # ===== Snapping =====

    def _snap_window_to_zone(self, window: WindowHandle, zone: Zone, monitor_index: int) -> bool:
        """
        Move ``window`` onto ``zone``. Returns True when a move/resize was
        issued, False when the window already sat exactly on the zone.
        """
        state = self._state_for(window)

        if self.compositor.is_maximized(window):
            self.compositor.unmaximize(window)

        work_area = resolve_work_area(self.compositor, monitor_index)
        target = absolute_zone_rect(work_area, zone)
        current = self.compositor.get_frame_rect(window)

        if current == target:
            state.is_zoned = True
            self._join_zone(window, zone)
            log.debug("[SNAP] '%s' already in zone '%s'", self._title(window), zone.zone_id)
            return False

        if self.settings.is_restore_on_untile_enabled() and state.original_rect is None:
            state.original_rect = current
            log.info("[SNAP] Saved original rect %s for '%s'", current.as_tuple(), self._title(window))

        self.compositor.move_resize(window, target)
        state.is_zoned = True
        self._join_zone(window, zone)
        log.info("[SNAP] Snapped '%s' into zone '%s' at %s",
                 self._title(window), zone.zone_id, target.as_tuple())
        return True

    def _restore_or_release(self, window: WindowHandle) -> None:
        """Window left every zone: put it back if we can, then forget the episode"""
        state = self._states[window]
        if self.settings.is_restore_on_untile_enabled() and state.original_rect is not None:
            original = state.original_rect
            self.compositor.move_resize(window, original)
            log.info("[SNAP] Restored '%s' to %s", self._title(window), original.as_tuple())
        state.original_rect = None
        self._end_zoning_episode(window)

    # ===== Drag lifecycle =====

    def _on_grab_op_begin(self, window: WindowHandle, op: GrabOp) -> None:
        if op != GrabOp.MOVING:
            return
        if window is None or not self._is_tileable(window) or self.compositor.is_fullscreen(window):
            return

        if self.highlight_manager:
            self.highlight_manager.start_updating()

        state = self._state_for(window)
        if (self.settings.is_restore_on_untile_enabled() and
                state.original_rect is None and not state.is_zoned):
            state.original_rect = self.compositor.get_frame_rect(window)
            log.info("[DRAG] Stored original rect %s for '%s'",
                     state.original_rect.as_tuple(), self._title(window))

    def _on_grab_op_end(self, window: WindowHandle, op: GrabOp) -> None:
        if self.highlight_manager:
            self.highlight_manager.stop_updating()

        if not self.settings.is_zoning_enabled() or window is None:
            return

        if not self._is_tileable(window) or self.compositor.is_fullscreen(window):
            self._end_zoning_episode(window)
            return

        state = self._state_for(window)

        evasion_key = self.settings.get_snap_evasion_key()
        if evasion_key and self.compositor.is_modifier_held(evasion_key):
            log.info("[DRAG] Snap evasion key held; leaving '%s' where it was dropped", self._title(window))
            state.original_rect = None
            self._end_zoning_episode(window)
            return

        pointer = self.compositor.get_pointer()
        monitor_index = self.compositor.get_monitor_index_at(pointer)
        if monitor_index < 0:
            monitor_index = self.compositor.get_window_monitor(window)

        target_zone = self.detector.find_target_zone(self.settings.get_zones(), pointer, monitor_index)

        if target_zone is not None:
            self._snap_window_to_zone(window, target_zone, monitor_index)
        elif state.is_zoned:
            self._restore_or_release(window)
        elif state.original_rect is not None:
            # never entered a zone this time; the captured rect is stale
            state.original_rect = None

    # ===== New windows =====

    def _on_window_created(self, window: WindowHandle) -> None:
        if not (self.settings.is_zoning_enabled() and self.settings.is_tile_new_windows_enabled()):
            return
        if not self._is_tileable(window) or self.compositor.is_skip_taskbar(window):
            return

        previous = self._pending_settles.pop(window, None)
        if previous:
            previous.cancel()

        delay = self.settings.get_timing()['settle_delay_seconds']
        self._pending_settles[window] = self.scheduler.call_later(delay, self._tile_new_window, window)

    def _tile_new_window(self, window: WindowHandle) -> None:
        self._pending_settles.pop(window, None)

        if not self.compositor.window_exists(window):
            log.debug("[NEW] Window %s vanished before it settled", window)
            return
        if not self.settings.is_zoning_enabled():
            return
        self._try_tile_by_center(window)

    def _try_tile_by_center(self, window: WindowHandle) -> bool:
        if self.compositor.is_fullscreen(window) or self.compositor.is_maximized(window):
            return False

        rect = self.compositor.get_frame_rect(window)
        if rect.width == 0 or rect.height == 0:
            return False

        monitor_index = self.compositor.get_window_monitor(window)
        if monitor_index < 0:
            return False

        zone = self.detector.find_target_zone(self.settings.get_zones(), rect.center, monitor_index)
        if zone is None:
            return False

        log.info("[NEW] Tiling '%s' into zone '%s'", self._title(window), zone.zone_id)
        return self._snap_window_to_zone(window, zone, monitor_index)

    def _cancel_pending_settles(self) -> None:
        for handle in self._pending_settles.values():
            handle.cancel()
        self._pending_settles.clear()

    # ===== Window destruction =====

    def _on_window_destroyed(self, window: WindowHandle) -> None:
        pending = self._pending_settles.pop(window, None)
        if pending:
            pending.cancel()
        if window in self._states:
            self._leave_zone(window)
            del self._states[window]
            log.debug("[WM] Dropped state for destroyed window %s", window)

    # ===== Bulk re-snap =====

    def snap_all_windows_to_zones(self) -> int:
        """
        Re-place zoned windows at their zone's current rectangle and, when
        new-window tiling is on, tile the untracked ones by their center.
        Returns how many move/resize commands were issued.
        """
        if not self.settings.is_zoning_enabled():
            return 0

        zones = self.settings.get_zones()
        moved = 0

        for window in self.compositor.list_windows():
            if not self.compositor.window_exists(window) or not self._is_tileable(window):
                continue
            if self.compositor.is_fullscreen(window):
                continue

            state = self._states.get(window)
            if state is not None and state.is_zoned:
                zone = next((z for z in zones if z.zone_id == state.zone_id), None)
                if zone is None:
                    log.info("[SNAP] Zone '%s' is gone; releasing '%s'", state.zone_id, self._title(window))
                    state.original_rect = None
                    self._end_zoning_episode(window)
                    continue
                if self._snap_window_to_zone(window, zone, zone.monitor_index):
                    moved += 1
            elif self.settings.is_tile_new_windows_enabled() and not self.compositor.is_skip_taskbar(window):
                if self._try_tile_by_center(window):
                    moved += 1

        log.info("[SNAP] Re-snap pass issued %d move(s)", moved)
        return moved

    # ===== Zone cycling =====

    def cycle_windows_in_current_zone(self, step: int = 1) -> Optional[WindowHandle]:
        """Activate the next window sharing the focused window's zone"""
        focus = self.compositor.get_focus_window()
        state = self._states.get(focus) if focus is not None else None
        if state is None or state.zone_id is None:
            log.info("[CYCLE] No zoned window focused; aborting")
            return None

        zone_id = state.zone_id
        members = [w for w in self._zone_members.get(zone_id, []) if self.compositor.window_exists(w)]
        self._zone_members[zone_id] = members
        if len(members) < 2:
            log.info("[CYCLE] Zone '%s' has %d window(s); skipping", zone_id, len(members))
            return None

        current = members.index(focus) if focus in members else self._cycle_index_by_zone.get(zone_id, 0)
        index = (current + step) % len(members)
        self._cycle_index_by_zone[zone_id] = index

        next_window = members[index]
        log.info("[CYCLE] Activating [%d] '%s' in zone '%s'", index, self._title(next_window), zone_id)
        self.compositor.activate(next_window)
        return next_window

    def cycle_windows_in_current_zone_backward(self) -> Optional[WindowHandle]:
        return self.cycle_windows_in_current_zone(step=-1)

    # ===== Teardown =====

    def cleanup_window_properties(self) -> None:
        """Forget every window's tiling state"""
        try:
            live = self.compositor.list_windows()
        except Exception as e:
            log.warning("[WM] Could not list windows during cleanup: %s", e)
            live = []
        for window in live:
            self._states.pop(window, None)

        if self._states:
            log.debug("[WM] Sweeping %d state record(s) for windows no longer listed", len(self._states))
        self._states.clear()
        self._zone_members.clear()
        self._cycle_index_by_zone.clear()
        self._cancel_pending_settles()

    def destroy(self) -> None:
        self._connections.disconnect_all()
        self._cancel_pending_settles()
        log.info("[WM] Destroyed")
