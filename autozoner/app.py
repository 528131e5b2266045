# autozoner/app.py
"""Top-level lifecycle: wires settings, highlighting and snapping together"""

import logging
from typing import List, Optional

from .compositor import Compositor
from .config_manager import ConfigManager
from .highlight_manager import HighlightManager
from .scheduler import Scheduler, TimerHandle
from .settings_manager import (
    ENABLE_ZONING_KEY,
    FEATURE_KEYS,
    HOTKEYS_KEY,
    ZONES_KEY,
    SettingsManager,
)
from .signals import SignalTracker, SubscriptionToken
from .window_manager import WindowManager

log = logging.getLogger(__name__)


class AutoZoner:
    """
    enable()/disable() mirror the life of the running app. The optional
    ``indicator`` (update_toggle_state) and ``hotkeys`` (start/stop/restart)
    are attached by the launcher.
    """

    def __init__(self, config_manager: ConfigManager, compositor: Compositor,
                 scheduler: Scheduler, indicator=None, hotkeys=None):
        self.config_manager = config_manager
        self.compositor = compositor
        self.scheduler = scheduler
        self.indicator = indicator
        self.hotkeys = hotkeys

        self.settings: Optional[SettingsManager] = None
        self.highlight_manager: Optional[HighlightManager] = None
        self.window_manager: Optional[WindowManager] = None

        self._compositor_connections = SignalTracker()
        self._setting_tokens: List[SubscriptionToken] = []
        self._initial_snap_timer: Optional[TimerHandle] = None
        self._monitors_snap_timer: Optional[TimerHandle] = None
        self._zones_snap_timer: Optional[TimerHandle] = None

    @property
    def enabled(self) -> bool:
        return self.settings is not None

    def enable(self) -> None:
        log.info("[APP] Enabling...")
        self.settings = SettingsManager(self.config_manager)
        self.highlight_manager = HighlightManager(self.settings, self.compositor, self.scheduler)
        self.window_manager = WindowManager(self.settings, self.compositor, self.scheduler,
                                            self.highlight_manager)
        self.window_manager.connect_signals()

        timing = self.settings.get_timing()
        if self.settings.is_zoning_enabled():
            self._initial_snap_timer = self.scheduler.call_later(
                timing['initial_snap_delay_seconds'], self._perform_delayed_snap, 'initial enable')

        self._watch(ENABLE_ZONING_KEY, self._on_zoning_changed)
        self._watch(ZONES_KEY, self._on_zones_changed)
        self._watch(HOTKEYS_KEY, self._on_hotkeys_changed)
        self._compositor_connections.connect(self.compositor.monitors_changed, self._on_monitors_changed)

        if self.hotkeys:
            self.hotkeys.start()
        log.info("[APP] Enabled")

    def disable(self) -> None:
        if not self.enabled:
            return
        log.info("[APP] Disabling...")

        for timer in (self._initial_snap_timer, self._monitors_snap_timer, self._zones_snap_timer):
            if timer:
                timer.cancel()
        self._initial_snap_timer = self._monitors_snap_timer = self._zones_snap_timer = None

        self._compositor_connections.disconnect_all()
        for token in self._setting_tokens:
            self.settings.disconnect(token)
        self._setting_tokens = []

        if self.hotkeys:
            self.hotkeys.stop()

        self.window_manager.cleanup_window_properties()
        self.window_manager.destroy()
        self.window_manager = None

        self.highlight_manager.destroy()
        self.highlight_manager = None

        self.settings.destroy()
        self.settings = None
        log.info("[APP] Disabled")

    def _watch(self, key: str, callback) -> None:
        self._setting_tokens.append(self.settings.connect_setting(key, callback))

    # ===== Reactions =====

    def _perform_delayed_snap(self, reason: str) -> None:
        if self.settings and self.settings.is_zoning_enabled() and self.window_manager:
            log.info("[APP] Re-snapping windows due to: %s", reason)
            self.window_manager.snap_all_windows_to_zones()

    def _restart_timer(self, current: Optional[TimerHandle], delay: float, reason: str) -> TimerHandle:
        if current:
            current.cancel()
        return self.scheduler.call_later(delay, self._perform_delayed_snap, reason)

    def _on_zoning_changed(self) -> None:
        self.window_manager.connect_signals()
        if self.settings.is_zoning_enabled():
            self._perform_delayed_snap('zoning enabled toggle')
        else:
            self.highlight_manager.stop_updating()
        if self.indicator:
            self.indicator.update_toggle_state()

    def _on_zones_changed(self) -> None:
        delay = self.settings.get_timing()['initial_snap_delay_seconds']
        self._zones_snap_timer = self._restart_timer(self._zones_snap_timer, delay, 'zones changed')

    def _on_hotkeys_changed(self) -> None:
        log.info("[APP] Hotkeys changed; rebinding")
        if self.hotkeys:
            self.hotkeys.restart()

    def _on_monitors_changed(self) -> None:
        log.info("[APP] Monitors changed")
        # overlays must be rebuilt before the next poll tick can touch them
        self.highlight_manager.reinit_highlighters()
        delay = self.settings.get_timing()['monitors_changed_snap_delay_seconds']
        self._monitors_snap_timer = self._restart_timer(self._monitors_snap_timer, delay, 'monitors changed')

    # ===== Actions for the tray and hotkeys =====

    def set_feature(self, key: str, value: bool) -> None:
        if key not in FEATURE_KEYS:
            raise KeyError(key)
        if self.settings:
            self.settings.set_boolean(key, value)

    def toggle_zoning(self) -> None:
        if self.settings:
            self.set_feature(ENABLE_ZONING_KEY, not self.settings.is_zoning_enabled())

    def reload_config(self) -> None:
        if not self.settings:
            return
        log.info("[APP] Reloading configuration")
        self.settings.reload()

    def cycle_windows_in_current_zone(self) -> None:
        if self.window_manager:
            self.window_manager.cycle_windows_in_current_zone()

    def cycle_windows_in_current_zone_backward(self) -> None:
        if self.window_manager:
            self.window_manager.cycle_windows_in_current_zone_backward()
