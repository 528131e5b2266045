# autozoner/settings_manager.py
"""Zone registry: zone snapshot, feature flags and change notifications"""

import logging
from typing import Callable, Dict, List

from .config_manager import ConfigManager
from .signals import Signal, SignalTracker, SubscriptionToken
from .zone import Zone, parse_zones

log = logging.getLogger(__name__)

ZONES_KEY = 'zones'
ENABLE_ZONING_KEY = 'enable_auto_zoning'
RESTORE_ON_UNTILE_KEY = 'restore_original_size_on_untile'
TILE_NEW_WINDOWS_KEY = 'tile_new_windows'
HIGHLIGHT_ON_HOVER_KEY = 'highlight_on_hover'
SNAP_EVASION_KEY = 'snap_evasion_key'
HOTKEYS_KEY = 'hotkeys'
TIMING_KEY = 'timing'
OVERLAY_KEY = 'overlay'

FEATURE_KEYS = (ENABLE_ZONING_KEY, RESTORE_ON_UNTILE_KEY, TILE_NEW_WINDOWS_KEY, HIGHLIGHT_ON_HOVER_KEY)
ALL_KEYS = FEATURE_KEYS + (ZONES_KEY, SNAP_EVASION_KEY, HOTKEYS_KEY, TIMING_KEY, OVERLAY_KEY)


class SettingsManager:
    """
    Read side of the configuration for the engine.

    The zone list is a snapshot that is replaced wholesale on reload, so
    readers always see a complete list.
    """

    def __init__(self, config_manager: ConfigManager):
        self.config = config_manager
        self._signals: Dict[str, Signal] = {key: Signal(f'changed::{key}') for key in ALL_KEYS}
        self._own_connections = SignalTracker()
        self._zones: List[Zone] = []

        self.config.load()
        self._load_zones()

        for key in FEATURE_KEYS:
            self._own_connections.connect(
                self._signals[key],
                lambda key=key: log.info("[CONFIG] '%s' changed to %s", key, self.config.get(key)))

    def _load_zones(self) -> None:
        self._zones = parse_zones(self.config.get(ZONES_KEY))
        log.info("[CONFIG] Loaded %d zones", len(self._zones))

    # ===== Queries =====

    def get_zones(self) -> List[Zone]:
        return self._zones

    def is_zoning_enabled(self) -> bool:
        return bool(self.config.get(ENABLE_ZONING_KEY))

    def is_restore_on_untile_enabled(self) -> bool:
        return bool(self.config.get(RESTORE_ON_UNTILE_KEY))

    def is_tile_new_windows_enabled(self) -> bool:
        return bool(self.config.get(TILE_NEW_WINDOWS_KEY))

    def is_highlight_on_hover_enabled(self) -> bool:
        return bool(self.config.get(HIGHLIGHT_ON_HOVER_KEY))

    def get_snap_evasion_key(self) -> str:
        return str(self.config.get(SNAP_EVASION_KEY) or '')

    def get_hotkeys(self) -> Dict[str, str]:
        return self.config.get_hotkeys()

    def get_timing(self) -> Dict[str, float]:
        return self.config.get_timing()

    def get_overlay_config(self) -> Dict:
        return self.config.get_overlay_config()

    # ===== Change notifications =====

    def connect_setting(self, key: str, callback: Callable[[], None]) -> SubscriptionToken:
        if key not in self._signals:
            raise KeyError(f"Unknown setting '{key}'")
        return self._signals[key].connect(callback)

    def disconnect(self, token: SubscriptionToken) -> None:
        """Release a subscription; stale or foreign tokens are ignored"""
        for signal in self._signals.values():
            if signal.is_connected(token):
                signal.disconnect(token)
                return
        log.debug("[CONFIG] disconnect() on unknown token %r ignored", token)

    def _notify(self, key: str) -> None:
        self._signals[key].emit()

    # ===== Mutation =====

    def set_boolean(self, key: str, value: bool) -> None:
        if key not in FEATURE_KEYS:
            raise KeyError(f"'{key}' is not a boolean feature flag")
        if bool(self.config.get(key)) == bool(value):
            return
        self.config.set(key, bool(value))
        self.config.save()
        self._notify(key)

    def set_zones(self, zones: List[Zone]) -> None:
        self.config.set(ZONES_KEY, [z.to_dict() for z in zones])
        self.config.save()
        self._load_zones()
        self._notify(ZONES_KEY)

    def reload(self) -> None:
        """Re-read the settings file and notify every key whose value changed"""
        before = {key: self.config.get(key) for key in ALL_KEYS}
        self.config.load()
        after = {key: self.config.get(key) for key in ALL_KEYS}

        if before[ZONES_KEY] != after[ZONES_KEY]:
            self._load_zones()

        for key in ALL_KEYS:
            if before[key] != after[key]:
                self._notify(key)

    def destroy(self) -> None:
        self._own_connections.disconnect_all()
        for signal in self._signals.values():
            if len(signal):
                log.debug("[CONFIG] %d subscriber(s) still attached to %s", len(signal), signal.name)
        log.info("[CONFIG] Settings manager destroyed")

