# autozoner/config_manager.py
"""Centralized configuration file handling - defaults live only here"""

import copy
import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

log = logging.getLogger(__name__)

SETTINGS_FILENAME = 'settings.yaml'
DEFAULT_ZONES_FILENAME = 'default_zones.json'


class ConfigManager:
    """Loads, merges and saves the settings file"""

    # Default configuration values (only place defaults should exist)
    DEFAULTS = {
        'enable_auto_zoning': True,
        'restore_original_size_on_untile': True,
        'tile_new_windows': True,
        'highlight_on_hover': True,
        'snap_evasion_key': 'ctrl',
        'hotkeys': {
            'cycle_zone_windows': 'ctrl+alt+]',
            'cycle_zone_windows_backward': 'ctrl+alt+[',
            'toggle_auto_zoning': 'ctrl+alt+z',
            'reload_config': 'ctrl+alt+shift+r',
        },
        'timing': {
            'settle_delay_seconds': 0.3,
            'highlight_interval_seconds': 0.03,
            'initial_snap_delay_seconds': 0.3,
            'monitors_changed_snap_delay_seconds': 0.75,
            'monitor_poll_interval_seconds': 2.0,
        },
        'overlay': {
            'color': '#3584e4',
            'alpha': 110,
        },
        'zones': [],
    }

    def __init__(self, config_dir: str = 'config'):
        self.config_dir = config_dir
        self.settings_path = os.path.join(config_dir, SETTINGS_FILENAME)
        self.data: Dict[str, Any] = copy.deepcopy(self.DEFAULTS)

    def load(self) -> Dict[str, Any]:
        """(Re)load the settings file on top of the defaults"""
        raw = self._read_settings_file()
        merged = copy.deepcopy(self.DEFAULTS)

        for key, value in raw.items():
            if isinstance(merged.get(key), dict) and isinstance(value, dict):
                merged[key].update(value)
            else:
                merged[key] = value

        if 'zones' not in raw:
            imported = self._import_default_zones()
            if imported is not None:
                merged['zones'] = imported

        self.data = merged
        return self.data

    def _read_settings_file(self) -> Dict[str, Any]:
        if not os.path.exists(self.settings_path):
            log.info("[CONFIG] %s not found, using defaults", self.settings_path)
            return {}

        with open(self.settings_path, 'r', encoding='utf-8') as f:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {self.settings_path}: {e}") from e

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ValueError(f"{self.settings_path} must contain a mapping at top level")
        return raw

    def _import_default_zones(self) -> Optional[list]:
        """Seed zones from default_zones.json when the settings file has none"""
        path = os.path.join(self.config_dir, DEFAULT_ZONES_FILENAME)
        if not os.path.exists(path):
            return None

        log.info("[CONFIG] Attempting to load zones from %s", path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                arr = json.load(f)
        except (OSError, ValueError) as e:
            log.warning("[CONFIG] Error loading default zones: %s", e)
            return None

        if not isinstance(arr, list):
            log.warning("[CONFIG] %s does not contain a JSON array", DEFAULT_ZONES_FILENAME)
            return None

        log.info("[CONFIG] Default zones imported from file (%d)", len(arr))
        return arr

    def save(self) -> None:
        """Write the current values back to settings.yaml"""
        os.makedirs(self.config_dir, exist_ok=True)
        with open(self.settings_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.data, f, sort_keys=False, default_flow_style=False)
        log.info("[CONFIG] Saved %s", self.settings_path)

    def get(self, key: str) -> Any:
        return self.data.get(key, self.DEFAULTS.get(key))

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def get_hotkeys(self) -> Dict[str, str]:
        """Get accelerator strings, filling gaps from defaults"""
        result = dict(self.DEFAULTS['hotkeys'])
        result.update(self.data.get('hotkeys') or {})
        return result

    def get_timing(self) -> Dict[str, float]:
        result = dict(self.DEFAULTS['timing'])
        result.update(self.data.get('timing') or {})
        return {k: float(v) for k, v in result.items()}

    def get_overlay_config(self) -> Dict[str, Any]:
        result = dict(self.DEFAULTS['overlay'])
        result.update(self.data.get('overlay') or {})
        return result
