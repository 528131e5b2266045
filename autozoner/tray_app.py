# autozoner/tray_app.py
"""System tray indicator with the feature toggles"""

import logging
import os

import pystray
from PIL import Image, ImageDraw

from .settings_manager import (
    ENABLE_ZONING_KEY,
    HIGHLIGHT_ON_HOVER_KEY,
    RESTORE_ON_UNTILE_KEY,
    TILE_NEW_WINDOWS_KEY,
)

log = logging.getLogger(__name__)

TOGGLES = (
    (ENABLE_ZONING_KEY, "Enable Auto Zoning"),
    (TILE_NEW_WINDOWS_KEY, "Tile New Windows"),
    (RESTORE_ON_UNTILE_KEY, "Restore Size on Untile"),
    (HIGHLIGHT_ON_HOVER_KEY, "Highlight Zone on Hover"),
)


class TrayApp:
    """
    Menu callbacks run on pystray's thread; every change is handed to the
    engine loop through ``dispatch``.
    """

    def __init__(self, app, dispatch, on_quit):
        self.app = app
        self.dispatch = dispatch
        self.on_quit = on_quit
        self.icon = None

    def create_icon_image(self):
        """Load icon from PNG file"""
        try:
            project_root = os.path.dirname(os.path.dirname(__file__))
            icon_path = os.path.join(project_root, 'resources', 'icon.png')
            image = Image.open(icon_path)
            return image.resize((64, 64), Image.Resampling.LANCZOS)
        except FileNotFoundError:
            log.debug("[TRAY] icon.png not found, drawing default icon")
            return self._create_default_icon()

    def _create_default_icon(self):
        """Two side-by-side zones with a highlighted left half"""
        image = Image.new('RGB', (64, 64), 'navy')
        draw = ImageDraw.Draw(image)
        draw.rectangle([6, 10, 30, 54], fill='#3584e4', outline='white', width=2)
        draw.rectangle([34, 10, 58, 54], fill='white', outline='lightblue', width=2)
        return image

    # ===== Menu =====

    def _is_checked(self, key):
        def checked(item):
            settings = self.app.settings
            return bool(settings and settings.config.get(key))
        return checked

    def _toggle(self, key):
        def toggle(icon, item):
            new_value = not item.checked
            log.info("[TRAY] %s -> %s", key, new_value)
            self.dispatch(self.app.set_feature, key, new_value)
        return toggle

    def show_monitors(self, icon, item):
        compositor = self.app.compositor
        lines = [f"Detected {compositor.get_monitor_count()} monitor(s):"]
        for index in range(compositor.get_monitor_count()):
            wa = compositor.get_work_area(index)
            primary = " (PRIMARY)" if index == compositor.get_primary_monitor() else ""
            lines.append(f"Monitor {index}: work area {wa.width}x{wa.height} at ({wa.x}, {wa.y}){primary}")
        info = "\n".join(lines)
        log.info("[TRAY] %s", info)
        icon.notify(info, "AutoZoner - Monitors")

    def reload_config(self, icon, item):
        self.dispatch(self.app.reload_config)
        icon.notify("Configuration reloaded", "AutoZoner")

    def quit_app(self, icon, item):
        log.info("[TRAY] Shutting down...")
        self.on_quit()
        icon.stop()

    def setup_tray_icon(self):
        toggle_items = [
            pystray.MenuItem(label, self._toggle(key), checked=self._is_checked(key))
            for key, label in TOGGLES
        ]
        menu = pystray.Menu(
            *toggle_items,
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Show Monitors", self.show_monitors),
            pystray.MenuItem("Reload Config", self.reload_config),
            pystray.MenuItem("Quit", self.quit_app),
        )
        self.icon = pystray.Icon("autozoner", self.create_icon_image(), "AutoZoner", menu=menu)
        return self.icon

    def update_toggle_state(self):
        """Refresh check marks after a setting changed elsewhere"""
        if self.icon:
            self.icon.update_menu()

    def run(self):
        icon = self.icon or self.setup_tray_icon()
        log.info("[TRAY] AutoZoner running in system tray")
        icon.run()
