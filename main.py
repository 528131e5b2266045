import atexit
import ctypes
import logging
import os
import signal
import sys

# Set DPI awareness early
ctypes.windll.shcore.SetProcessDpiAwareness(2)

from autozoner.app import AutoZoner
from autozoner.config_manager import ConfigManager
from autozoner.hotkey_listener import HotkeyListener
from autozoner.scheduler import AsyncioScheduler
from autozoner.tray_app import TrayApp
from autozoner.win32_compositor import Win32Compositor

log = logging.getLogger('autozoner')

# Global references for cleanup
app = None
scheduler = None
compositor = None


def configure_logging():
    level = logging.DEBUG if os.environ.get('AUTOZONER_DEBUG') == '1' else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)-7s %(name)s: %(message)s')


def shutdown():
    """Disable the app and stop every thread; safe to call more than once"""
    global app, scheduler, compositor
    if app and app.enabled:
        log.info("[CLEANUP] Disabling AutoZoner...")
        try:
            scheduler.run_sync(app.disable)
        except (RuntimeError, TimeoutError) as e:
            log.error("[CLEANUP] Disable did not complete: %s", e)
    if compositor:
        compositor.stop()
        compositor = None
    if scheduler:
        scheduler.stop()
        scheduler = None


def signal_handler(sig, frame):
    """Handle Ctrl+C gracefully"""
    log.info("[SIGNAL] Caught signal %s, cleaning up...", sig)
    shutdown()
    sys.exit(0)


def main():
    global app, scheduler, compositor
    configure_logging()

    try:
        atexit.register(shutdown)
        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        config_manager = ConfigManager(config_dir='config')
        config_manager.load()
        timing = config_manager.get_timing()

        scheduler = AsyncioScheduler()
        scheduler.start()

        compositor = Win32Compositor(
            scheduler,
            overlay_config=config_manager.get_overlay_config(),
            monitor_poll_interval=timing['monitor_poll_interval_seconds'],
        )
        app = AutoZoner(config_manager, compositor, scheduler)

        hotkeys = HotkeyListener(
            lambda: app.settings.get_hotkeys() if app.settings else None,
            {
                'cycle_zone_windows': app.cycle_windows_in_current_zone,
                'cycle_zone_windows_backward': app.cycle_windows_in_current_zone_backward,
                'toggle_auto_zoning': app.toggle_zoning,
                'reload_config': app.reload_config,
            },
            scheduler.call_soon_threadsafe,
        )
        tray_app = TrayApp(app, scheduler.call_soon_threadsafe, on_quit=shutdown)
        app.hotkeys = hotkeys
        app.indicator = tray_app

        scheduler.run_sync(app.enable)
        compositor.start()

        log.info("AutoZoner started with %d monitor(s)", compositor.get_monitor_count())
        for action, accelerator in config_manager.get_hotkeys().items():
            log.info("  %s -> %s", accelerator, action)

        # Run (blocks until quit)
        tray_app.setup_tray_icon()
        tray_app.run()

    except FileNotFoundError as e:
        log.error("Configuration file not found: %s", e)
        shutdown()
        sys.exit(1)
    except ValueError as e:
        log.error("Invalid configuration: %s", e)
        shutdown()
        sys.exit(1)
    finally:
        shutdown()


if __name__ == "__main__":
    main()
