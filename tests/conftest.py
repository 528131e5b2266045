import pytest
import yaml

from autozoner.config_manager import ConfigManager
from autozoner.geometry import Rect
from autozoner.highlight_manager import HighlightManager
from autozoner.settings_manager import SettingsManager
from autozoner.window_manager import WindowManager

from .fakes import FakeCompositor, ManualScheduler

LEFT_ZONE = {'name': 'left', 'monitorIndex': 0, 'x': 0, 'y': 0, 'width': 960, 'height': 1080}
MIDDLE_ZONE = {'name': 'middle', 'monitorIndex': 0, 'x': 960, 'y': 0, 'width': 480, 'height': 1080}
SECOND_MONITOR_ZONE = {'name': 'second', 'monitorIndex': 1, 'x': 0, 'y': 0, 'width': 1280, 'height': 1024}


@pytest.fixture
def write_settings(tmp_path):
    """Write a settings.yaml into a temp config dir and return its ConfigManager"""
    def _write(data=None, **overrides):
        payload = dict(data or {})
        payload.update(overrides)
        with open(tmp_path / 'settings.yaml', 'w', encoding='utf-8') as f:
            yaml.safe_dump(payload, f)
        return ConfigManager(config_dir=str(tmp_path))
    return _write


@pytest.fixture
def config(write_settings):
    return write_settings(zones=[LEFT_ZONE, MIDDLE_ZONE, SECOND_MONITOR_ZONE])


@pytest.fixture
def settings(config):
    manager = SettingsManager(config)
    yield manager
    manager.destroy()


@pytest.fixture
def compositor():
    full = Rect(0, 0, 1920, 1080)
    second = Rect(1920, 0, 1280, 1024)
    return FakeCompositor([(full, full), (second, second)])


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def highlight_manager(settings, compositor, scheduler):
    manager = HighlightManager(settings, compositor, scheduler)
    yield manager
    manager.destroy()


@pytest.fixture
def window_manager(settings, compositor, scheduler, highlight_manager):
    manager = WindowManager(settings, compositor, scheduler, highlight_manager)
    manager.connect_signals()
    yield manager
    manager.destroy()
