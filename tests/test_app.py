import pytest
import yaml

from autozoner.app import AutoZoner
from autozoner.compositor import GrabOp
from autozoner.geometry import Point, Rect
from autozoner.settings_manager import ENABLE_ZONING_KEY, ZONES_KEY
from autozoner.zone import Zone


class RecordingIndicator:
    def __init__(self):
        self.updates = 0

    def update_toggle_state(self):
        self.updates += 1


class RecordingHotkeys:
    def __init__(self):
        self.calls = []

    def start(self):
        self.calls.append('start')

    def stop(self):
        self.calls.append('stop')

    def restart(self):
        self.calls.append('restart')


@pytest.fixture
def app(config, compositor, scheduler):
    zoner = AutoZoner(config, compositor, scheduler,
                      indicator=RecordingIndicator(), hotkeys=RecordingHotkeys())
    zoner.enable()
    yield zoner
    zoner.disable()


def test_enable_builds_components_and_starts_hotkeys(app):
    assert app.enabled
    assert app.window_manager is not None
    assert app.highlight_manager is not None
    assert app.hotkeys.calls == ['start']


def test_initial_snap_runs_after_delay(app, compositor, scheduler):
    compositor.add_window('w', Rect(100, 100, 200, 200))

    scheduler.advance(0.2)
    assert compositor.moves == []
    scheduler.advance(0.2)
    assert compositor.moves == [('w', Rect(0, 0, 960, 1080))]


def test_toggle_zoning_rewires_and_updates_indicator(app, compositor, scheduler):
    scheduler.advance(1)
    compositor.add_window('w', Rect(100, 100, 800, 600))

    app.toggle_zoning()
    assert not app.settings.is_zoning_enabled()
    assert app.indicator.updates == 1

    compositor.drag_begin.emit('w', GrabOp.MOVING)
    compositor.pointer = Point(400, 500)
    compositor.drag_end.emit('w', GrabOp.MOVING)
    assert compositor.moves == []

    # re-enabling snaps right away
    app.toggle_zoning()
    assert compositor.moves == [('w', Rect(0, 0, 960, 1080))]


def test_monitor_change_rebuilds_overlays_and_resnaps_once(app, compositor, scheduler):
    scheduler.advance(1)
    before = list(compositor.highlighters)
    compositor.add_window('w', Rect(100, 100, 200, 200))

    compositor.monitors_changed.emit()
    scheduler.advance(0.5)
    compositor.monitors_changed.emit()
    assert all(h.destroyed for h in before)

    scheduler.advance(0.5)
    assert compositor.moves == []
    scheduler.advance(0.3)
    assert len(compositor.moves) == 1


def test_zone_change_resnaps_after_delay(app, compositor, scheduler):
    scheduler.advance(1)
    compositor.add_window('w', Rect(100, 100, 800, 600))
    compositor.pointer = Point(400, 500)
    compositor.drag_end.emit('w', GrabOp.MOVING)

    zones = app.settings.get_zones()
    wider = [Zone('left', 0, 0, 0, 1000, 1080)] + zones[1:]
    app.settings.set_zones(wider)
    scheduler.advance(0.5)

    assert compositor.moves[-1] == ('w', Rect(0, 0, 1000, 1080))


def test_reload_with_new_hotkeys_restarts_listener(app, config):
    with open(config.settings_path, encoding='utf-8') as f:
        data = yaml.safe_load(f)
    data['hotkeys'] = {'toggle_auto_zoning': 'ctrl+shift+z'}
    with open(config.settings_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(data, f)

    app.reload_config()
    assert app.hotkeys.calls == ['start', 'restart']


def test_set_feature_rejects_unknown_keys(app):
    with pytest.raises(KeyError):
        app.set_feature(ZONES_KEY, True)


def test_disable_releases_everything(config, compositor, scheduler):
    zoner = AutoZoner(config, compositor, scheduler, hotkeys=RecordingHotkeys())
    zoner.enable()
    zoner.disable()

    assert not zoner.enabled
    assert zoner.hotkeys.calls == ['start', 'stop']
    assert len(compositor.drag_begin) == 0
    assert len(compositor.window_destroyed) == 0
    assert len(compositor.monitors_changed) == 0
    assert all(h.destroyed for h in compositor.highlighters)
    assert scheduler.pending == 0

    zoner.disable()


def test_disabled_zoning_at_start_skips_initial_snap(write_settings, compositor, scheduler):
    config = write_settings(**{ENABLE_ZONING_KEY: False})
    zoner = AutoZoner(config, compositor, scheduler)
    zoner.enable()
    compositor.add_window('w', Rect(100, 100, 200, 200))
    scheduler.advance(2)

    assert compositor.moves == []
    zoner.disable()
