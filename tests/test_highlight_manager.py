from autozoner.geometry import Point, Rect
from autozoner.settings_manager import HIGHLIGHT_ON_HOVER_KEY

TICK = 0.03


def test_hover_shows_zone_on_its_monitor(highlight_manager, compositor, scheduler):
    compositor.pointer = Point(400, 500)
    highlight_manager.start_updating()
    scheduler.advance(TICK)

    first, second = highlight_manager.highlighters[0], highlight_manager.highlighters[1]
    assert first.shows == [Rect(0, 0, 960, 1080)]
    assert second.shows == []
    assert highlight_manager.current.zone.name == 'left'


def test_leaving_zone_hides_once(highlight_manager, compositor, scheduler):
    compositor.pointer = Point(400, 500)
    highlight_manager.start_updating()
    scheduler.advance(TICK)

    compositor.pointer = Point(1800, 500)
    scheduler.advance(TICK * 5)

    first, second = highlight_manager.highlighters[0], highlight_manager.highlighters[1]
    assert first.hides == 1
    assert len(first.shows) == 1
    assert second.shows == []
    assert highlight_manager.current is None
    assert highlight_manager.is_updating


def test_staying_in_zone_does_not_reshow(highlight_manager, compositor, scheduler):
    compositor.pointer = Point(400, 500)
    highlight_manager.start_updating()
    scheduler.advance(TICK * 10)

    assert len(highlight_manager.highlighters[0].shows) == 1


def test_moving_between_monitors_swaps_overlays(highlight_manager, compositor, scheduler):
    compositor.pointer = Point(400, 500)
    highlight_manager.start_updating()
    scheduler.advance(TICK)
    compositor.pointer = Point(2000, 300)
    scheduler.advance(TICK)

    assert highlight_manager.highlighters[0].hides == 1
    assert highlight_manager.highlighters[1].shows == [Rect(1920, 0, 1280, 1024)]


def test_pointer_off_every_monitor_hides(highlight_manager, compositor, scheduler):
    compositor.pointer = Point(400, 500)
    highlight_manager.start_updating()
    scheduler.advance(TICK)
    compositor.pointer = Point(-100, -100)
    scheduler.advance(TICK)

    assert highlight_manager.highlighters[0].hides == 1
    assert highlight_manager.is_updating


def test_disabling_highlight_mid_drag_stops_loop(highlight_manager, compositor, scheduler, settings):
    compositor.pointer = Point(400, 500)
    highlight_manager.start_updating()
    scheduler.advance(TICK)

    settings.set_boolean(HIGHLIGHT_ON_HOVER_KEY, False)
    scheduler.advance(TICK)

    assert not highlight_manager.is_updating
    assert highlight_manager.highlighters[0].hides == 1
    assert scheduler.pending == 0


def test_start_is_refused_when_disabled(highlight_manager, scheduler, settings):
    settings.set_boolean(HIGHLIGHT_ON_HOVER_KEY, False)
    highlight_manager.start_updating()

    assert not highlight_manager.is_updating
    assert scheduler.pending == 0


def test_evasion_key_hides_but_keeps_polling(highlight_manager, compositor, scheduler):
    compositor.pointer = Point(400, 500)
    highlight_manager.start_updating()
    scheduler.advance(TICK)

    compositor.held_modifiers.add('ctrl')
    scheduler.advance(TICK)
    assert highlight_manager.highlighters[0].hides == 1
    assert highlight_manager.is_updating

    compositor.held_modifiers.clear()
    scheduler.advance(TICK)
    assert len(highlight_manager.highlighters[0].shows) == 2


def test_evasion_key_held_at_start_skips_loop(highlight_manager, compositor, scheduler):
    compositor.held_modifiers.add('ctrl')
    highlight_manager.start_updating()

    assert not highlight_manager.is_updating


def test_restart_keeps_a_single_loop(highlight_manager, compositor, scheduler):
    highlight_manager.start_updating()
    highlight_manager.start_updating()

    assert scheduler.pending == 1


def test_stop_hides_visible_overlay(highlight_manager, compositor, scheduler):
    compositor.pointer = Point(400, 500)
    highlight_manager.start_updating()
    scheduler.advance(TICK)
    highlight_manager.stop_updating()

    assert highlight_manager.highlighters[0].hides == 1
    assert highlight_manager.current is None
    assert scheduler.pending == 0


def test_reinit_rebuilds_one_overlay_per_monitor(highlight_manager, compositor):
    old = dict(highlight_manager.highlighters)
    compositor.monitors = compositor.monitors[:1]
    highlight_manager.reinit_highlighters()

    assert all(h.destroyed for h in old.values())
    assert list(highlight_manager.highlighters) == [0]
    assert highlight_manager.highlighters[0] is not old[0]


def test_zone_on_monitor_without_overlay_clears_session(highlight_manager, compositor, scheduler):
    compositor.pointer = Point(400, 500)
    highlight_manager.start_updating()
    scheduler.advance(TICK)

    orphaned = highlight_manager.highlighters.pop(1)
    compositor.pointer = Point(2000, 300)
    scheduler.advance(TICK * 3)

    assert highlight_manager.current is None
    assert highlight_manager.highlighters[0].hides == 1
    assert orphaned.shows == []
    assert highlight_manager.is_updating
