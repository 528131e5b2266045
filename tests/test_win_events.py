import pytest

from autozoner.compositor import GrabOp
from autozoner.geometry import Point, Rect
from autozoner.win_events import (
    EVENT_OBJECT_DESTROY,
    EVENT_OBJECT_SHOW,
    EVENT_SYSTEM_MOVESIZEEND,
    EVENT_SYSTEM_MOVESIZESTART,
    OBJID_WINDOW,
    WinEventRouter,
)


def call_now(callback, *args):
    callback(*args)


@pytest.fixture
def router(compositor):
    return WinEventRouter(compositor, call_now,
                          classify_grab=lambda hwnd: GrabOp.MOVING,
                          is_top_level=lambda hwnd: True)


def recorder(signal):
    calls = []
    signal.connect(lambda *args: calls.append(args))
    return calls


def test_show_announces_new_top_level_window_once(router, compositor):
    created = recorder(compositor.window_created)
    router.handle(EVENT_OBJECT_SHOW, 42, OBJID_WINDOW, 0)
    router.handle(EVENT_OBJECT_SHOW, 42, OBJID_WINDOW, 0)

    assert created == [(42,)]


def test_child_objects_are_ignored(router, compositor):
    created = recorder(compositor.window_created)
    router.handle(EVENT_OBJECT_SHOW, 42, -4, 0)
    router.handle(EVENT_OBJECT_SHOW, 42, OBJID_WINDOW, 3)

    assert created == []


def test_seeded_windows_are_not_recreated_but_are_destroyed(router, compositor):
    created = recorder(compositor.window_created)
    destroyed = recorder(compositor.window_destroyed)
    router.seed([7])

    router.handle(EVENT_OBJECT_SHOW, 7, OBJID_WINDOW, 0)
    router.handle(EVENT_OBJECT_DESTROY, 7, OBJID_WINDOW, 0)

    assert created == []
    assert destroyed == [(7,)]


def test_destroy_of_unknown_window_is_silent(router, compositor):
    destroyed = recorder(compositor.window_destroyed)
    router.handle(EVENT_OBJECT_DESTROY, 99, OBJID_WINDOW, 0)

    assert destroyed == []


def test_grab_op_is_carried_from_start_to_end(compositor):
    router = WinEventRouter(compositor, call_now,
                            classify_grab=lambda hwnd: GrabOp.RESIZING,
                            is_top_level=lambda hwnd: True)
    ends = recorder(compositor.drag_end)

    router.handle(EVENT_SYSTEM_MOVESIZESTART, 5, OBJID_WINDOW, 0)
    router.handle(EVENT_SYSTEM_MOVESIZEEND, 5, OBJID_WINDOW, 0)

    assert ends == [(5, GrabOp.RESIZING)]
    assert router.grab_ops == {}


def test_dragged_untracked_window_gets_destroyed(router, compositor):
    destroyed = recorder(compositor.window_destroyed)

    router.handle(EVENT_SYSTEM_MOVESIZESTART, 11, OBJID_WINDOW, 0)
    router.handle(EVENT_OBJECT_DESTROY, 11, OBJID_WINDOW, 0)

    assert destroyed == [(11,)]
    assert router.grab_ops == {}


def test_state_of_dragged_untitled_window_dies_with_it(router, compositor, window_manager):
    # visible but untitled at startup, so never seeded
    router.seed([])
    compositor.add_window(11, Rect(100, 100, 800, 600))

    router.handle(EVENT_SYSTEM_MOVESIZESTART, 11, OBJID_WINDOW, 0)
    compositor.pointer = Point(400, 500)
    router.handle(EVENT_SYSTEM_MOVESIZEEND, 11, OBJID_WINDOW, 0)
    assert window_manager.get_state(11).is_zoned

    del compositor.windows[11]
    router.handle(EVENT_OBJECT_DESTROY, 11, OBJID_WINDOW, 0)

    assert window_manager.get_state(11) is None
    assert window_manager.tracked_windows() == []
