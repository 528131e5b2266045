# autozoner/win_events.py
"""Turns raw WinEvent hook callbacks into compositor signals.

Runs on the hook thread; every signal is emitted through ``dispatch``
so subscribers only ever see the engine loop thread.
"""

from typing import Callable, Dict, Iterable

from .compositor import GrabOp

EVENT_SYSTEM_MOVESIZESTART = 0x000A
EVENT_SYSTEM_MOVESIZEEND = 0x000B
EVENT_OBJECT_DESTROY = 0x8001
EVENT_OBJECT_SHOW = 0x8002
OBJID_WINDOW = 0

HOOKED_EVENTS = (EVENT_SYSTEM_MOVESIZESTART, EVENT_SYSTEM_MOVESIZEEND,
                 EVENT_OBJECT_DESTROY, EVENT_OBJECT_SHOW)


class WinEventRouter:
    """
    Tracks which top-level windows the engine may hold state for, so
    that each of them gets exactly one window_destroyed.

    A window becomes known when it is listed at startup, shown, or
    dragged; dragging an untitled window creates state too.
    """

    def __init__(self, compositor, dispatch: Callable[..., None],
                 classify_grab: Callable[[int], GrabOp],
                 is_top_level: Callable[[int], bool]):
        self.compositor = compositor
        self.dispatch = dispatch
        self.classify_grab = classify_grab
        self.is_top_level = is_top_level
        self.known_windows = set()
        self.grab_ops: Dict[int, GrabOp] = {}

    def seed(self, windows: Iterable[int]) -> None:
        self.known_windows = set(windows)
        self.grab_ops.clear()

    def handle(self, event: int, hwnd: int, id_object: int, id_child: int) -> None:
        if not hwnd or id_object != OBJID_WINDOW or id_child != 0:
            return

        if event == EVENT_SYSTEM_MOVESIZESTART:
            op = self.classify_grab(hwnd)
            self.grab_ops[hwnd] = op
            self.known_windows.add(hwnd)
            self.dispatch(self.compositor.drag_begin.emit, hwnd, op)
        elif event == EVENT_SYSTEM_MOVESIZEEND:
            op = self.grab_ops.pop(hwnd, GrabOp.MOVING)
            self.known_windows.add(hwnd)
            self.dispatch(self.compositor.drag_end.emit, hwnd, op)
        elif event == EVENT_OBJECT_SHOW:
            if hwnd in self.known_windows or not self.is_top_level(hwnd):
                return
            self.known_windows.add(hwnd)
            self.dispatch(self.compositor.window_created.emit, hwnd)
        elif event == EVENT_OBJECT_DESTROY:
            self.grab_ops.pop(hwnd, None)
            if hwnd in self.known_windows:
                self.known_windows.discard(hwnd)
                self.dispatch(self.compositor.window_destroyed.emit, hwnd)
