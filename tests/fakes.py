"""In-memory stand-ins for the desktop, overlays and the event loop"""

import heapq
import itertools
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from autozoner.compositor import Compositor, WindowType, ZoneHighlighter
from autozoner.geometry import Point, Rect
from autozoner.scheduler import Scheduler


@dataclass
class FakeWindow:
    rect: Rect
    window_type: WindowType = WindowType.NORMAL
    fullscreen: bool = False
    maximized: bool = False
    skip_taskbar: bool = False
    title: str = ''


class FakeHighlighter(ZoneHighlighter):
    def __init__(self, monitor_index: int):
        self.monitor_index = monitor_index
        self.shows: List[Rect] = []
        self.hides = 0
        self.destroyed = False
        self._showing = False

    def show_at(self, rect):
        self.shows.append(rect)
        self._showing = True

    def request_hide(self):
        self.hides += 1
        self._showing = False

    @property
    def is_showing_intent(self):
        return self._showing

    def destroy(self):
        self.destroyed = True
        self._showing = False


class FakeCompositor(Compositor):
    """Monitors are (geometry, work_area) pairs; monitor 0 is primary"""

    def __init__(self, monitors: Optional[List[Tuple[Rect, Rect]]] = None):
        super().__init__()
        full = Rect(0, 0, 1920, 1080)
        self.monitors = monitors if monitors is not None else [(full, full)]
        self.primary = 0
        self.windows: Dict[object, FakeWindow] = {}
        self.pointer = Point(0, 0)
        self.held_modifiers = set()
        self.focus = None
        self.moves: List[Tuple[object, Rect]] = []
        self.unmaximized: List[object] = []
        self.activated: List[object] = []
        self.highlighters: List[FakeHighlighter] = []

    # ===== Test helpers =====

    def add_window(self, handle, rect: Rect, **kwargs) -> FakeWindow:
        window = self.windows[handle] = FakeWindow(rect, **kwargs)
        return window

    def remove_window(self, handle) -> None:
        self.windows.pop(handle, None)
        self.window_destroyed.emit(handle)

    def highlighters_for(self, monitor_index: int) -> List[FakeHighlighter]:
        return [h for h in self.highlighters if h.monitor_index == monitor_index]

    # ===== Pointer and monitors =====

    def get_pointer(self):
        return self.pointer

    def is_modifier_held(self, name):
        return name in self.held_modifiers

    def get_monitor_index_at(self, point):
        for index, (geometry, _) in enumerate(self.monitors):
            if geometry.x <= point.x < geometry.right and geometry.y <= point.y < geometry.bottom:
                return index
        return -1

    def get_monitor_count(self):
        return len(self.monitors)

    def get_primary_monitor(self):
        return self.primary

    def get_work_area(self, monitor_index):
        return self.monitors[monitor_index][1]

    # ===== Windows =====

    def window_exists(self, window):
        return window in self.windows

    def list_windows(self):
        return list(self.windows)

    def get_focus_window(self):
        return self.focus

    def get_frame_rect(self, window):
        return self.windows[window].rect

    def get_window_type(self, window):
        return self.windows[window].window_type

    def get_window_monitor(self, window):
        return self.get_monitor_index_at(self.windows[window].rect.center)

    def get_window_title(self, window):
        return self.windows[window].title if window in self.windows else ''

    def is_fullscreen(self, window):
        return self.windows[window].fullscreen

    def is_maximized(self, window):
        return self.windows[window].maximized

    def is_skip_taskbar(self, window):
        return self.windows[window].skip_taskbar

    def move_resize(self, window, rect):
        self.moves.append((window, rect))
        self.windows[window].rect = rect

    def unmaximize(self, window):
        self.unmaximized.append(window)
        self.windows[window].maximized = False

    def activate(self, window):
        self.activated.append(window)
        self.focus = window

    def create_highlighter(self, monitor_index):
        highlighter = FakeHighlighter(monitor_index)
        self.highlighters.append(highlighter)
        return highlighter


class _Scheduled:
    def __init__(self, fn):
        self.fn = fn
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Virtual clock; nothing runs until advance() is called"""

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._seq = itertools.count()

    def _schedule(self, delay, fn):
        entry = _Scheduled(fn)
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), entry))
        return entry

    def call_soon_threadsafe(self, callback, *args):
        callback(*args)

    @property
    def pending(self) -> int:
        return sum(1 for _, _, entry in self._queue if not entry.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + 1e-9:
            due, _, entry = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if not entry.cancelled:
                entry.fn()
        self.now = target
