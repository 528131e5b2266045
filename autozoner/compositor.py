# autozoner/compositor.py
"""The desktop primitives the engine needs, as an explicit interface.

There is one production implementation (win32_compositor.Win32Compositor)
and a fake in the test suite. Windows are identified by an opaque,
hashable handle (an HWND on Windows).
"""

from enum import Enum
from typing import Hashable, List, Optional

from .geometry import Point, Rect
from .signals import Signal

WindowHandle = Hashable


class GrabOp(Enum):
    MOVING = 'moving'
    RESIZING = 'resizing'


class WindowType(Enum):
    NORMAL = 'normal'
    DIALOG = 'dialog'
    UTILITY = 'utility'
    OTHER = 'other'


class ZoneHighlighter:
    """One overlay actor per monitor, shown over the hovered zone"""

    def show_at(self, rect: Rect) -> None:
        raise NotImplementedError

    def request_hide(self) -> None:
        raise NotImplementedError

    @property
    def is_showing_intent(self) -> bool:
        raise NotImplementedError

    def destroy(self) -> None:
        raise NotImplementedError


class Compositor:
    """
    Signals (all delivered on the engine loop thread):
        drag_begin(window, GrabOp)
        drag_end(window, GrabOp)
        window_created(window)
        window_destroyed(window)
        monitors_changed()
    """

    def __init__(self):
        self.drag_begin = Signal('drag-begin')
        self.drag_end = Signal('drag-end')
        self.window_created = Signal('window-created')
        self.window_destroyed = Signal('window-destroyed')
        self.monitors_changed = Signal('monitors-changed')

    # ===== Pointer and monitors =====

    def get_pointer(self) -> Point:
        raise NotImplementedError

    def is_modifier_held(self, name: str) -> bool:
        raise NotImplementedError

    def get_monitor_index_at(self, point: Point) -> int:
        """Monitor under ``point``, or -1 when it is over none"""
        raise NotImplementedError

    def get_monitor_count(self) -> int:
        raise NotImplementedError

    def get_primary_monitor(self) -> int:
        raise NotImplementedError

    def get_work_area(self, monitor_index: int) -> Rect:
        raise NotImplementedError

    # ===== Window introspection =====

    def window_exists(self, window: WindowHandle) -> bool:
        raise NotImplementedError

    def list_windows(self) -> List[WindowHandle]:
        raise NotImplementedError

    def get_focus_window(self) -> Optional[WindowHandle]:
        raise NotImplementedError

    def get_frame_rect(self, window: WindowHandle) -> Rect:
        raise NotImplementedError

    def get_window_type(self, window: WindowHandle) -> WindowType:
        raise NotImplementedError

    def get_window_monitor(self, window: WindowHandle) -> int:
        raise NotImplementedError

    def get_window_title(self, window: WindowHandle) -> str:
        return str(window)

    def is_fullscreen(self, window: WindowHandle) -> bool:
        raise NotImplementedError

    def is_maximized(self, window: WindowHandle) -> bool:
        raise NotImplementedError

    def is_skip_taskbar(self, window: WindowHandle) -> bool:
        raise NotImplementedError

    # ===== Window mutation =====

    def move_resize(self, window: WindowHandle, rect: Rect) -> None:
        raise NotImplementedError

    def unmaximize(self, window: WindowHandle) -> None:
        raise NotImplementedError

    def activate(self, window: WindowHandle) -> None:
        raise NotImplementedError

    # ===== Overlays =====

    def create_highlighter(self, monitor_index: int) -> ZoneHighlighter:
        raise NotImplementedError
