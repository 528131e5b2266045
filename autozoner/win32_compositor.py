# autozoner/win32_compositor.py
"""Windows implementation of the compositor interface.

Win events arrive on a hook thread and monitor changes on a polling
thread; both hand their notifications to the engine loop.
"""

import ctypes
import ctypes.wintypes as wt
import logging
import threading
import time
from typing import List, Optional

import pythoncom
import pywintypes
import win32api as wa
import win32con as wc
import win32gui as wg

from .compositor import Compositor, GrabOp, WindowType
from .geometry import Point, Rect
from .monitor_detection import Monitor, MonitorDetector
from .overlay_win32 import Win32ZoneHighlighter
from .win_events import HOOKED_EVENTS, WinEventRouter

log = logging.getLogger(__name__)

user32 = ctypes.windll.user32

WINEVENT_OUTOFCONTEXT = 0x0000
WINEVENT_SKIPOWNPROCESS = 0x0002
GA_ROOT = 2

HTCAPTION = 2
RESIZE_HIT_CODES = {10, 11, 12, 13, 14, 15, 16, 17}  # HTLEFT .. HTBOTTOMRIGHT

# Shell surfaces that are never tiled
IGNORED_CLASSES = {
    "Progman", "WorkerW", "Shell_TrayWnd", "Shell_SecondaryTrayWnd",
    "Windows.UI.Core.CoreWindow", "TaskListThumbnailWnd", "STATIC",
}

MODIFIER_VK_MAP = {
    'shift': wc.VK_SHIFT,
    'ctrl': wc.VK_CONTROL,
    'alt': wc.VK_MENU,
    'win': wc.VK_LWIN,
}

WinEventProc = ctypes.WINFUNCTYPE(
    None, wt.HANDLE, wt.DWORD, wt.HWND, wt.LONG, wt.LONG, wt.DWORD, wt.DWORD)


class Win32Compositor(Compositor):
    def __init__(self, scheduler, overlay_config: Optional[dict] = None,
                 monitor_poll_interval: float = 2.0):
        super().__init__()
        self.scheduler = scheduler
        self.overlay_config = overlay_config or {}
        self.monitor_poll_interval = monitor_poll_interval

        self.monitors: List[Monitor] = MonitorDetector.get_monitors()
        self.running = False
        self._hook_thread = None
        self._monitor_thread = None
        self.router = WinEventRouter(self, scheduler.call_soon_threadsafe,
                                     self._classify_grab, self._is_top_level)
        self._event_proc = WinEventProc(self._on_win_event)

    # ===== Threads =====

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self.router.seed(self.list_windows())

        self._hook_thread = threading.Thread(target=self._hook_loop, name='autozoner-winevents', daemon=True)
        self._hook_thread.start()
        self._monitor_thread = threading.Thread(target=self._monitor_loop, name='autozoner-monitors', daemon=True)
        self._monitor_thread.start()
        log.info("[WIN32] Compositor started (%d monitor(s))", len(self.monitors))

    def stop(self) -> None:
        self.running = False
        for thread in (self._hook_thread, self._monitor_thread):
            if thread:
                thread.join(timeout=1.5)
        self._hook_thread = self._monitor_thread = None
        log.info("[WIN32] Compositor stopped")

    def _hook_loop(self):
        pythoncom.CoInitialize()
        flags = WINEVENT_OUTOFCONTEXT | WINEVENT_SKIPOWNPROCESS
        hooks = []
        for event in HOOKED_EVENTS:
            hook = user32.SetWinEventHook(event, event, 0, self._event_proc, 0, 0, flags)
            if hook:
                hooks.append(hook)
            else:
                log.warning("[WIN32] Could not hook win event 0x%04X", event)

        log.info("[WIN32] %d win event hook(s) installed", len(hooks))
        try:
            while self.running:
                pythoncom.PumpWaitingMessages()
                time.sleep(0.01)
        finally:
            for hook in hooks:
                user32.UnhookWinEvent(hook)
            pythoncom.CoUninitialize()
            log.info("[WIN32] Win event hooks removed")

    def _monitor_loop(self):
        while self.running:
            time.sleep(self.monitor_poll_interval)
            try:
                current = MonitorDetector.get_monitors()
            except OSError as e:
                log.warning("[WIN32] Monitor enumeration failed: %s", e)
                continue
            if current != self.monitors:
                self.scheduler.call_soon_threadsafe(self._apply_monitors, current)

    def _apply_monitors(self, monitors: List[Monitor]) -> None:
        if monitors == self.monitors:
            return
        self.monitors = monitors
        log.info("[WIN32] Monitor topology changed (%d monitor(s))", len(monitors))
        self.monitors_changed.emit()

    def _on_win_event(self, hook, event, hwnd, id_object, id_child, thread_id, timestamp):
        self.router.handle(event, hwnd, id_object, id_child)

    def _is_top_level(self, hwnd) -> bool:
        try:
            return wg.GetAncestor(hwnd, GA_ROOT) == hwnd
        except pywintypes.error:
            return False

    def _classify_grab(self, hwnd) -> GrabOp:
        """Caption drags move, border drags resize; keyboard moves count as moves"""
        x, y = wa.GetCursorPos()
        lparam = wa.MAKELONG(x & 0xFFFF, y & 0xFFFF)
        try:
            _, hit = wg.SendMessageTimeout(hwnd, wc.WM_NCHITTEST, 0, lparam,
                                           wc.SMTO_ABORTIFHUNG, 100)
        except pywintypes.error:
            return GrabOp.MOVING
        if hit in RESIZE_HIT_CODES:
            return GrabOp.RESIZING
        return GrabOp.MOVING

    # ===== Pointer and monitors =====

    def get_pointer(self) -> Point:
        x, y = wa.GetCursorPos()
        return Point(x, y)

    def is_modifier_held(self, name: str) -> bool:
        vk = MODIFIER_VK_MAP.get(name.lower())
        if vk is None:
            return False
        return (wa.GetAsyncKeyState(vk) & 0x8000) != 0

    def get_monitor_index_at(self, point: Point) -> int:
        for mon in self.monitors:
            g = mon.geometry
            if g.x <= point.x < g.right and g.y <= point.y < g.bottom:
                return mon.index
        return -1

    def get_monitor_count(self) -> int:
        return len(self.monitors)

    def get_primary_monitor(self) -> int:
        for mon in self.monitors:
            if mon.is_primary:
                return mon.index
        return 0

    def get_work_area(self, monitor_index: int) -> Rect:
        return self.monitors[monitor_index].work_area

    # ===== Window introspection =====

    def window_exists(self, window) -> bool:
        return bool(window) and bool(wg.IsWindow(window))

    def list_windows(self) -> List[int]:
        windows = []

        def enum_callback(hwnd, _):
            if wg.IsWindowVisible(hwnd) and wg.GetWindowText(hwnd):
                windows.append(hwnd)
            return True

        wg.EnumWindows(enum_callback, None)
        return windows

    def get_focus_window(self):
        return wg.GetForegroundWindow() or None

    def get_frame_rect(self, window) -> Rect:
        try:
            return Rect.from_ltrb(*wg.GetWindowRect(window))
        except pywintypes.error:
            return Rect(0, 0, 0, 0)

    def get_window_title(self, window) -> str:
        try:
            return wg.GetWindowText(window)
        except pywintypes.error:
            return ''

    def get_window_type(self, window) -> WindowType:
        try:
            if wg.GetClassName(window) in IGNORED_CLASSES:
                return WindowType.OTHER
            style = wg.GetWindowLong(window, wc.GWL_STYLE)
            ex_style = wg.GetWindowLong(window, wc.GWL_EXSTYLE)
            owner = wg.GetWindow(window, wc.GW_OWNER)
        except pywintypes.error:
            return WindowType.OTHER

        if ex_style & wc.WS_EX_TOOLWINDOW:
            return WindowType.UTILITY
        if not (style & wc.WS_CAPTION) or not (style & wc.WS_SYSMENU):
            return WindowType.OTHER
        if owner:
            return WindowType.DIALOG
        return WindowType.NORMAL

    def get_window_monitor(self, window) -> int:
        rect = self.get_frame_rect(window)
        if rect.width == 0 and rect.height == 0:
            return -1
        return self.get_monitor_index_at(rect.center)

    def is_fullscreen(self, window) -> bool:
        try:
            style = wg.GetWindowLong(window, wc.GWL_STYLE)
        except pywintypes.error:
            return False
        if style & wc.WS_CAPTION:
            return False
        rect = self.get_frame_rect(window)
        return any(rect == mon.geometry for mon in self.monitors)

    def is_maximized(self, window) -> bool:
        try:
            placement = wg.GetWindowPlacement(window)
        except pywintypes.error:
            return False
        return placement[1] == wc.SW_SHOWMAXIMIZED

    def is_skip_taskbar(self, window) -> bool:
        try:
            ex_style = wg.GetWindowLong(window, wc.GWL_EXSTYLE)
        except pywintypes.error:
            return True
        return bool(ex_style & wc.WS_EX_TOOLWINDOW) and not (ex_style & wc.WS_EX_APPWINDOW)

    # ===== Window mutation =====

    def move_resize(self, window, rect: Rect) -> None:
        try:
            wg.SetWindowPos(window, None, rect.x, rect.y, rect.width, rect.height,
                            wc.SWP_NOZORDER | wc.SWP_NOACTIVATE)
        except pywintypes.error as e:
            log.warning("[WIN32] SetWindowPos failed for %s: %s", window, e)

    def unmaximize(self, window) -> None:
        try:
            wg.ShowWindow(window, wc.SW_RESTORE)
        except pywintypes.error as e:
            log.warning("[WIN32] Restore failed for %s: %s", window, e)

    def activate(self, window) -> None:
        try:
            wg.SetForegroundWindow(window)
        except pywintypes.error as e:
            log.warning("[WIN32] Could not activate %s: %s", window, e)

    # ===== Overlays =====

    def create_highlighter(self, monitor_index: int) -> Win32ZoneHighlighter:
        return Win32ZoneHighlighter(
            monitor_index,
            color=self.overlay_config.get('color', '#3584e4'),
            alpha=int(self.overlay_config.get('alpha', 110)),
        )
