# autozoner/overlay_win32.py
"""Per-monitor zone highlight overlay as a layered, click-through window"""

import ctypes
import ctypes.wintypes
import logging

import win32con as wc
import win32gui as wg

from .compositor import ZoneHighlighter
from .geometry import Rect

log = logging.getLogger(__name__)

user32 = ctypes.windll.user32
gdi32 = ctypes.windll.gdi32

WS_EX_NOACTIVATE = 0x08000000


def hex_to_colorref(color: str) -> int:
    """'#RRGGBB' -> 0x00BBGGRR"""
    color = color.lstrip('#')
    r, g, b = int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)
    return (b << 16) | (g << 8) | r


class Win32ZoneHighlighter(ZoneHighlighter):
    def __init__(self, monitor_index: int, color: str = '#3584e4', alpha: int = 110):
        self.monitor_index = monitor_index
        self.colorref = hex_to_colorref(color)
        self.alpha = alpha
        self.hwnd = None
        self.visible = False
        self._showing = False
        self._rect = None
        self._create()

    def _create(self):
        ex = wc.WS_EX_LAYERED | wc.WS_EX_TRANSPARENT | wc.WS_EX_TOOLWINDOW | wc.WS_EX_TOPMOST | WS_EX_NOACTIVATE
        self.hwnd = wg.CreateWindowEx(ex, "STATIC", "AutoZonerHighlight", wc.WS_POPUP,
                                      0, 0, 1, 1, 0, 0, 0, None)
        if not self.hwnd:
            raise OSError(f"Failed to create highlight window for monitor {self.monitor_index}")

        wg.SetLayeredWindowAttributes(self.hwnd, 0, self.alpha, wc.LWA_ALPHA)
        log.debug("[WIN32] Created highlighter for monitor %d", self.monitor_index)

    def _paint(self):
        hdc = wg.GetDC(self.hwnd)
        try:
            brush = gdi32.CreateSolidBrush(self.colorref)
            rect = ctypes.wintypes.RECT(0, 0, self._rect.width, self._rect.height)
            user32.FillRect(hdc, ctypes.byref(rect), brush)
            gdi32.DeleteObject(brush)
        finally:
            wg.ReleaseDC(self.hwnd, hdc)

    def show_at(self, rect: Rect) -> None:
        if not self.hwnd:
            return
        self._showing = True
        self._rect = rect
        wg.SetWindowPos(self.hwnd, wc.HWND_TOPMOST, rect.x, rect.y, rect.width, rect.height,
                        wc.SWP_NOACTIVATE | wc.SWP_SHOWWINDOW)
        self.visible = True
        self._paint()
        wg.PumpWaitingMessages()

    def request_hide(self) -> None:
        self._showing = False
        if self.visible and self.hwnd:
            wg.ShowWindow(self.hwnd, wc.SW_HIDE)
            self.visible = False
            wg.PumpWaitingMessages()

    @property
    def is_showing_intent(self) -> bool:
        return self._showing or self.visible

    def destroy(self) -> None:
        if self.hwnd:
            wg.DestroyWindow(self.hwnd)
            self.hwnd = None
            self.visible = False
            self._showing = False
