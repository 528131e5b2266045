# autozoner/monitor_detection.py
"""Enumerate monitors and their work areas (Windows)"""

import ctypes
import ctypes.wintypes
from dataclasses import dataclass
from typing import List

from .geometry import Rect

MONITORINFOF_PRIMARY = 1


@dataclass(frozen=True)
class Monitor:
    index: int
    geometry: Rect
    work_area: Rect
    is_primary: bool


class MONITORINFOEX(ctypes.Structure):
    _fields_ = [
        ("cbSize", ctypes.wintypes.DWORD),
        ("rcMonitor", ctypes.wintypes.RECT),
        ("rcWork", ctypes.wintypes.RECT),
        ("dwFlags", ctypes.wintypes.DWORD),
        ("szDevice", ctypes.wintypes.WCHAR * 32),
    ]


MonitorEnumProc = ctypes.WINFUNCTYPE(
    ctypes.c_int,
    ctypes.wintypes.HMONITOR,
    ctypes.wintypes.HDC,
    ctypes.POINTER(ctypes.wintypes.RECT),
    ctypes.wintypes.LPARAM,
)


def _rect(r) -> Rect:
    return Rect.from_ltrb(r.left, r.top, r.right, r.bottom)


class MonitorDetector:
    @staticmethod
    def get_monitors() -> List[Monitor]:
        """All monitors, ordered left-to-right then top-to-bottom"""
        found = []

        def callback(hMonitor, hdcMonitor, lprcMonitor, dwData):
            info = MONITORINFOEX()
            info.cbSize = ctypes.sizeof(MONITORINFOEX)
            if ctypes.windll.user32.GetMonitorInfoW(hMonitor, ctypes.byref(info)):
                found.append((_rect(info.rcMonitor), _rect(info.rcWork),
                              bool(info.dwFlags & MONITORINFOF_PRIMARY)))
            return 1  # Continue enumeration

        callback_func = MonitorEnumProc(callback)
        ctypes.windll.user32.EnumDisplayMonitors(None, None, callback_func, 0)

        # Stable indices regardless of enumeration order
        found.sort(key=lambda m: (m[0].x, m[0].y))
        return [Monitor(i, geometry, work, primary) for i, (geometry, work, primary) in enumerate(found)]
