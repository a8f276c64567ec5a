"""System idle time queries (Windows LASTINPUTINFO, X11 XScreenSaver, macOS IOKit)."""

from __future__ import annotations

import ctypes
import ctypes.util
import re
import subprocess
import sys
from typing import Any, ClassVar

__all__ = ["IdleQueryError", "get_idle_seconds"]


class IdleQueryError(RuntimeError):
    """The platform could not report how long the user has been idle."""


if sys.platform == "win32":
    from ctypes import Structure, byref, sizeof, windll, wintypes

    class LASTINPUTINFO(Structure):
        """Windows LASTINPUTINFO structure."""

        _fields_: ClassVar[Any] = [
            ("cbSize", wintypes.UINT),
            ("dwTime", wintypes.DWORD),
        ]

    def get_idle_ms() -> int:
        """Milliseconds since the last keyboard or mouse input (Windows)."""
        lii = LASTINPUTINFO()
        lii.cbSize = sizeof(LASTINPUTINFO)
        if not windll.user32.GetLastInputInfo(byref(lii)):
            msg = "GetLastInputInfo failed"
            raise IdleQueryError(msg)
        current_tick = int(windll.kernel32.GetTickCount())
        # GetTickCount wraps after ~49.7 days, dwTime wraps with it
        return max(0, (current_tick - lii.dwTime) & 0xFFFFFFFF)

elif sys.platform == "darwin":
    _HID_IDLE_RE = re.compile(r'"HIDIdleTime"\s*=\s*(\d+)')

    def get_idle_ms() -> int:
        """Milliseconds since the last HID event, read from ``ioreg`` (macOS)."""
        try:
            result = subprocess.run(
                ["ioreg", "-c", "IOHIDSystem"],  # noqa: S607
                capture_output=True,
                text=True,
                timeout=5,
                check=True,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            msg = f"ioreg failed: {exc}"
            raise IdleQueryError(msg) from exc
        match = _HID_IDLE_RE.search(result.stdout)
        if match is None:
            msg = "HIDIdleTime not found in ioreg output"
            raise IdleQueryError(msg)
        return int(match.group(1)) // 1_000_000  # nanoseconds

else:

    class XScreenSaverInfo(ctypes.Structure):
        """X11 XScreenSaverInfo structure."""

        _fields_: ClassVar[Any] = [
            ("window", ctypes.c_ulong),
            ("state", ctypes.c_int),
            ("kind", ctypes.c_int),
            ("til_or_since", ctypes.c_ulong),
            ("idle", ctypes.c_ulong),
            ("eventMask", ctypes.c_ulong),
        ]

    _X11: dict[str, Any] = {}

    def _load_x11() -> tuple[Any, Any]:
        if not _X11:
            xlib_name = ctypes.util.find_library("X11")
            xss_name = ctypes.util.find_library("Xss")
            if not xlib_name or not xss_name:
                msg = "libX11/libXss not available"
                raise IdleQueryError(msg)
            xlib = ctypes.cdll.LoadLibrary(xlib_name)
            xss = ctypes.cdll.LoadLibrary(xss_name)
            xlib.XOpenDisplay.restype = ctypes.c_void_p
            xlib.XOpenDisplay.argtypes = [ctypes.c_char_p]
            xlib.XDefaultRootWindow.restype = ctypes.c_ulong
            xlib.XDefaultRootWindow.argtypes = [ctypes.c_void_p]
            xlib.XFree.argtypes = [ctypes.c_void_p]
            xlib.XCloseDisplay.argtypes = [ctypes.c_void_p]
            xss.XScreenSaverAllocInfo.restype = ctypes.POINTER(XScreenSaverInfo)
            xss.XScreenSaverQueryInfo.argtypes = [
                ctypes.c_void_p,
                ctypes.c_ulong,
                ctypes.POINTER(XScreenSaverInfo),
            ]
            _X11["xlib"] = xlib
            _X11["xss"] = xss
        return _X11["xlib"], _X11["xss"]

    def get_idle_ms() -> int:
        """Milliseconds since the last input event, via XScreenSaver (X11)."""
        xlib, xss = _load_x11()
        display = xlib.XOpenDisplay(None)
        if not display:
            msg = "cannot open X display"
            raise IdleQueryError(msg)
        try:
            info = xss.XScreenSaverAllocInfo()
            if not info:
                msg = "XScreenSaverAllocInfo failed"
                raise IdleQueryError(msg)
            try:
                root = xlib.XDefaultRootWindow(display)
                if not xss.XScreenSaverQueryInfo(display, root, info):
                    msg = "XScreenSaver extension unavailable"
                    raise IdleQueryError(msg)
                return int(info.contents.idle)
            finally:
                xlib.XFree(info)
        finally:
            xlib.XCloseDisplay(display)


def get_idle_seconds() -> int:
    """Whole seconds since the last user input.

    Raises:
        IdleQueryError: the platform query failed

    """
    return get_idle_ms() // 1000


if __name__ == "__main__":  # pragma: no cover
    import time

    for _ in range(3):
        print(get_idle_seconds())  # noqa: T201
        time.sleep(1)
