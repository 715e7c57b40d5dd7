"""
User activity tracking: the idle gate consulted before scheduled notifications
and the poller that feeds it from the X11 screensaver idle counter.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import threading
import time
from datetime import timedelta
from enum import Enum
from typing import Callable, Optional

from pushel_core.pushel_core import logger as app_logger

_LOGGER = app_logger.get_logger()

ACTIVITY_THRESHOLD = timedelta(seconds=10)
NOTIFY_THRESHOLD = timedelta(minutes=15)
DEFAULT_POLL_INTERVAL = timedelta(seconds=10)


class ActivityStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class IdleGate:
    """
    Holds the single "last activity" timestamp shared by every scheduling loop.

    The lock is held only while reading or writing the timestamp, so neither
    operation ever blocks for long.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._last_active = clock()

    def record_activity(self) -> None:
        now = self._clock()
        with self._lock:
            if now > self._last_active:
                self._last_active = now

    def seconds_since_activity(self) -> float:
        with self._lock:
            last_active = self._last_active
        return max(0.0, self._clock() - last_active)

    def is_active(self, threshold: timedelta) -> bool:
        """Return True while less than `threshold` has passed since the last activity."""
        return self.seconds_since_activity() < threshold.total_seconds()


class ActivityMonitor:
    """
    Periodically polls system idle time, records activity on the gate and
    reports active/inactive transitions.
    """

    def __init__(
        self,
        gate: IdleGate,
        idle_seconds_provider: Optional[Callable[[], float]] = None,
        *,
        poll_interval: timedelta = DEFAULT_POLL_INTERVAL,
        on_status_change: Optional[Callable[[ActivityStatus], None]] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self._gate = gate
        self._idle_seconds_provider = idle_seconds_provider or x11_idle_seconds
        self._poll_seconds = poll_interval.total_seconds()
        self._on_status_change = on_status_change
        self._stop_event = stop_event or threading.Event()
        self._status = ActivityStatus.INACTIVE
        self._thread: Optional[threading.Thread] = None

    @property
    def status(self) -> ActivityStatus:
        return self._status

    def start(self) -> None:
        """Begin monitoring user idle time on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name="pushel-activity", daemon=True)
        self._thread.start()
        _LOGGER.info("Activity monitor started (poll every {}s).", self._poll_seconds)

    def stop(self) -> None:
        self._stop_event.set()

    def poll_once(self) -> Optional[ActivityStatus]:
        """
        Sample idle time once. Returns the new status when it changed, None
        otherwise (including when the idle time could not be read).
        """
        try:
            idle_seconds = self._idle_seconds_provider()
        except OSError as exc:
            _LOGGER.error("Unable to read user idle time: {}", exc)
            return None

        if idle_seconds < ACTIVITY_THRESHOLD.total_seconds():
            self._gate.record_activity()
            _LOGGER.debug("User is active (idle {:.0f}s).", idle_seconds)
        else:
            _LOGGER.debug("User is idle ({:.0f}s).", idle_seconds)

        if self._gate.is_active(ACTIVITY_THRESHOLD):
            new_status = ActivityStatus.ACTIVE
        else:
            new_status = ActivityStatus.INACTIVE

        if new_status is self._status:
            return None

        _LOGGER.info("Activity status changed: {} -> {}", self._status.value, new_status.value)
        self._status = new_status
        if self._on_status_change is not None:
            try:
                self._on_status_change(new_status)
            except Exception:
                _LOGGER.exception("Activity status listener failed.")
        return new_status

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.poll_once()
            if self._stop_event.wait(self._poll_seconds):
                break
        _LOGGER.info("Activity monitor stopped.")


class _XScreenSaverInfo(ctypes.Structure):
    _fields_ = [
        ("window", ctypes.c_ulong),
        ("state", ctypes.c_int),
        ("kind", ctypes.c_int),
        ("til_or_since", ctypes.c_ulong),
        ("idle", ctypes.c_ulong),
        ("eventMask", ctypes.c_ulong),
    ]


def x11_idle_seconds() -> float:
    """Return seconds since the last keyboard or mouse input on the X display."""
    xlib = _load_library("X11")
    xss = _load_library("Xss")

    xlib.XOpenDisplay.restype = ctypes.c_void_p
    xlib.XOpenDisplay.argtypes = [ctypes.c_char_p]
    xlib.XDefaultRootWindow.restype = ctypes.c_ulong
    xlib.XDefaultRootWindow.argtypes = [ctypes.c_void_p]
    xlib.XCloseDisplay.argtypes = [ctypes.c_void_p]
    xlib.XFree.argtypes = [ctypes.c_void_p]
    xss.XScreenSaverAllocInfo.restype = ctypes.POINTER(_XScreenSaverInfo)
    xss.XScreenSaverQueryInfo.argtypes = [
        ctypes.c_void_p,
        ctypes.c_ulong,
        ctypes.POINTER(_XScreenSaverInfo),
    ]

    display = xlib.XOpenDisplay(None)
    if not display:
        raise OSError("Cannot open X display; is DISPLAY set?")
    try:
        info = xss.XScreenSaverAllocInfo()
        if not info:
            raise OSError("XScreenSaverAllocInfo failed.")
        try:
            root = xlib.XDefaultRootWindow(display)
            if not xss.XScreenSaverQueryInfo(display, root, info):
                raise OSError("XScreenSaver extension is not available.")
            return info.contents.idle / 1000.0
        finally:
            xlib.XFree(info)
    finally:
        xlib.XCloseDisplay(display)


def _load_library(name: str) -> ctypes.CDLL:
    path = ctypes.util.find_library(name)
    if path is None:
        raise OSError(f"Shared library lib{name} not found.")
    return ctypes.CDLL(path)
