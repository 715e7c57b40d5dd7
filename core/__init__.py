"""
Core helpers for the pushel reminder daemon.
"""

from .dispatcher import NotificationDispatcher  # noqa: F401
from .idle_monitor import ActivityMonitor, ActivityStatus, IdleGate  # noqa: F401
from .scheduler import NotificationScheduler  # noqa: F401
