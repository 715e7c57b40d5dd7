"""
Shared representation of periodic and ad-hoc notifications.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from .notification_schema import validate_notification


@dataclass(frozen=True, slots=True, kw_only=True)
class AdhocNotification:
    """
    A fully described desktop notification. Optional display fields left as
    None fall back to the notification daemon's defaults.
    """

    message: str
    title: Optional[str] = None
    urgency: Optional[str] = None
    expire_time: Optional[int] = None
    app_name: Optional[str] = None
    icon: Optional[str] = None
    category: Optional[str] = None
    transient: Optional[bool] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "AdhocNotification":
        return cls(**validate_notification(raw, with_interval=False))


@dataclass(frozen=True, slots=True, kw_only=True)
class NotificationSpec(AdhocNotification):
    """A notification fired every `interval` by its own scheduling loop."""

    interval: timedelta

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "NotificationSpec":
        return cls(**validate_notification(raw, with_interval=True))

    @property
    def label(self) -> str:
        return self.title or self.message


@dataclass(frozen=True, slots=True)
class DispatchResult:
    success: bool
    error_detail: Optional[str] = None

    @classmethod
    def ok(cls) -> "DispatchResult":
        return cls(success=True)

    @classmethod
    def failed(cls, detail: str) -> "DispatchResult":
        return cls(success=False, error_detail=detail)
