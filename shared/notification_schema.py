"""
Notification entry validation shared by the scheduler and the ad-hoc API.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

_INTERVAL_RE = re.compile(r"([0-9]+)([smh])")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600}
# Loops wait on threading.Event, which rejects timeouts above TIMEOUT_MAX.
MAX_INTERVAL_SECONDS = int(threading.TIMEOUT_MAX // 2)


class NotificationValidationError(ValueError):
    """Raised when a notification entry is missing required data or is malformed."""


class IntervalFormatError(NotificationValidationError):
    """Raised when an interval string is not `<digits><s|m|h>`."""


@dataclass(frozen=True)
class NotificationConstraints:
    """Schema constraints as simple dataclass constants."""

    urgencies: frozenset = frozenset({"low", "normal", "critical"})
    max_title_length: int = 120
    max_message_length: int = 1000


def parse_interval(value: Any) -> timedelta:
    """
    Parse a human interval such as "45s", "30m" or "1h".

    Zero is accepted here; callers that cannot run a zero-length loop must
    reject it themselves.
    """
    if not isinstance(value, str):
        raise IntervalFormatError("interval must be a string.")

    match = _INTERVAL_RE.fullmatch(value)
    if match is None:
        raise IntervalFormatError(
            f"Invalid interval {value!r}; expected a whole number followed by s, m or h (e.g. 30m)."
        )

    amount, unit = match.groups()
    try:
        seconds = int(amount) * _UNIT_SECONDS[unit]
    except ValueError as exc:
        raise IntervalFormatError(f"Interval {value[:20]!r}... has too many digits.") from exc
    if seconds > MAX_INTERVAL_SECONDS:
        raise IntervalFormatError(
            f"Interval {value!r} is too long; the maximum is {MAX_INTERVAL_SECONDS} seconds."
        )
    return timedelta(seconds=seconds)


def validate_notification(raw: Any, *, with_interval: bool) -> Dict[str, Any]:
    """
    Validate a single notification entry and return a normalized dictionary.

    When `with_interval` is set the entry must carry a parseable, non-zero
    interval, which is returned as a `timedelta`.
    """
    if not isinstance(raw, dict):
        raise NotificationValidationError("Notification entry must be a JSON object.")

    constraints = NotificationConstraints()

    normalized: Dict[str, Any] = {
        "title": _optional_string(raw.get("title"), field="title", max_length=constraints.max_title_length),
        "message": _require_string(
            raw.get("message"), field="message", max_length=constraints.max_message_length
        ),
        "urgency": _validate_urgency(raw.get("urgency"), constraints),
        "expire_time": _validate_expire_time(raw.get("expire_time")),
        "app_name": _optional_string(raw.get("app_name"), field="app_name"),
        "icon": _optional_string(raw.get("icon"), field="icon"),
        "category": _optional_string(raw.get("category"), field="category"),
        "transient": _validate_transient(raw.get("transient")),
    }

    if with_interval:
        if "interval" not in raw:
            raise NotificationValidationError("interval is required.")
        interval = parse_interval(raw["interval"])
        if interval <= timedelta(0):
            raise NotificationValidationError("interval must be greater than zero.")
        normalized["interval"] = interval

    return normalized


def _require_string(value: Any, *, field: str, max_length: Optional[int] = None) -> str:
    if value is None:
        raise NotificationValidationError(f"{field} is required.")
    if not isinstance(value, str):
        raise NotificationValidationError(f"{field} must be a string.")
    if value.strip() == "":
        raise NotificationValidationError(f"{field} must be a non-empty string.")
    if max_length is not None and len(value) > max_length:
        raise NotificationValidationError(f"{field} must be at most {max_length} characters.")
    return value


def _optional_string(value: Any, *, field: str, max_length: Optional[int] = None) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise NotificationValidationError(f"{field} must be a string.")
    stripped = value.strip()
    if not stripped:
        return None
    if max_length is not None and len(stripped) > max_length:
        raise NotificationValidationError(f"{field} must be at most {max_length} characters.")
    return stripped


def _validate_urgency(value: Any, constraints: NotificationConstraints) -> Optional[str]:
    urgency = _optional_string(value, field="urgency")
    if urgency is None:
        return None
    urgency = urgency.lower()
    if urgency not in constraints.urgencies:
        raise NotificationValidationError("urgency must be one of: low, normal, critical.")
    return urgency


def _validate_expire_time(value: Any) -> Optional[int]:
    if value is None:
        return None
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise NotificationValidationError("expire_time must be an integer number of milliseconds.")
    if value < 0:
        raise NotificationValidationError("expire_time must not be negative.")
    return value


def _validate_transient(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if not isinstance(value, bool):
        raise NotificationValidationError("transient must be true or false.")
    return value
