"""
Loads the periodic notification list from notifications.json.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from shared.notification_definition import NotificationSpec
from shared.notification_schema import NotificationValidationError


@dataclass(slots=True)
class LoadResult:
    notifications: List[NotificationSpec]
    errors: List[Tuple[int, Exception]]


def load_notifications(path: Path) -> LoadResult:
    """
    Read and validate every entry of the notifications file.

    A file that cannot be read or parsed raises NotificationValidationError.
    Invalid entries are collected as (index, error) and skipped so that the
    remaining notifications still load.
    """
    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise NotificationValidationError(f"Notifications file not found: {path}") from exc
    except OSError as exc:
        raise NotificationValidationError(f"Unable to read notifications file: {path}") from exc

    try:
        raw_entries = json.loads(contents)
    except json.JSONDecodeError as exc:
        raise NotificationValidationError(f"Notifications file is not valid JSON: {exc}") from exc

    if not isinstance(raw_entries, list):
        raise NotificationValidationError("Notifications file root must be a JSON array.")

    notifications: List[NotificationSpec] = []
    errors: List[Tuple[int, Exception]] = []
    for index, raw in enumerate(raw_entries):
        try:
            notifications.append(NotificationSpec.from_dict(raw))
        except NotificationValidationError as exc:
            errors.append((index, exc))

    return LoadResult(notifications=notifications, errors=errors)
