"""
Pushes the user's activity state to a Home Assistant sensor.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

import httpx

from core.idle_monitor import ActivityStatus
from pushel_core.pushel_core import logger as app_logger

_LOGGER = app_logger.get_logger()

SENSOR_ENTITY_ID = "sensor.pushel_motion"
SENSOR_FRIENDLY_NAME = "Pushel Motion Detection"


class ActivityReportError(RuntimeError):
    """Raised when Home Assistant rejects or cannot receive a status update."""


class HomeAssistantReporter:
    """Fire-and-forget status sink; failed updates are logged and dropped."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/api/states/{SENSOR_ENTITY_ID}"
        self._api_key = api_key
        self._client = client
        self._timeout = timeout

    def notify(self, status: ActivityStatus) -> threading.Thread:
        """Report `status` on a background thread and return that thread."""
        worker = threading.Thread(
            target=self.report,
            args=(status,),
            name=f"pushel-ha-{status.value}",
            daemon=True,
        )
        worker.start()
        return worker

    def report(self, status: ActivityStatus) -> bool:
        try:
            self._post(status)
        except ActivityReportError as exc:
            _LOGGER.error("Failed to push status to Home Assistant: {}", exc)
            return False
        _LOGGER.info("Pushed activity status to Home Assistant: {}", status.value)
        return True

    def build_payload(self, status: ActivityStatus, *, timestamp: Optional[int] = None) -> dict:
        return {
            "state": status.value,
            "attributes": {
                "friendly_name": SENSOR_FRIENDLY_NAME,
                "last_update": int(time.time()) if timestamp is None else timestamp,
                "device_class": "motion",
            },
        }

    def _post(self, status: ActivityStatus) -> None:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        payload = self.build_payload(status)
        try:
            if self._client is not None:
                response = self._client.post(self.url, json=payload, headers=headers, timeout=self._timeout)
            else:
                response = httpx.post(self.url, json=payload, headers=headers, timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise ActivityReportError(f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise ActivityReportError(f"HTTP {response.status_code}: {response.text[:200]}")
