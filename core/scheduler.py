"""
Periodic notification loops, one daemon thread per configured notification.
"""

from __future__ import annotations

import threading
from datetime import timedelta
from typing import List, Optional

from core.dispatcher import NotificationDispatcher
from core.idle_monitor import NOTIFY_THRESHOLD, IdleGate
from pushel_core.pushel_core import logger as app_logger
from shared.notification_definition import DispatchResult, NotificationSpec
from shared.notification_schema import MAX_INTERVAL_SECONDS, NotificationValidationError

_LOGGER = app_logger.get_logger()


class NotificationScheduler:
    """
    Starts an independent wait/check/dispatch loop for each notification.

    Loops share nothing but read access to the idle gate and the stop event.
    Each one waits a full interval before its first notification; the next
    wait starts once the previous tick has finished.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        gate: IdleGate,
        *,
        idle_threshold: timedelta = NOTIFY_THRESHOLD,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._gate = gate
        self._idle_threshold = idle_threshold
        self._stop_event = stop_event or threading.Event()
        self._threads: List[threading.Thread] = []

    @property
    def threads(self) -> List[threading.Thread]:
        return list(self._threads)

    def start(self, spec: NotificationSpec) -> threading.Thread:
        """Validate `spec` and launch its loop. Raises before spawning on a bad interval."""
        if spec.interval <= timedelta(0):
            raise NotificationValidationError(
                f"Interval for {spec.label!r} must be greater than zero (got {spec.interval})."
            )
        if spec.interval.total_seconds() > MAX_INTERVAL_SECONDS:
            raise NotificationValidationError(
                f"Interval for {spec.label!r} is too long (got {spec.interval}, maximum {MAX_INTERVAL_SECONDS}s)."
            )

        thread = threading.Thread(
            target=self.run_loop,
            args=(spec,),
            name=f"pushel-reminder-{len(self._threads)}",
            daemon=True,
        )
        self._threads.append(thread)
        thread.start()
        _LOGGER.info("Scheduled {!r} every {}.", spec.label, spec.interval)
        return thread

    def stop(self) -> None:
        self._stop_event.set()

    def run_loop(self, spec: NotificationSpec) -> None:
        interval_seconds = spec.interval.total_seconds()
        while not self._stop_event.wait(interval_seconds):
            try:
                self.tick(spec)
            except Exception:
                _LOGGER.exception("Unexpected error while processing {!r}.", spec.label)
        _LOGGER.debug("Loop for {!r} stopped.", spec.label)

    def tick(self, spec: NotificationSpec) -> Optional[DispatchResult]:
        """Run one check/dispatch step. Returns None when the tick was skipped."""
        if not self._gate.is_active(self._idle_threshold):
            _LOGGER.info(
                "No activity within the last {}; skipping {!r}.",
                self._idle_threshold,
                spec.label,
            )
            return None

        result = self._dispatcher.dispatch(spec)
        if result.success:
            _LOGGER.info(
                "Notification sent: {} - {}",
                self._dispatcher.resolve_title(spec),
                spec.message,
            )
        else:
            _LOGGER.error("Failed to send notification {!r}: {}", spec.label, result.error_detail)
        return result
