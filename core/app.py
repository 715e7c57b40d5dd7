"""
Application coordinator wiring the scheduler, activity monitor and HTTP API.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import uvicorn

from core.api import create_app
from core.dispatcher import NotificationDispatcher
from core.idle_monitor import ActivityMonitor, IdleGate
from core.scheduler import NotificationScheduler
from core.settings import AppSettings
from core.status_reporter import HomeAssistantReporter
from pushel_core.pushel_core import logger as app_logger
from shared.notification_definition import NotificationSpec
from shared.notification_schema import NotificationValidationError

APP_NAME = "Pushel"
APP_VERSION = "1.0.0"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


@dataclass
class AppCoordinator:
    settings: AppSettings
    notifications: List[NotificationSpec] = field(default_factory=list)
    gate: IdleGate = field(default_factory=IdleGate)
    idle_seconds_provider: Optional[Callable[[], float]] = None
    dispatcher: Optional[NotificationDispatcher] = None

    def __post_init__(self) -> None:
        self._logger = app_logger.get_logger()
        self._stop_event = threading.Event()
        if self.dispatcher is None:
            self.dispatcher = NotificationDispatcher(self.settings.default_title)

        self.reporter: Optional[HomeAssistantReporter] = None
        if self.settings.reports_activity:
            self.reporter = HomeAssistantReporter(
                self.settings.homeassistant_url,
                self.settings.homeassistant_api_key,
            )

        self.activity_monitor = ActivityMonitor(
            self.gate,
            self.idle_seconds_provider,
            on_status_change=self.reporter.notify if self.reporter else None,
            stop_event=self._stop_event,
        )
        self.scheduler = NotificationScheduler(self.dispatcher, self.gate, stop_event=self._stop_event)
        self._server: Optional[uvicorn.Server] = None

    def start(self) -> int:
        """Start background loops and return the number of scheduled notifications."""
        self._logger.info("Starting {} v{}.", APP_NAME, APP_VERSION)
        self.activity_monitor.start()

        scheduled = 0
        for spec in self.notifications:
            try:
                self.scheduler.start(spec)
            except NotificationValidationError as exc:
                self._logger.warning("Skipping notification {!r}: {}", spec.label, exc)
                continue
            scheduled += 1
        self._logger.info("{} periodic notification(s) scheduled.", scheduled)
        return scheduled

    def run(self) -> None:
        """Start everything and block until shutdown."""
        self.start()
        if self.settings.webserver_enabled:
            self._serve()
        else:
            self._logger.info("Web server disabled; running scheduled notifications only.")
            self._stop_event.wait()

    def shutdown(self) -> None:
        self._logger.info("Shutting down.")
        self._stop_event.set()
        if self._server is not None:
            self._server.should_exit = True

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def build_server(self) -> uvicorn.Server:
        """Create the uvicorn server with its loggers routed through loguru."""
        config = uvicorn.Config(
            create_app(self.dispatcher),
            host=self.settings.listen_address,
            port=self.settings.port,
            log_level="info",
            log_config=None,
        )
        app_logger.intercept_stdlib(UVICORN_LOGGERS)
        return uvicorn.Server(config)

    def _serve(self) -> None:
        self._server = self.build_server()
        self._logger.info(
            "Web server listening on http://{}:{}",
            self.settings.listen_address,
            self.settings.port,
        )
        try:
            self._server.run()
        finally:
            self.shutdown()
