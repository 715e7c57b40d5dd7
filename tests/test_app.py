"""Tests for process wiring: the coordinator and the entry point."""

import logging
import threading
from datetime import timedelta

import pytest
from loguru import logger as loguru_logger

from core.app import AppCoordinator
from core.settings import AppSettings
from core.status_reporter import HomeAssistantReporter
from pushel_core import main as entry
from pushel_core.pushel_core import logger as app_logger
from shared.notification_definition import DispatchResult, NotificationSpec


class FakeDispatcher:
    def resolve_title(self, notification):
        return notification.title or "Erinnerung"

    def dispatch(self, notification):
        return DispatchResult.ok()


def _coordinator(settings=None, notifications=()):
    return AppCoordinator(
        settings=settings or AppSettings(webserver_enabled=False),
        notifications=list(notifications),
        idle_seconds_provider=lambda: 0.0,
        dispatcher=FakeDispatcher(),
    )


# ---------------------------------------------------------------------------
# AppCoordinator
# ---------------------------------------------------------------------------

class TestAppCoordinator:
    def test_start_schedules_valid_and_skips_zero_interval(self):
        coordinator = _coordinator(
            notifications=[
                NotificationSpec(message="a", interval=timedelta(minutes=30)),
                NotificationSpec(message="b", interval=timedelta(0)),
                NotificationSpec(message="c", interval=timedelta(minutes=45)),
            ]
        )
        try:
            assert coordinator.start() == 2
            assert len(coordinator.scheduler.threads) == 2
        finally:
            coordinator.shutdown()
        assert coordinator.stopped

    def test_reporter_only_when_configured(self):
        assert _coordinator().reporter is None
        configured = _coordinator(
            AppSettings(
                webserver_enabled=False,
                homeassistant_url="http://ha.local:8123",
                homeassistant_api_key="token",
            )
        )
        assert isinstance(configured.reporter, HomeAssistantReporter)

    def test_default_dispatcher_uses_default_title(self):
        coordinator = AppCoordinator(settings=AppSettings(default_title="Reminder"))
        assert coordinator.dispatcher.default_title == "Reminder"

    def test_server_logs_go_through_loguru(self):
        coordinator = _coordinator(AppSettings(listen_address="127.0.0.1", port=3031))
        server = coordinator.build_server()
        assert server.config.log_config is None
        assert server.config.port == 3031

        messages = []
        sink_id = loguru_logger.add(messages.append, format="{message}", level="INFO")
        try:
            logging.getLogger("uvicorn.error").info("Started server process")
        finally:
            loguru_logger.remove(sink_id)
        assert any("Started server process" in message for message in messages)

    def test_run_without_webserver_blocks_until_shutdown(self):
        coordinator = _coordinator()
        runner = threading.Thread(target=coordinator.run, daemon=True)
        runner.start()
        coordinator.shutdown()
        runner.join(2.0)
        assert not runner.is_alive()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

@pytest.fixture
def quiet_logging(monkeypatch):
    monkeypatch.setattr(app_logger, "configure", lambda *args, **kwargs: None)


class TestMain:
    def test_unreadable_config_exits_non_zero(self, tmp_path, quiet_logging):
        (tmp_path / "config.json").write_text("{broken", encoding="utf-8")
        assert entry.main(tmp_path) == 1

    def test_unparseable_notifications_exit_non_zero(self, tmp_path, quiet_logging):
        (tmp_path / "config.json").write_text("{}", encoding="utf-8")
        (tmp_path / "notifications.json").write_text("{}", encoding="utf-8")
        assert entry.main(tmp_path) == 1

    def test_first_start_creates_defaults(self, tmp_path, quiet_logging):
        coordinator = entry.build_coordinator(tmp_path / "pushel")
        assert (tmp_path / "pushel" / "config.json").exists()
        assert len(coordinator.notifications) == 5
        assert coordinator.settings.default_title == "Erinnerung"

    def test_bad_entries_are_skipped(self, tmp_path, quiet_logging):
        (tmp_path / "config.json").write_text('{"webserver_enabled": false}', encoding="utf-8")
        (tmp_path / "notifications.json").write_text(
            '[{"message": "ok", "interval": "30m"}, {"message": "bad", "interval": "10"}]',
            encoding="utf-8",
        )
        coordinator = entry.build_coordinator(tmp_path)
        assert [n.message for n in coordinator.notifications] == ["ok"]

    def test_main_runs_coordinator(self, tmp_path, quiet_logging, monkeypatch):
        ran = []
        monkeypatch.setattr(AppCoordinator, "run", lambda self: ran.append(self))
        assert entry.main(tmp_path / "pushel") == 0
        assert len(ran) == 1
