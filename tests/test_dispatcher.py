"""Tests for the notify-send dispatcher."""

import subprocess
from datetime import timedelta

from core.dispatcher import NotificationDispatcher
from shared.notification_definition import AdhocNotification, NotificationSpec


class FakeRunner:
    def __init__(self, returncode: int = 0, stderr: str = "", exc: Exception = None) -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.exc = exc
        self.calls = []

    def __call__(self, args, **kwargs):
        self.calls.append((args, kwargs))
        if self.exc is not None:
            raise self.exc
        return subprocess.CompletedProcess(args, self.returncode, stdout="", stderr=self.stderr)


def _dispatcher(runner) -> NotificationDispatcher:
    return NotificationDispatcher("Erinnerung", runner=runner)


# ---------------------------------------------------------------------------
# Command construction
# ---------------------------------------------------------------------------

class TestBuildCommand:
    def test_minimal_notification(self):
        dispatcher = _dispatcher(FakeRunner())
        args = dispatcher.build_command(AdhocNotification(title="Hallo", message="Welt"))
        assert args == ["notify-send", "--", "Hallo", "Welt"]

    def test_all_options(self):
        dispatcher = _dispatcher(FakeRunner())
        spec = NotificationSpec(
            title="Erinnerung",
            message="Trink Wasser!",
            interval=timedelta(minutes=30),
            urgency="low",
            expire_time=5000,
            app_name="Pushel",
            icon="dialog-information",
            category="reminder",
            transient=True,
        )
        assert dispatcher.build_command(spec) == [
            "notify-send",
            "--urgency=low",
            "--expire-time=5000",
            "--app-name=Pushel",
            "--icon=dialog-information",
            "--category=reminder",
            "--transient",
            "--",
            "Erinnerung",
            "Trink Wasser!",
        ]

    def test_transient_false_omits_flag(self):
        dispatcher = _dispatcher(FakeRunner())
        args = dispatcher.build_command(AdhocNotification(message="Hi", transient=False))
        assert "--transient" not in args

    def test_expire_time_zero_is_passed(self):
        dispatcher = _dispatcher(FakeRunner())
        args = dispatcher.build_command(AdhocNotification(message="Hi", expire_time=0))
        assert "--expire-time=0" in args

    def test_default_title_when_missing_or_blank(self):
        dispatcher = _dispatcher(FakeRunner())
        assert dispatcher.build_command(AdhocNotification(message="Hi"))[-2:] == ["Erinnerung", "Hi"]
        assert dispatcher.build_command(AdhocNotification(title="", message="Hi"))[-2] == "Erinnerung"
        assert dispatcher.build_command(AdhocNotification(title="  ", message="Hi"))[-2] == "Erinnerung"

    def test_dash_prefixed_text_follows_separator(self):
        dispatcher = _dispatcher(FakeRunner())
        args = dispatcher.build_command(AdhocNotification(title="-t", message="--version"))
        assert args == ["notify-send", "--", "-t", "--version"]

    def test_separator_follows_options(self):
        dispatcher = _dispatcher(FakeRunner())
        args = dispatcher.build_command(AdhocNotification(message="--icon=x", urgency="low"))
        assert args == ["notify-send", "--urgency=low", "--", "Erinnerung", "--icon=x"]

    def test_custom_command(self):
        dispatcher = NotificationDispatcher("T", command="/usr/local/bin/notify-send", runner=FakeRunner())
        assert dispatcher.build_command(AdhocNotification(message="Hi"))[0] == "/usr/local/bin/notify-send"


# ---------------------------------------------------------------------------
# dispatch
# ---------------------------------------------------------------------------

class TestDispatch:
    def test_success(self):
        runner = FakeRunner()
        result = _dispatcher(runner).dispatch(AdhocNotification(message="Hi"))
        assert result.success
        assert result.error_detail is None
        args, kwargs = runner.calls[0]
        assert args == ["notify-send", "--", "Erinnerung", "Hi"]
        assert kwargs["timeout"] == 10
        assert kwargs["capture_output"] is True

    def test_non_zero_exit(self):
        runner = FakeRunner(returncode=1, stderr="Cannot connect to notification daemon\n")
        result = _dispatcher(runner).dispatch(AdhocNotification(message="Hi"))
        assert not result.success
        assert "exited with code 1" in result.error_detail
        assert "Cannot connect to notification daemon" in result.error_detail

    def test_missing_command(self):
        runner = FakeRunner(exc=FileNotFoundError(2, "No such file or directory", "notify-send"))
        result = _dispatcher(runner).dispatch(AdhocNotification(message="Hi"))
        assert not result.success
        assert result.error_detail.startswith("Unable to run notify-send")

    def test_timeout(self):
        runner = FakeRunner(exc=subprocess.TimeoutExpired("notify-send", 10))
        result = _dispatcher(runner).dispatch(AdhocNotification(message="Hi"))
        assert not result.success
        assert "did not finish within 10 seconds" in result.error_detail
