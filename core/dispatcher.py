"""
Renders notifications through the freedesktop `notify-send` command.
"""

from __future__ import annotations

import subprocess
from typing import Callable, List

from shared.notification_definition import AdhocNotification, DispatchResult

DEFAULT_COMMAND = "notify-send"
DEFAULT_TIMEOUT_SECONDS = 10


class NotificationDispatcher:
    """
    Builds one `notify-send` invocation per notification and runs it
    synchronously. Delivery failures are returned, never raised.
    """

    def __init__(
        self,
        default_title: str,
        *,
        command: str = DEFAULT_COMMAND,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.default_title = default_title
        self._command = command
        self._runner = runner
        self._timeout_seconds = timeout_seconds

    def resolve_title(self, notification: AdhocNotification) -> str:
        title = notification.title
        if title is None or not title.strip():
            return self.default_title
        return title

    def build_command(self, notification: AdhocNotification) -> List[str]:
        args = [self._command]
        if notification.urgency is not None:
            args.append(f"--urgency={notification.urgency}")
        if notification.expire_time is not None:
            args.append(f"--expire-time={notification.expire_time}")
        if notification.app_name is not None:
            args.append(f"--app-name={notification.app_name}")
        if notification.icon is not None:
            args.append(f"--icon={notification.icon}")
        if notification.category is not None:
            args.append(f"--category={notification.category}")
        if notification.transient:
            args.append("--transient")
        # Title or message starting with "-" must not be read as an option.
        args.append("--")
        args.extend([self.resolve_title(notification), notification.message])
        return args

    def dispatch(self, notification: AdhocNotification) -> DispatchResult:
        args = self.build_command(notification)
        try:
            completed = self._runner(
                args,
                capture_output=True,
                text=True,
                timeout=self._timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            return DispatchResult.failed(
                f"{self._command} did not finish within {self._timeout_seconds} seconds."
            )
        except (OSError, subprocess.SubprocessError) as exc:
            return DispatchResult.failed(f"Unable to run {self._command}: {exc}")

        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip()
            detail = f"{self._command} exited with code {completed.returncode}."
            if stderr:
                detail += f" Stderr: {stderr[-200:]}"
            return DispatchResult.failed(detail)

        return DispatchResult.ok()
