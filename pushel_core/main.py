"""
Entry point for the pushel reminder daemon.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from core.app import AppCoordinator
from core.notification_loader import load_notifications
from core.settings import SettingsError, SettingsManager
from pushel_core.pushel_core import logger as app_logger
from shared.notification_schema import NotificationValidationError

_LOGGER = app_logger.get_logger()


def build_coordinator(config_dir: Optional[Path] = None) -> AppCoordinator:
    """Load configuration and notifications. Raises on unrecoverable config errors."""
    manager = SettingsManager(config_dir)
    manager.ensure_defaults()
    settings = manager.read_settings()
    app_logger.configure(settings.log_format)
    _LOGGER.info("Configuration loaded: {}", manager.config_path)

    result = load_notifications(manager.notifications_path)
    for index, error in result.errors:
        _LOGGER.warning("Skipping notification #{} in {}: {}", index, manager.notifications_path, error)
    _LOGGER.info(
        "Notifications loaded: {} ({} valid)",
        manager.notifications_path,
        len(result.notifications),
    )
    return AppCoordinator(settings=settings, notifications=result.notifications)


def main(config_dir: Optional[Path] = None) -> int:
    """Launch the daemon; returns a non-zero exit code on startup failure."""
    try:
        coordinator = build_coordinator(config_dir)
    except (SettingsError, NotificationValidationError, OSError) as exc:
        _LOGGER.error("Cannot start pushel: {}", exc)
        return 1

    try:
        coordinator.run()
    except KeyboardInterrupt:
        coordinator.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
