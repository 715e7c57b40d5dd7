"""
File-backed configuration for the pushel daemon.
"""

from __future__ import annotations

import ipaddress
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pushel_core.pushel_core import logger as app_logger
from pushel_core.pushel_core.logger import LOG_FORMATS

_LOGGER = app_logger.get_logger()

CONFIG_DIR_ENV = "PUSHEL_CONFIG_DIR"
CONFIG_FILENAME = "config.json"
NOTIFICATIONS_FILENAME = "notifications.json"
_MIN_PORT = 1
_MAX_PORT = 65535

DEFAULT_CONFIG: Dict[str, Any] = {
    "listen_address": "0.0.0.0",
    "port": 3030,
    "webserver_enabled": True,
    "default_title": "Erinnerung",
    "log_format": "pretty",
    "homeassistant_url": None,
    "homeassistant_api_key": None,
}


def _reminder(message: str, interval: str, urgency: str) -> Dict[str, Any]:
    return {
        "title": "Erinnerung",
        "message": message,
        "interval": interval,
        "urgency": urgency,
        "expire_time": 5000,
        "app_name": "Pushel",
        "icon": "dialog-information",
        "category": "reminder",
        "transient": True,
    }


DEFAULT_NOTIFICATIONS = [
    _reminder("Trink Wasser!", "30m", "low"),
    _reminder("Mach mal Pause und strecke dich!", "2h", "normal"),
    _reminder("Schau in die Ferne, um deine Augen zu entspannen!", "40m", "low"),
    _reminder("Stehe auf und gehe ein paar Schritte!", "1h", "normal"),
    _reminder("Überprüfe deine Sitzhaltung!", "15m", "low"),
]


class SettingsError(ValueError):
    """Raised when config.json cannot be read or holds invalid values."""


@dataclass(eq=True)
class AppSettings:
    listen_address: str = "0.0.0.0"
    port: int = 3030
    webserver_enabled: bool = True
    default_title: str = "Erinnerung"
    log_format: str = "pretty"
    homeassistant_url: Optional[str] = None
    homeassistant_api_key: Optional[str] = None

    @property
    def reports_activity(self) -> bool:
        return bool(self.homeassistant_url and self.homeassistant_api_key)


def resolve_config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    override = env.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    xdg_config = env.get("XDG_CONFIG_HOME")
    base = Path(xdg_config) if xdg_config else Path.home() / ".config"
    return base / "pushel"


class SettingsManager:
    """Creates default config files on first start and loads config.json."""

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self.config_dir = Path(config_dir) if config_dir is not None else resolve_config_dir()

    @property
    def config_path(self) -> Path:
        return self.config_dir / CONFIG_FILENAME

    @property
    def notifications_path(self) -> Path:
        return self.config_dir / NOTIFICATIONS_FILENAME

    def ensure_defaults(self) -> bool:
        """Write default files if the config directory is missing. Returns True if created."""
        if self.config_dir.exists():
            return False
        _LOGGER.info("Creating default configuration in {}", self.config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n", encoding="utf-8")
        self.notifications_path.write_text(
            json.dumps(DEFAULT_NOTIFICATIONS, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        return True

    def read_settings(self) -> AppSettings:
        try:
            contents = self.config_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SettingsError(f"Unable to read {self.config_path}: {exc}") from exc

        try:
            raw = json.loads(contents)
        except json.JSONDecodeError as exc:
            raise SettingsError(f"{self.config_path} is not valid JSON: {exc}") from exc

        if not isinstance(raw, dict):
            raise SettingsError(f"{self.config_path} root must be a JSON object.")

        defaults = AppSettings()
        return AppSettings(
            listen_address=self._read_listen_address(raw),
            port=self._read_port(raw),
            webserver_enabled=self._read_bool(raw, "webserver_enabled", defaults.webserver_enabled),
            default_title=self._read_string(raw, "default_title", defaults.default_title),
            log_format=self._read_log_format(raw),
            homeassistant_url=self._read_optional_string(raw, "homeassistant_url"),
            homeassistant_api_key=self._read_optional_string(raw, "homeassistant_api_key"),
        )

    def _read_string(self, raw: Dict[str, Any], name: str, default: str) -> str:
        value = raw.get(name)
        if value is None:
            return default
        if not isinstance(value, str) or not value.strip():
            raise SettingsError(f"{name} must be a non-empty string.")
        return value

    def _read_listen_address(self, raw: Dict[str, Any]) -> str:
        value = self._read_string(raw, "listen_address", AppSettings().listen_address)
        try:
            ipaddress.ip_address(value)
        except ValueError as exc:
            raise SettingsError(f"listen_address must be an IP address (got {value!r}).") from exc
        return value

    def _read_optional_string(self, raw: Dict[str, Any], name: str) -> Optional[str]:
        value = raw.get(name)
        if value is None:
            return None
        if not isinstance(value, str):
            raise SettingsError(f"{name} must be a string or null.")
        return value.strip() or None

    def _read_bool(self, raw: Dict[str, Any], name: str, default: bool) -> bool:
        value = raw.get(name)
        if value is None:
            return default
        if not isinstance(value, bool):
            raise SettingsError(f"{name} must be true or false.")
        return value

    def _read_port(self, raw: Dict[str, Any]) -> int:
        value = raw.get("port")
        if value is None:
            return AppSettings().port
        if isinstance(value, bool) or not isinstance(value, int):
            raise SettingsError("port must be an integer.")
        if value < _MIN_PORT or value > _MAX_PORT:
            raise SettingsError(f"port must be between {_MIN_PORT} and {_MAX_PORT} (got {value}).")
        return value

    def _read_log_format(self, raw: Dict[str, Any]) -> str:
        value = raw.get("log_format")
        if value is None:
            return AppSettings().log_format
        if value not in LOG_FORMATS:
            _LOGGER.warning("Unknown log_format {!r}; falling back to 'pretty'.", value)
            return "pretty"
        return value
