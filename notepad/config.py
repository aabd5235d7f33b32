"""Configuration management for Notepad."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from notepad.data.contract import DEFAULT_UNTITLED_TITLE
from notepad.data.schema import DATABASE_NAME

_CONFIG_VERSION = 1

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

logger = logging.getLogger(__name__)


def _default_config_path() -> Path:
    """Get default config file path following XDG spec."""
    config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_home / "notepad" / "config.json"


def _default_db_path() -> str:
    data_home = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return str(data_home / "notepad" / DATABASE_NAME)


class Config:
    """Application configuration with persistence."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._path = config_path or _default_config_path()
        self._data: dict[str, Any] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        """Load config from disk or return defaults."""
        if not self._path.exists():
            return self._defaults()
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", self._path, exc)
            return self._defaults()
        if not isinstance(data, dict) or data.get("version") != _CONFIG_VERSION:
            logger.warning("Ignoring config %s with unknown version", self._path)
            return self._defaults()
        return {**self._defaults(), **data}

    def _defaults(self) -> dict[str, Any]:
        """Return default configuration."""
        return {
            "version": _CONFIG_VERSION,
            "db_path": os.getenv("NOTEPAD_DB_PATH", _default_db_path()),
            "untitled_title": DEFAULT_UNTITLED_TITLE,
            "host": os.getenv("NOTEPAD_HOST", "127.0.0.1"),
            "port": int(os.getenv("NOTEPAD_PORT", "8765")),
            "log_level": os.getenv("NOTEPAD_LOG_LEVEL", "INFO").upper(),
        }

    def save(self) -> None:
        """Persist config to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)

    # -- Getters --

    @property
    def db_path(self) -> str:
        return str(self._data.get("db_path") or _default_db_path())

    @property
    def untitled_title(self) -> str:
        return str(self._data.get("untitled_title") or DEFAULT_UNTITLED_TITLE)

    @property
    def host(self) -> str:
        return str(self._data.get("host", "127.0.0.1"))

    @property
    def port(self) -> int:
        return int(self._data.get("port", 8765))

    @property
    def log_level(self) -> str:
        level = str(self._data.get("log_level", "INFO")).upper()
        return level if level in _LOG_LEVELS else "INFO"

    # -- Setters --

    def set_db_path(self, value: str) -> None:
        self._data["db_path"] = value.strip()

    def set_untitled_title(self, value: str) -> None:
        value = value.strip()
        if not value:
            raise ValueError("Untitled title cannot be empty")
        self._data["untitled_title"] = value

    def set_host(self, value: str) -> None:
        self._data["host"] = value.strip()

    def set_port(self, value: int) -> None:
        port = int(value)
        if not 0 < port < 65536:
            raise ValueError(f"Port out of range: {port}")
        self._data["port"] = port

    def set_log_level(self, value: str) -> None:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        self._data["log_level"] = level
