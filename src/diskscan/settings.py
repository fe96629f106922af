"""JSON-backed settings store and scanner configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from diskscan.core.scanner import ScannerConfig
from diskscan.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "diskscan"
_SETTINGS_FILE = "settings.json"


class Settings:
    """Persistent settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("control.poll_interval_ms")  # reads data["control"]["poll_interval_ms"]
        settings.set("scanner.flush_batch_size", 64)  # writes + saves
    """

    _instance: Settings | None = None

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @classmethod
    def instance(cls) -> Settings:
        """Return the singleton settings instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key and persist to disk."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            self._data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            self._data = {}

    def _save(self) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)


def load_scanner_config(settings: Settings | None = None) -> ScannerConfig:
    """Build a :class:`ScannerConfig` from settings, keeping defaults for bad values."""
    settings = settings or Settings.instance()
    defaults = ScannerConfig()
    return ScannerConfig(
        flush_batch_size=_positive_int(settings, "scanner.flush_batch_size", defaults.flush_batch_size),
        queue_capacity=_positive_int(settings, "control.queue_capacity", defaults.queue_capacity),
        poll_interval=_positive_int(
            settings, "control.poll_interval_ms", int(defaults.poll_interval * 1000)
        ) / 1000,
    )


def _positive_int(settings: Settings, key: str, default: int) -> int:
    value = settings.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        log.warning("Invalid value for %s in %s: %r, using %d", key, settings.path, value, default)
        return default
    return value


SCANNER_KEYS = ("scanner.flush_batch_size", "control.queue_capacity", "control.poll_interval_ms")


def scanner_config_values(config: ScannerConfig) -> dict[str, int]:
    """Effective values of :data:`SCANNER_KEYS` for ``config``."""
    return {
        "scanner.flush_batch_size": config.flush_batch_size,
        "control.queue_capacity": config.queue_capacity,
        "control.poll_interval_ms": round(config.poll_interval * 1000),
    }
