from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from argus.util.logging import get_logger
from argus.util.paths import DataLayout, bootstrap_config_path, ensure_data_tree, resolve_data_dir

from .defaults import (
    APP_VERSION,
    DEFAULT_BIND,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    DEFAULT_STORAGE_LIMIT_MB,
    default_data_dir,
)
from .schema import AppSettings

logger = get_logger(__name__)


class SettingsStore:
    def __init__(self, cli_data_dir: str | None = None) -> None:
        self.bootstrap_path = bootstrap_config_path()
        self.bootstrap_path.parent.mkdir(parents=True, exist_ok=True)
        bootstrap = self._read_json(self.bootstrap_path, default={})

        configured = bootstrap.get("data_dir")
        chosen_dir = resolve_data_dir(cli_data_dir or configured or str(default_data_dir()))
        self._layout = ensure_data_tree(chosen_dir)

        self.settings_path = self._layout.settings_file
        raw_settings = self._read_json(self.settings_path, default={})
        migrated = migrate_settings(raw_settings, str(chosen_dir))
        self._settings = AppSettings.model_validate(migrated)
        self._settings.data_dir = str(chosen_dir)
        self.save()
        self._write_json(self.bootstrap_path, {"data_dir": str(chosen_dir)})

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def layout(self) -> DataLayout:
        return self._layout

    def update(self, **changes: Any) -> AppSettings:
        merged = self._settings.model_dump()
        merged.update(changes)
        self._settings = AppSettings.model_validate(merged)
        self.save()
        return self._settings

    def save(self) -> None:
        payload = self._settings.model_dump(mode="json")
        self._write_json(self.settings_path, payload)

    @staticmethod
    def _read_json(path: Path, default: dict[str, Any]) -> dict[str, Any]:
        if not path.exists():
            return default
        try:
            loaded = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable settings file %s", path)
            return default
        return loaded if isinstance(loaded, dict) else default

    @staticmethod
    def _write_json(path: Path, payload: dict[str, Any]) -> None:
        path.write_text(json.dumps(payload, ensure_ascii=True, indent=2), encoding="utf-8")


def migrate_settings(raw: dict[str, Any], data_dir: str) -> dict[str, Any]:
    if not raw:
        return {
            "version": APP_VERSION,
            "data_dir": data_dir,
            "bind": DEFAULT_BIND,
            "port": DEFAULT_PORT,
            "log_level": DEFAULT_LOG_LEVEL,
            "mirror_enabled": True,
            "storage_limit_mb": DEFAULT_STORAGE_LIMIT_MB,
        }

    raw.setdefault("version", APP_VERSION)
    raw.setdefault("data_dir", data_dir)
    raw.setdefault("bind", DEFAULT_BIND)
    raw.setdefault("port", DEFAULT_PORT)
    raw.setdefault("log_level", DEFAULT_LOG_LEVEL)
    raw.setdefault("mirror_enabled", True)
    raw.setdefault("storage_limit_mb", DEFAULT_STORAGE_LIMIT_MB)
    return raw
