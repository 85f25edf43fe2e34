from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from argus.config.migrate import SettingsStore, migrate_settings
from argus.config.schema import AppSettings
from argus.main import ArgusState
from argus.storage.models import StorageConfig
from argus.util.paths import ensure_data_tree


def test_app_settings_defaults() -> None:
    settings = AppSettings(data_dir="/tmp/argus-data")
    assert settings.bind == "127.0.0.1"
    assert settings.port == 9002
    assert settings.mirror_enabled is True
    assert settings.storage_limit_mb == 5.0


def test_app_settings_reject_bad_values() -> None:
    with pytest.raises(ValidationError):
        AppSettings(data_dir="  ")
    with pytest.raises(ValidationError):
        AppSettings(data_dir="/tmp/x", log_level="loud")


def test_storage_config_keeps_forever_by_default() -> None:
    assert StorageConfig().retention_days == 0
    assert StorageConfig().to_json() == {"retentionDays": 0}


def test_migrate_fills_missing_keys() -> None:
    migrated = migrate_settings({"port": 9100}, "/data")
    assert migrated["port"] == 9100
    assert migrated["bind"] == "127.0.0.1"
    assert migrated["data_dir"] == "/data"


def test_settings_store_bootstraps_and_updates(tmp_path, monkeypatch) -> None:
    bootstrap_path = tmp_path / "home" / "bootstrap.json"
    monkeypatch.setattr("argus.config.migrate.bootstrap_config_path", lambda: bootstrap_path)
    data_dir = tmp_path / "data"

    store = SettingsStore(cli_data_dir=str(data_dir))
    assert json.loads(bootstrap_path.read_text(encoding="utf-8")) == {"data_dir": str(data_dir.resolve())}
    assert (data_dir / "config" / "settings.json").exists()

    store.update(port=9005)
    reloaded = SettingsStore()
    assert reloaded.settings.port == 9005
    assert reloaded.settings.data_dir == str(data_dir.resolve())


def test_corrupt_settings_file_falls_back_to_defaults(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("argus.config.migrate.bootstrap_config_path", lambda: tmp_path / "bootstrap.json")
    settings_path = tmp_path / "data" / "config" / "settings.json"
    settings_path.parent.mkdir(parents=True)
    settings_path.write_text("{nope", encoding="utf-8")

    store = SettingsStore(cli_data_dir=str(tmp_path / "data"))
    assert store.settings.port == 9002


def test_data_tree_layout(tmp_path) -> None:
    layout = ensure_data_tree(tmp_path / "data")
    assert layout.database == tmp_path / "data" / "db" / "argus.db"
    assert layout.mirror == tmp_path / "data" / "db.json"
    assert layout.log_file == tmp_path / "data" / "logs" / "argus.log"
    assert layout.settings_file == tmp_path / "data" / "config" / "settings.json"
    assert layout.db_dir.is_dir()
    assert layout.logs_dir.is_dir()
    assert layout.config_dir.is_dir()


def test_state_uses_data_layout_and_shuts_down_once(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("argus.config.migrate.bootstrap_config_path", lambda: tmp_path / "bootstrap.json")

    state = ArgusState.create(data_dir=str(tmp_path / "data"), log_level="warning")
    assert state.settings_store.layout.database.exists()
    assert state.last_sweep is not None
    assert state.last_sweep.skipped is True

    state.shutdown()
    state.shutdown()
