from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

APP_DIR_NAME = "argus"


@dataclass(frozen=True)
class DataLayout:
    """Where Argus keeps its runtime files under one data directory.

    ``database`` holds the record store, ``mirror`` is the best-effort
    ``db.json`` camera copy, and the rotating JSON log lives in ``logs/``.
    """

    root: Path

    @property
    def db_dir(self) -> Path:
        return self.root / "db"

    @property
    def database(self) -> Path:
        return self.db_dir / "argus.db"

    @property
    def mirror(self) -> Path:
        return self.root / "db.json"

    @property
    def logs_dir(self) -> Path:
        return self.root / "logs"

    @property
    def log_file(self) -> Path:
        return self.logs_dir / "argus.log"

    @property
    def config_dir(self) -> Path:
        return self.root / "config"

    @property
    def settings_file(self) -> Path:
        return self.config_dir / "settings.json"


def platform_default_data_dir() -> Path:
    home = Path.home()
    if sys.platform.startswith("win"):
        return Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local")) / APP_DIR_NAME
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / APP_DIR_NAME
    return Path(os.environ.get("XDG_DATA_HOME", home / ".local" / "share")) / APP_DIR_NAME


def bootstrap_config_path() -> Path:
    return Path.home() / f".{APP_DIR_NAME}" / "bootstrap.json"


def ensure_data_tree(data_dir: Path) -> DataLayout:
    layout = DataLayout(root=data_dir)
    for directory in (layout.root, layout.db_dir, layout.logs_dir, layout.config_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return layout


def resolve_data_dir(cli_data_dir: str | None) -> Path:
    if cli_data_dir:
        return Path(cli_data_dir).expanduser().resolve()
    return platform_default_data_dir().resolve()
