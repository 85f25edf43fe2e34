from __future__ import annotations

from pathlib import Path

from argus.util.paths import platform_default_data_dir

APP_VERSION = 1
APP_RELEASE = "0.1.0"
DEFAULT_BIND = "127.0.0.1"
DEFAULT_PORT = 9002
DEFAULT_LOG_LEVEL = "info"
DEFAULT_RETENTION_DAYS = 0
RETENTION_CHOICES = (0, 1, 7, 30, 90)
DEFAULT_STORAGE_LIMIT_MB = 5.0
DEFAULT_THUMBNAIL_URL = "https://placehold.co/800x600.png"


def default_data_dir() -> Path:
    return platform_default_data_dir()
