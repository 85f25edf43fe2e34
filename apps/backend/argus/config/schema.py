from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from .defaults import (
    APP_VERSION,
    DEFAULT_BIND,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    DEFAULT_STORAGE_LIMIT_MB,
)


class AppSettings(BaseModel):
    version: int = APP_VERSION
    data_dir: str
    bind: str = DEFAULT_BIND
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    mirror_enabled: bool = True
    storage_limit_mb: float = Field(default=DEFAULT_STORAGE_LIMIT_MB, gt=0)

    @field_validator("data_dir")
    @classmethod
    def data_dir_not_empty(cls, value: str) -> str:
        if not value.strip():
            msg = "data_dir cannot be empty"
            raise ValueError(msg)
        return value

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        lowered = value.lower()
        if lowered not in {"critical", "error", "warning", "info", "debug"}:
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return lowered
