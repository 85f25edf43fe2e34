from __future__ import annotations

from dataclasses import dataclass

from argus.config.defaults import DEFAULT_STORAGE_LIMIT_MB

from .store import (
    ACTIVE_USER_KEY,
    CAMERAS_KEY,
    LAYOUTS_KEY,
    RECORDINGS_KEY,
    STORAGE_CONFIG_KEY,
    USERS_KEY,
    RecordStore,
)

USAGE_KEYS = (RECORDINGS_KEY, USERS_KEY, LAYOUTS_KEY, CAMERAS_KEY, STORAGE_CONFIG_KEY, ACTIVE_USER_KEY)

KIB = 1024
MIB = 1024 * 1024


@dataclass(frozen=True)
class StorageUsage:
    bytes: int
    formatted: str


def format_bytes(size: int) -> str:
    if size < KIB:
        return f"{size} B"
    if size < MIB:
        return f"{size / KIB:.2f} KB"
    return f"{size / MIB:.2f} MB"


def get_storage_usage(store: RecordStore) -> StorageUsage:
    """Estimate how much data the tracked keys hold, as UTF-8 bytes."""
    if not store.available:
        return StorageUsage(0, format_bytes(0))
    blob = "".join(store.raw(key) for key in USAGE_KEYS)
    size = len(blob.encode("utf-8"))
    return StorageUsage(size, format_bytes(size))


def usage_percent(usage: StorageUsage, limit_mb: float = DEFAULT_STORAGE_LIMIT_MB) -> float:
    if limit_mb <= 0:
        return 100.0
    return round(min(usage.bytes / MIB / limit_mb * 100, 100.0), 2)
