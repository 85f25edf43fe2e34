from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

from argus.util.logging import get_logger

from .medium import Medium

logger = get_logger(__name__)

T = TypeVar("T")

CAMERAS_KEY = "cameras"
LAYOUTS_KEY = "layouts"
RECORDINGS_KEY = "recordings"
USERS_KEY = "users"
ACTIVE_USER_KEY = "activeUser"
STORAGE_CONFIG_KEY = "storageConfig"
EVENTS_KEY = "events"

TRACKED_KEYS = (
    CAMERAS_KEY,
    LAYOUTS_KEY,
    RECORDINGS_KEY,
    USERS_KEY,
    ACTIVE_USER_KEY,
    STORAGE_CONFIG_KEY,
    EVENTS_KEY,
)


class DecodeError(Exception):
    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.reason = reason


@dataclass
class DecodeResult:
    value: Any = None
    error: DecodeError | None = None
    present: bool = True

    @property
    def ok(self) -> bool:
        return self.present and self.error is None


def decode_value(key: str, raw: str | None) -> DecodeResult:
    if not raw:
        return DecodeResult(present=False)
    try:
        return DecodeResult(value=json.loads(raw))
    except json.JSONDecodeError as exc:
        return DecodeResult(error=DecodeError(key, f"{exc.msg} at char {exc.pos}"))


def encode_value(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class RecordStore:
    """JSON get/set over a flat key-value medium.

    Reads never raise: a missing key, undecodable value or absent medium
    yields the caller's fallback. Writes replace the whole value and, like
    reads, are skipped when there is no medium.
    """

    def __init__(self, medium: Medium | None) -> None:
        self.medium = medium
        self.decode_failures: dict[str, int] = {}
        self._staged: dict[str, str | None] | None = None

    @property
    def available(self) -> bool:
        return self.medium is not None

    def _read_raw(self, key: str) -> str | None:
        if self._staged is not None and key in self._staged:
            return self._staged[key]
        if self.medium is None:
            return None
        try:
            return self.medium.get_item(key)
        except (sqlite3.Error, OSError):
            logger.exception("Failed to read key %s", key)
            return None

    def raw(self, key: str) -> str:
        return self._read_raw(key) or ""

    def get(self, key: str, fallback: T) -> Any | T:
        result = decode_value(key, self._read_raw(key))
        if result.error is not None:
            self.decode_failures[key] = self.decode_failures.get(key, 0) + 1
            logger.warning("Discarding undecodable value for %s: %s", key, result.error.reason)
            return fallback
        if not result.present:
            return fallback
        return result.value

    def set(self, key: str, value: Any) -> bool:
        try:
            encoded = encode_value(value)
        except (TypeError, ValueError):
            logger.exception("Refusing to store unserialisable value for %s", key)
            return False
        return self._write(key, encoded)

    def remove(self, key: str) -> bool:
        return self._write(key, None)

    def _write(self, key: str, encoded: str | None) -> bool:
        if self._staged is not None:
            self._staged[key] = encoded
            return self.available
        if self.medium is None:
            logger.debug("No storage medium; skipped write to %s", key)
            return False
        try:
            if encoded is None:
                self.medium.remove_item(key)
            else:
                self.medium.set_item(key, encoded)
        except (sqlite3.Error, OSError):
            logger.exception("Failed to write key %s", key)
            return False
        return True

    @contextmanager
    def transaction(self) -> Iterator[RecordStore]:
        """Stage writes and flush them together when the block exits cleanly."""
        if self._staged is not None:
            yield self
            return
        self._staged = {}
        try:
            yield self
        except BaseException:
            self._staged = None
            raise
        staged, self._staged = self._staged, None
        if not staged:
            return
        if self.medium is None:
            logger.debug("No storage medium; skipped writes to %s", ", ".join(staged))
            return
        try:
            self.medium.set_items(staged)
        except (sqlite3.Error, OSError):
            logger.exception("Failed to commit writes to %s", ", ".join(staged))

    def keys(self) -> list[str]:
        if self.medium is None:
            return []
        return self.medium.keys()
