from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from argus.util.time import now_utc_iso

from .db import Database


class Medium(Protocol):
    """Flat string key-value surface the record store persists into."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def set_items(self, items: Mapping[str, str | None]) -> None:
        """Apply several writes together; a ``None`` value removes the key."""
        ...

    def keys(self) -> list[str]: ...


class MemoryMedium:
    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def set_items(self, items: Mapping[str, str | None]) -> None:
        for key, value in items.items():
            if value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = value

    def keys(self) -> list[str]:
        return sorted(self._data)


class SqliteMedium:
    _UPSERT_SQL = """
        INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
    """
    _DELETE_SQL = "DELETE FROM kv WHERE key = ?"

    def __init__(self, db: Database) -> None:
        self.db = db

    def get_item(self, key: str) -> str | None:
        row = self.db.query_one("SELECT value FROM kv WHERE key = ?", (key,))
        if not row:
            return None
        return str(row["value"])

    def set_item(self, key: str, value: str) -> None:
        self.db.execute(self._UPSERT_SQL, (key, value, now_utc_iso()))

    def remove_item(self, key: str) -> None:
        self.db.execute(self._DELETE_SQL, (key,))

    def set_items(self, items: Mapping[str, str | None]) -> None:
        if not items:
            return
        stamp = now_utc_iso()
        statements: list[tuple[str, tuple[str, ...]]] = []
        for key, value in items.items():
            if value is None:
                statements.append((self._DELETE_SQL, (key,)))
            else:
                statements.append((self._UPSERT_SQL, (key, value, stamp)))
        self.db.execute_batch(statements)

    def keys(self) -> list[str]:
        rows = self.db.query("SELECT key FROM kv ORDER BY key ASC")
        return [str(row["key"]) for row in rows]
