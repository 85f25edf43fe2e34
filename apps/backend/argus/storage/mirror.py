from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from argus.util.logging import get_logger

logger = get_logger(__name__)


class CameraMirror:
    """Best-effort JSON file copy of the camera list for automation scripts.

    The record store stays authoritative; read and write problems here are
    logged and otherwise ignored.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict[str, Any]:
        try:
            if self.path.exists():
                data = self.path.read_text(encoding="utf-8")
                if data.strip():
                    loaded = json.loads(data)
                    if isinstance(loaded, dict):
                        return loaded
        except (OSError, json.JSONDecodeError):
            logger.exception("Error reading camera mirror %s", self.path)
        return {"cameras": []}

    def _write(self, payload: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            logger.exception("Error writing camera mirror %s", self.path)

    def get_cameras(self) -> list[dict[str, Any]]:
        cameras = self._read().get("cameras")
        return cameras if isinstance(cameras, list) else []

    def save_cameras(self, cameras: list[dict[str, Any]]) -> None:
        payload = self._read()
        payload["cameras"] = cameras
        self._write(payload)
