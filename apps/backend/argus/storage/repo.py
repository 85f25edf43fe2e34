from __future__ import annotations

import datetime as dt
from typing import Any, TypeVar

from pydantic import ValidationError

from argus.config.defaults import DEFAULT_THUMBNAIL_URL
from argus.util.logging import get_logger
from argus.util.time import parse_iso8601

from .mirror import CameraMirror
from .models import ActiveUser, Camera, Entity, Event, Layout, Recording, StorageConfig, User
from .store import (
    ACTIVE_USER_KEY,
    CAMERAS_KEY,
    EVENTS_KEY,
    LAYOUTS_KEY,
    RECORDINGS_KEY,
    STORAGE_CONFIG_KEY,
    USERS_KEY,
    RecordStore,
)

logger = get_logger(__name__)

E = TypeVar("E", bound=Entity)

_OLDEST = dt.datetime.min.replace(tzinfo=dt.timezone.utc)


def _newest_first(items: list[E]) -> list[E]:
    return sorted(items, key=lambda item: parse_iso8601(getattr(item, "timestamp", None)) or _OLDEST, reverse=True)


class ArgusRepo:
    def __init__(self, store: RecordStore, mirror: CameraMirror | None = None) -> None:
        self.store = store
        self.mirror = mirror

    def _load(self, key: str, model: type[E]) -> list[E]:
        raw = self.store.get(key, [])
        if not isinstance(raw, list):
            logger.warning("Expected a list under %s, found %s", key, type(raw).__name__)
            return []
        out: list[E] = []
        for index, item in enumerate(raw):
            try:
                out.append(model.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping invalid %s entry #%s: %s", key, index, exc.errors()[0].get("msg"))
        return out

    def _save(self, key: str, items: list[E]) -> None:
        self.store.set(key, [item.to_json() for item in items])

    # cameras

    def list_cameras(self) -> list[Camera]:
        return self._load(CAMERAS_KEY, Camera)

    def get_camera(self, camera_id: str) -> Camera | None:
        return next((c for c in self.list_cameras() if c.id == camera_id), None)

    def save_cameras(self, cameras: list[Camera]) -> None:
        self._save(CAMERAS_KEY, cameras)
        if self.mirror is not None:
            self.mirror.save_cameras([c.to_json() for c in cameras])

    def save_camera(self, camera: Camera) -> Camera:
        if not camera.thumbnail_url:
            camera = camera.model_copy(update={"thumbnail_url": DEFAULT_THUMBNAIL_URL})
        cameras = self.list_cameras()
        for index, existing in enumerate(cameras):
            if existing.id == camera.id:
                cameras[index] = camera
                break
        else:
            cameras.append(camera)
        self.save_cameras(cameras)
        return camera

    def delete_camera(self, camera_id: str) -> bool:
        cameras = self.list_cameras()
        remaining = [c for c in cameras if c.id != camera_id]
        if len(remaining) == len(cameras):
            return False
        # layouts keep their reference; it resolves to an empty slot
        self.save_cameras(remaining)
        return True

    # layouts

    def list_layouts(self) -> list[Layout]:
        return self._load(LAYOUTS_KEY, Layout)

    def get_layout(self, layout_id: str) -> Layout | None:
        return next((layout for layout in self.list_layouts() if layout.id == layout_id), None)

    def save_layout(self, layout: Layout) -> Layout:
        layouts = [existing for existing in self.list_layouts() if existing.id != layout.id]
        layouts.append(layout)
        self._save(LAYOUTS_KEY, layouts)
        return layout

    def delete_layout(self, layout_id: str) -> bool:
        layouts = self.list_layouts()
        remaining = [layout for layout in layouts if layout.id != layout_id]
        if len(remaining) == len(layouts):
            return False
        self._save(LAYOUTS_KEY, remaining)
        return True

    def resolve_layout(self, layout: Layout, cameras: list[Camera] | None = None) -> list[Camera | None]:
        by_id = {c.id: c for c in (cameras if cameras is not None else self.list_cameras())}
        return [by_id.get(camera_id) if camera_id else None for camera_id in layout.grid.cameras]

    # recordings and events

    def list_recordings(self) -> list[Recording]:
        return _newest_first(self._load(RECORDINGS_KEY, Recording))

    def get_recording(self, recording_id: str) -> Recording | None:
        return next((r for r in self._load(RECORDINGS_KEY, Recording) if r.id == recording_id), None)

    def delete_recording(self, recording_id: str) -> bool:
        raw = self.store.get(RECORDINGS_KEY, [])
        if not isinstance(raw, list):
            return False
        remaining = [item for item in raw if not (isinstance(item, dict) and item.get("id") == recording_id)]
        if len(remaining) == len(raw):
            return False
        self.store.set(RECORDINGS_KEY, remaining)
        return True

    def clear_recordings(self) -> int:
        raw = self.store.get(RECORDINGS_KEY, [])
        count = len(raw) if isinstance(raw, list) else 0
        self.store.set(RECORDINGS_KEY, [])
        return count

    def list_events(self, event_type: str | None = None) -> list[Event]:
        events = self._load(EVENTS_KEY, Event)
        if event_type:
            events = [e for e in events if e.type == event_type]
        return _newest_first(events)

    def append_event(self, event: Event) -> None:
        raw = self.store.get(EVENTS_KEY, [])
        events: list[Any] = raw if isinstance(raw, list) else []
        self.store.set(EVENTS_KEY, [*events, event.to_json()])

    def add_recording(self, recording: Recording, event: Event | None = None) -> None:
        with self.store.transaction():
            raw = self.store.get(RECORDINGS_KEY, [])
            recordings: list[Any] = raw if isinstance(raw, list) else []
            self.store.set(RECORDINGS_KEY, [*recordings, recording.to_json()])
            if event is not None:
                self.append_event(event)

    # storage config

    def get_storage_config(self) -> StorageConfig:
        raw = self.store.get(STORAGE_CONFIG_KEY, None)
        if raw is None:
            return StorageConfig()
        try:
            return StorageConfig.model_validate(raw)
        except ValidationError:
            logger.warning("Invalid stored storage config %r; using defaults", raw)
            return StorageConfig()

    def save_storage_config(self, config: StorageConfig) -> StorageConfig:
        self.store.set(STORAGE_CONFIG_KEY, config.to_json())
        return config

    # users and session

    def list_users(self) -> list[User]:
        return self._load(USERS_KEY, User)

    def save_users(self, users: list[User]) -> None:
        self._save(USERS_KEY, users)

    def get_active_user(self) -> ActiveUser | None:
        raw = self.store.get(ACTIVE_USER_KEY, None)
        if raw is None:
            return None
        try:
            return ActiveUser.model_validate(raw)
        except ValidationError:
            logger.warning("Ignoring invalid active session")
            return None

    def set_active_user(self, user: ActiveUser) -> None:
        self.store.set(ACTIVE_USER_KEY, user.to_json())

    def clear_active_user(self) -> None:
        self.store.remove(ACTIVE_USER_KEY)
