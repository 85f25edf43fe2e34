from __future__ import annotations

import pytest
from pydantic import ValidationError

from argus.storage.medium import MemoryMedium
from argus.storage.mirror import CameraMirror
from argus.storage.models import Camera, Event, Layout, LayoutGrid, Recording, StorageConfig
from argus.storage.repo import ArgusRepo
from argus.storage.store import CAMERAS_KEY, EVENTS_KEY, RECORDINGS_KEY, RecordStore


def _camera(camera_id: str, name: str) -> Camera:
    return Camera(id=camera_id, name=name, description=f"{name} view", stream_url=f"rtsp://cams/{camera_id}")


def _recording(rec_id: str, timestamp: str) -> Recording:
    return Recording(
        id=rec_id,
        timestamp=timestamp,
        camera_name="Front Door",
        title="Visitor",
        summary="A visitor rings the bell.",
        video_data_uri="data:image/jpeg;base64,AAAA",
    )


def test_layout_grid_must_match_cell_count() -> None:
    with pytest.raises(ValidationError):
        LayoutGrid(rows=2, cols=2, cameras=["cam-1", None, "cam-2"])
    grid = LayoutGrid(rows=1, cols=2, cameras=["cam-1", None])
    assert grid.to_json() == {"rows": 1, "cols": 2, "cameras": ["cam-1", None]}


def test_dangling_layout_reference_resolves_to_empty_slot() -> None:
    repo = ArgusRepo(RecordStore(MemoryMedium()))
    repo.save_camera(_camera("cam-01", "Front Door"))
    repo.save_camera(_camera("cam-02", "Backyard"))
    layout = repo.save_layout(
        Layout(id="layout-01", name="Main", grid=LayoutGrid(rows=2, cols=2, cameras=["cam-01", "cam-05", None, "cam-02"]))
    )

    slots = repo.resolve_layout(layout)

    assert [slot.id if slot else None for slot in slots] == ["cam-01", None, None, "cam-02"]


def test_deleting_camera_does_not_touch_layouts() -> None:
    repo = ArgusRepo(RecordStore(MemoryMedium()))
    repo.save_camera(_camera("cam-01", "Front Door"))
    repo.save_layout(Layout(id="l1", name="One", grid=LayoutGrid(rows=1, cols=1, cameras=["cam-01"])))

    assert repo.delete_camera("cam-01") is True
    assert repo.delete_camera("cam-01") is False

    layout = repo.get_layout("l1")
    assert layout is not None
    assert layout.grid.cameras == ["cam-01"]
    assert repo.resolve_layout(layout) == [None]


def test_save_camera_replaces_by_id_and_fills_thumbnail() -> None:
    store = RecordStore(MemoryMedium())
    repo = ArgusRepo(store)
    repo.save_camera(_camera("cam-01", "Front Door"))
    repo.save_camera(_camera("cam-01", "Porch"))

    stored = store.get(CAMERAS_KEY, [])
    assert len(stored) == 1
    assert stored[0]["name"] == "Porch"
    assert stored[0]["thumbnailUrl"] == "https://placehold.co/800x600.png"
    assert stored[0]["streamUrl"] == "rtsp://cams/cam-01"


def test_camera_writes_are_mirrored(tmp_path) -> None:
    mirror = CameraMirror(tmp_path / "db.json")
    repo = ArgusRepo(RecordStore(MemoryMedium()), mirror=mirror)
    repo.save_camera(_camera("cam-01", "Front Door"))
    repo.save_camera(_camera("cam-02", "Backyard"))
    repo.delete_camera("cam-01")

    assert [c["id"] for c in mirror.get_cameras()] == ["cam-02"]


def test_add_recording_writes_recording_and_event() -> None:
    store = RecordStore(MemoryMedium())
    repo = ArgusRepo(store)
    recording = _recording("rec-1", "2026-01-01T00:00:00Z")
    event = Event(
        id="evt-1",
        timestamp="2026-01-01T00:00:00Z",
        type="Recording",
        camera_name="Front Door",
        description="Clip saved: Visitor",
        reference_id="rec-1",
    )

    repo.add_recording(recording, event)

    assert store.get(RECORDINGS_KEY, []) == [recording.to_json()]
    assert store.get(EVENTS_KEY, [])[0]["referenceId"] == "rec-1"


def test_recordings_listed_newest_first_and_deleted_individually() -> None:
    repo = ArgusRepo(RecordStore(MemoryMedium()))
    repo.add_recording(_recording("a", "2026-01-01T00:00:00Z"))
    repo.add_recording(_recording("b", "2026-01-03T00:00:00Z"))
    repo.add_recording(_recording("c", "2026-01-02T00:00:00Z"))

    assert [r.id for r in repo.list_recordings()] == ["b", "c", "a"]
    assert repo.delete_recording("c") is True
    assert repo.delete_recording("c") is False
    assert repo.clear_recordings() == 2
    assert repo.list_recordings() == []


def test_invalid_items_are_skipped_but_kept_in_storage() -> None:
    store = RecordStore(MemoryMedium())
    store.set(CAMERAS_KEY, [{"id": "cam-1", "name": "Ok"}, {"name": "missing id"}])
    repo = ArgusRepo(store)

    assert [c.id for c in repo.list_cameras()] == ["cam-1"]
    assert len(store.get(CAMERAS_KEY, [])) == 2


def test_storage_config_defaults_and_validation() -> None:
    repo = ArgusRepo(RecordStore(MemoryMedium()))
    assert repo.get_storage_config().retention_days == 0

    repo.save_storage_config(StorageConfig(retention_days=30))
    assert repo.get_storage_config().retention_days == 30

    with pytest.raises(ValidationError):
        StorageConfig(retention_days=-1)
    with pytest.raises(ValidationError):
        StorageConfig.model_validate({"retentionDays": "soon"})
    assert StorageConfig.model_validate({"retentionDays": "7"}).retention_days == 7


def test_event_type_filter() -> None:
    repo = ArgusRepo(RecordStore(MemoryMedium()))
    repo.append_event(
        Event(id="e1", timestamp="2026-01-01T00:00:00Z", type="Recording", camera_name="A", description="clip")
    )
    repo.append_event(
        Event(id="e2", timestamp="2026-01-02T00:00:00Z", type="Object Detection", camera_name="A", description="cat")
    )

    assert [e.id for e in repo.list_events()] == ["e2", "e1"]
    assert [e.id for e in repo.list_events("Object Detection")] == ["e2"]
