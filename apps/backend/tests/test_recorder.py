from __future__ import annotations

import pytest

from argus.errors import CaptureError, SummarizationError
from argus.pipeline.recorder import RecordingService
from argus.storage.medium import MemoryMedium
from argus.storage.models import Camera
from argus.storage.repo import ArgusRepo
from argus.storage.store import EVENTS_KEY, RECORDINGS_KEY, RecordStore

CAMERA = Camera(id="cam-01", name="Front Door")
FRAME = "data:image/jpeg;base64,/9j/AAAA"


def _summarize(frame: str, camera_name: str) -> dict[str, str]:
    return {"title": f"{camera_name} activity", "summary": f"{len(frame)} bytes reviewed"}


def _failing(frame: str, camera_name: str) -> dict[str, str]:
    raise RuntimeError("model unavailable")


def test_capture_persists_recording_and_event() -> None:
    store = RecordStore(MemoryMedium())
    service = RecordingService(ArgusRepo(store), summarize=_summarize)

    recording = service.capture(CAMERA, FRAME)

    stored = store.get(RECORDINGS_KEY, [])
    assert [r["id"] for r in stored] == [recording.id]
    assert stored[0]["title"] == "Front Door activity"
    assert stored[0]["videoDataUri"] == FRAME
    events = store.get(EVENTS_KEY, [])
    assert events[0]["type"] == "Recording"
    assert events[0]["referenceId"] == recording.id
    assert events[0]["description"] == "Clip saved: Front Door activity"


def test_failed_summary_creates_nothing() -> None:
    store = RecordStore(MemoryMedium())
    service = RecordingService(ArgusRepo(store), summarize=_failing)

    with pytest.raises(SummarizationError):
        service.capture(CAMERA, FRAME)

    assert store.get(RECORDINGS_KEY, []) == []
    assert store.get(EVENTS_KEY, []) == []


def test_missing_frame_is_a_capture_error() -> None:
    service = RecordingService(ArgusRepo(RecordStore(MemoryMedium())), summarize=_summarize)
    with pytest.raises(CaptureError):
        service.capture(CAMERA, None)


def test_log_detection_appends_event() -> None:
    store = RecordStore(MemoryMedium())
    service = RecordingService(ArgusRepo(store))

    event = service.log_detection("Backyard", "Detected: dog (0.91)")

    assert store.get(EVENTS_KEY, []) == [event.to_json()]
    assert event.type == "Object Detection"
