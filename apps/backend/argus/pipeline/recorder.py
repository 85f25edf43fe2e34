from __future__ import annotations

from collections.abc import Callable, Mapping
from uuid import uuid4

from argus.errors import CaptureError, SummarizationError
from argus.storage.models import Camera, Event, Recording
from argus.storage.repo import ArgusRepo
from argus.util.logging import get_logger
from argus.util.time import now_utc_iso

logger = get_logger(__name__)

Summarizer = Callable[[str, str], Mapping[str, str]]


class RecordingService:
    """Turns a captured frame into a summarised, persisted recording."""

    def __init__(self, repo: ArgusRepo, summarize: Summarizer | None = None) -> None:
        self.repo = repo
        self.summarize = summarize

    def capture(self, camera: Camera, frame_data_uri: str | None) -> Recording:
        if not frame_data_uri:
            raise CaptureError(f"Could not capture a frame from {camera.name}.")
        if self.summarize is None:
            raise SummarizationError("No summarizer is configured")

        try:
            result = self.summarize(frame_data_uri, camera.name)
            title = str(result["title"])
            summary = str(result["summary"])
        except Exception as exc:
            logger.exception("Summarization failed for camera %s", camera.name)
            raise SummarizationError(f"Failed to summarize clip from {camera.name}.") from exc

        timestamp = now_utc_iso()
        recording = Recording(
            id=f"rec-{uuid4().hex[:12]}",
            timestamp=timestamp,
            camera_name=camera.name,
            title=title,
            summary=summary,
            video_data_uri=frame_data_uri,
        )
        event = Event(
            id=f"evt-{uuid4().hex[:12]}",
            timestamp=timestamp,
            type="Recording",
            camera_name=camera.name,
            description=f"Clip saved: {title}",
            reference_id=recording.id,
        )
        self.repo.add_recording(recording, event)
        logger.info("Saved recording %s from %s", recording.id, camera.name)
        return recording

    def log_detection(self, camera_name: str, description: str) -> Event:
        event = Event(
            id=f"evt-{uuid4().hex[:12]}",
            timestamp=now_utc_iso(),
            type="Object Detection",
            camera_name=camera_name,
            description=description,
        )
        self.repo.append_event(event)
        return event
