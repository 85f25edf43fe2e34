from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

router = APIRouter(prefix="/events", tags=["events"])


class DetectionPayload(BaseModel):
    camera_name: str = Field(min_length=1)
    description: str = Field(min_length=1)


@router.get("")
def list_events(
    request: Request,
    type: Literal["Recording", "Object Detection"] | None = None,
    limit: int = 200,
    offset: int = 0,
) -> dict[str, object]:
    state = request.app.state.argus
    events = state.repo.list_events(event_type=type)
    limit = max(1, min(limit, 2000))
    offset = max(0, offset)
    page = events[offset : offset + limit]
    return {"items": [e.to_json() for e in page], "total": len(events)}


@router.post("/detections")
def log_detection(payload: DetectionPayload, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    event = state.recording_service.log_detection(payload.camera_name, payload.description)
    return {"ok": True, "event": event.to_json()}
