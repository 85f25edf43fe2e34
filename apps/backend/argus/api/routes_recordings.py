from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from argus.api.deps import require_admin_request
from argus.errors import CaptureError, SummarizationError

router = APIRouter(prefix="/recordings", tags=["recordings"])


class CapturePayload(BaseModel):
    camera_id: str
    frame_data_uri: str | None = None


@router.get("")
def list_recordings(request: Request, include_video: bool = False) -> dict[str, object]:
    state = request.app.state.argus
    items = []
    for recording in state.repo.list_recordings():
        item = recording.to_json()
        if not include_video:
            item.pop("videoDataUri", None)
        items.append(item)
    return {"items": items, "total": len(items)}


@router.get("/{recording_id}")
def get_recording(recording_id: str, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    recording = state.repo.get_recording(recording_id)
    if recording is None:
        raise HTTPException(status_code=404, detail="Recording not found")
    return recording.to_json()


@router.post("/capture")
def capture_recording(payload: CapturePayload, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    camera = state.repo.get_camera(payload.camera_id)
    if camera is None:
        raise HTTPException(status_code=404, detail="Camera not found")
    try:
        recording = state.recording_service.capture(camera, payload.frame_data_uri)
    except CaptureError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SummarizationError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"ok": True, "recording": recording.to_json()}


@router.delete("/{recording_id}")
def delete_recording(recording_id: str, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    if not state.repo.delete_recording(recording_id):
        raise HTTPException(status_code=404, detail="Recording not found")
    return {"ok": True, "recording_id": recording_id}


@router.delete("", dependencies=[Depends(require_admin_request)])
def clear_recordings(request: Request) -> dict[str, object]:
    state = request.app.state.argus
    deleted = state.repo.clear_recordings()
    return {"ok": True, "deleted": deleted}
