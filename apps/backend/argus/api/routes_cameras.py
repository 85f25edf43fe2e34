from __future__ import annotations

from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from argus.api.deps import require_admin_request
from argus.storage.models import Camera
from argus.util.security import sanitize_stream_url, validate_entity_id

router = APIRouter(prefix="/cameras", tags=["cameras"])

_EXPORT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class CameraPayload(BaseModel):
    id: str | None = None
    name: str = Field(min_length=1)
    description: str = ""
    streamUrl: str = ""
    thumbnailUrl: str = ""
    server: str | None = None


def _sanitized_camera(camera: Camera) -> dict[str, object]:
    out = camera.to_json()
    out["streamUrl"] = sanitize_stream_url(str(out.get("streamUrl", "")))
    return out


def _to_camera(payload: CameraPayload, camera_id: str) -> Camera:
    try:
        validate_entity_id(camera_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    data = payload.model_dump()
    data["id"] = camera_id
    return Camera.model_validate(data)


@router.get("")
def list_cameras(request: Request) -> dict[str, object]:
    state = request.app.state.argus
    return {"items": [_sanitized_camera(c) for c in state.repo.list_cameras()]}


@router.get("/export")
def export_cameras(request: Request) -> JSONResponse:
    state = request.app.state.argus
    mirror = state.repo.mirror
    cameras = mirror.get_cameras() if mirror is not None else [c.to_json() for c in state.repo.list_cameras()]
    return JSONResponse(cameras, headers=_EXPORT_HEADERS)


@router.get("/{camera_id}")
def get_camera(camera_id: str, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    camera = state.repo.get_camera(camera_id)
    if camera is None:
        raise HTTPException(status_code=404, detail="Camera not found")
    return _sanitized_camera(camera)


@router.post("", dependencies=[Depends(require_admin_request)])
def create_camera(payload: CameraPayload, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    camera_id = payload.id or f"cam-{uuid4().hex[:8]}"
    if state.repo.get_camera(camera_id) is not None:
        raise HTTPException(status_code=409, detail="Camera id already exists")
    camera = state.repo.save_camera(_to_camera(payload, camera_id))
    return {"ok": True, "camera": _sanitized_camera(camera)}


@router.put("/{camera_id}", dependencies=[Depends(require_admin_request)])
def update_camera(camera_id: str, payload: CameraPayload, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    existing = state.repo.get_camera(camera_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Camera not found")
    if "***" in payload.streamUrl and payload.streamUrl == sanitize_stream_url(existing.stream_url):
        payload = payload.model_copy(update={"streamUrl": existing.stream_url})
    camera = state.repo.save_camera(_to_camera(payload, camera_id))
    return {"ok": True, "camera": _sanitized_camera(camera)}


@router.delete("/{camera_id}", dependencies=[Depends(require_admin_request)])
def delete_camera(camera_id: str, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    if not state.repo.delete_camera(camera_id):
        raise HTTPException(status_code=404, detail="Camera not found")
    return {"ok": True, "camera_id": camera_id}
