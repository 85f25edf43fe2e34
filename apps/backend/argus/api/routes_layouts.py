from __future__ import annotations

from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, ValidationError

from argus.api.deps import require_admin_request
from argus.storage.models import Layout, LayoutGrid

router = APIRouter(prefix="/layouts", tags=["layouts"])


class LayoutPayload(BaseModel):
    id: str | None = None
    name: str = Field(min_length=1)
    rows: int = Field(ge=1, le=8)
    cols: int = Field(ge=1, le=8)
    cameras: list[str | None] = Field(default_factory=list)


def _layout_view(layout: Layout, slots: list[object]) -> dict[str, object]:
    out = layout.to_json()
    out["slots"] = [
        {"camera_id": camera_id, "camera": camera.to_json() if camera is not None else None, "empty": camera is None}
        for camera_id, camera in zip(layout.grid.cameras, slots)
    ]
    return out


@router.get("")
def list_layouts(request: Request) -> dict[str, object]:
    state = request.app.state.argus
    cameras = state.repo.list_cameras()
    return {
        "items": [_layout_view(layout, state.repo.resolve_layout(layout, cameras)) for layout in state.repo.list_layouts()]
    }


@router.post("", dependencies=[Depends(require_admin_request)])
def save_layout(payload: LayoutPayload, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    try:
        layout = Layout(
            id=payload.id or f"layout-{uuid4().hex[:8]}",
            name=payload.name,
            grid=LayoutGrid(rows=payload.rows, cols=payload.cols, cameras=payload.cameras),
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors()[0].get("msg", "Invalid layout")) from exc
    state.repo.save_layout(layout)
    return {"ok": True, "layout": _layout_view(layout, state.repo.resolve_layout(layout))}


@router.delete("/{layout_id}", dependencies=[Depends(require_admin_request)])
def delete_layout(layout_id: str, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    if not state.repo.delete_layout(layout_id):
        raise HTTPException(status_code=404, detail="Layout not found")
    return {"ok": True, "layout_id": layout_id}
