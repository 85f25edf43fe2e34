from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, ValidationError

from argus.api.deps import require_admin_request
from argus.config.defaults import RETENTION_CHOICES
from argus.storage.models import StorageConfig
from argus.storage.usage import get_storage_usage, usage_percent

router = APIRouter(prefix="/settings", tags=["settings"])


class RetentionPayload(BaseModel):
    retentionDays: int = Field(ge=0)


@router.get("/storage")
def get_storage(request: Request) -> dict[str, object]:
    state = request.app.state.argus
    usage = get_storage_usage(state.store)
    limit_mb = state.settings_store.settings.storage_limit_mb
    return {
        "config": state.repo.get_storage_config().to_json(),
        "retention_choices": list(RETENTION_CHOICES),
        "usage": {"bytes": usage.bytes, "formatted": usage.formatted},
        "usage_percent": usage_percent(usage, limit_mb),
        "limit_mb": limit_mb,
        "recordings": len(state.repo.list_recordings()),
    }


@router.post("/storage/retention", dependencies=[Depends(require_admin_request)])
def set_retention(payload: RetentionPayload, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    try:
        config = StorageConfig.model_validate({"retentionDays": payload.retentionDays})
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors()[0].get("msg", "Invalid retention")) from exc
    state.repo.save_storage_config(config)
    summary = state.retention_service.apply()
    return {"ok": True, "config": config.to_json(), "summary": summary.as_dict()}

