from __future__ import annotations

from fastapi import APIRouter, Request

from argus.config.defaults import APP_RELEASE

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def get_health(request: Request) -> dict[str, object]:
    state = request.app.state.argus
    settings = state.settings_store.settings
    return {
        "ok": True,
        "version": APP_RELEASE,
        "bind": settings.bind,
        "port": settings.port,
        "data_dir": settings.data_dir,
        "storage_available": state.store.available,
        "cameras": len(state.repo.list_cameras()),
        "recordings": len(state.repo.list_recordings()),
        "decode_failures": dict(state.store.decode_failures),
        "last_sweep": state.last_sweep.as_dict() if state.last_sweep else None,
    }
