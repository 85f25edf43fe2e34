from __future__ import annotations

from fastapi import HTTPException, Request

from argus.auth import require_admin
from argus.errors import PermissionDeniedError
from argus.storage.models import ActiveUser


def require_admin_request(request: Request) -> ActiveUser:
    state = request.app.state.argus
    try:
        return require_admin(state.repo.get_active_user())
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
