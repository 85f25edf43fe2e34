from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from argus.api.deps import require_admin_request
from argus.errors import NotFoundError, PermissionDeniedError
from argus.storage.models import ActiveUser

router = APIRouter(tags=["auth"])


class CredentialsPayload(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserPayload(BaseModel):
    username: str = Field(min_length=1)
    password: str | None = None
    role: Literal["admin", "viewer"] = "viewer"


@router.post("/auth/signup")
def signup(payload: CredentialsPayload, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    if not state.auth.signup(payload.username, payload.password):
        raise HTTPException(status_code=409, detail="Username already exists")
    active = state.auth.current_user()
    return {"ok": True, "active_user": active.to_json() if active else None}


@router.post("/auth/login")
def login(payload: CredentialsPayload, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    session = state.auth.login(payload.username, payload.password)
    if session is None:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return {"ok": True, "active_user": session.to_json()}


@router.post("/auth/logout")
def logout(request: Request) -> dict[str, object]:
    request.app.state.argus.auth.logout()
    return {"ok": True}


@router.get("/auth/me")
def me(request: Request) -> dict[str, object]:
    active = request.app.state.argus.auth.current_user()
    return {"active_user": active.to_json() if active else None}


@router.get("/users", dependencies=[Depends(require_admin_request)])
def list_users(request: Request) -> dict[str, object]:
    state = request.app.state.argus
    return {"items": [u.session().to_json() for u in state.repo.list_users()]}


@router.post("/users", dependencies=[Depends(require_admin_request)])
def create_user(payload: UserPayload, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    try:
        user = state.auth.save_user(payload.username, payload.password, payload.role)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True, "user": user.session().to_json()}


@router.put("/users/{user_id}", dependencies=[Depends(require_admin_request)])
def update_user(user_id: str, payload: UserPayload, request: Request) -> dict[str, object]:
    state = request.app.state.argus
    try:
        user = state.auth.save_user(payload.username, payload.password, payload.role, user_id=user_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True, "user": user.session().to_json()}


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    request: Request,
    admin: ActiveUser = Depends(require_admin_request),
) -> dict[str, object]:
    state = request.app.state.argus
    try:
        state.auth.delete_user(user_id, admin)
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"ok": True, "user_id": user_id}
