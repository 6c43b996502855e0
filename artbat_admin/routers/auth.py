from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from artbat_admin.core.rate_limiter import rate_limit_ip
from artbat_admin.repositories.users import ROLE_ADMIN
from artbat_admin.routers.deps import get_auth, require_admin
from artbat_admin.services.auth_service import InvalidCredentialsError
from artbat_admin.services.session_service import AdminSession, bearer_token

router = APIRouter(prefix="/admin/api/auth", tags=["auth"])

LOGIN_LIMIT = 10
LOGIN_WINDOW_SECONDS = 60


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


@router.post("/login")
def login(request: Request, body: LoginRequest):
    rate_limit_ip(request.app.state.rate_limiter, request, "admin:login", limit=LOGIN_LIMIT, window_seconds=LOGIN_WINDOW_SECONDS)
    auth = get_auth(request)
    try:
        result = auth.login(body.username, body.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(401, str(exc))
    return {"token": result.token, "user": result.user}


@router.get("/verify")
def verify(session: AdminSession = Depends(require_admin)):
    return {"valid": True, "user": session.public()}


@router.post("/logout")
def logout(request: Request, session: AdminSession = Depends(require_admin)):
    get_auth(request).logout(bearer_token(request))
    return {"message": "Logged out"}


@router.post("/refresh-users")
def refresh_users(request: Request, session: AdminSession = Depends(require_admin)):
    if session.role != ROLE_ADMIN:
        raise HTTPException(403, "Admin role required")
    count = get_auth(request).users.refresh()
    return {"message": "Users reloaded", "count": count}
