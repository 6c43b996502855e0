"""Request-scoped accessors for objects the app factory puts on ``app.state``."""
from __future__ import annotations

from fastapi import HTTPException, Request

from artbat_admin.repositories.documents import DocumentRepository
from artbat_admin.repositories.media import MediaRepository
from artbat_admin.services.auth_service import AuthService, TokenInvalidError, TokenMissingError
from artbat_admin.services.session_service import AdminSession, bearer_token


def _state(request: Request, name: str):
    value = getattr(getattr(request.app, "state", None), name, None)
    if value is None:
        raise RuntimeError(f"{name} is not configured")
    return value


def get_documents(request: Request) -> DocumentRepository:
    return _state(request, "documents")


def get_media(request: Request) -> MediaRepository:
    return _state(request, "media")


def get_auth(request: Request) -> AuthService:
    return _state(request, "auth")


def require_admin(request: Request) -> AdminSession:
    auth = get_auth(request)
    try:
        return auth.verify(bearer_token(request))
    except TokenMissingError as exc:
        raise HTTPException(401, str(exc))
    except TokenInvalidError as exc:
        raise HTTPException(403, str(exc))
