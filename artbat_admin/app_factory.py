"""Builds the admin FastAPI app with its storage, repositories and services."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from artbat_admin.core.config import STORAGE_LOCAL, Settings, get_settings
from artbat_admin.core.logs import configure_logging
from artbat_admin.core.rate_limiter import RateLimiter
from artbat_admin.repositories.documents import DocumentRepository
from artbat_admin.repositories.errors import StorageError
from artbat_admin.repositories.media import MediaRepository
from artbat_admin.repositories.storage import Storage
from artbat_admin.repositories.users import UserStore
from artbat_admin.routers import auth as auth_router
from artbat_admin.routers import documents as documents_router
from artbat_admin.routers import media as media_router
from artbat_admin.routers import public as public_router
from artbat_admin.routers import status as status_router
from artbat_admin.services.auth_service import AuthService
from artbat_admin.services.session_service import AdminSessionStore
from artbat_admin.transport.ftp_client import FTPTransport
from artbat_admin.transport.local_fs import LocalTransport

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Baseline security headers for a JSON API (no framing, no sniffing)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def build_storage(settings: Settings) -> Storage:
    """Pick the transport from configuration (FTP by default, local for dev)."""
    settings.require_storage()
    if settings.storage_backend == STORAGE_LOCAL:
        root = settings.local_storage_root
        return Storage(lambda: LocalTransport(root), settings.remote_base_path or "/", label=LocalTransport.label)
    creds = settings.ftp
    timeout = settings.ftp_timeout_seconds
    return Storage(lambda: FTPTransport(creds, timeout=timeout), settings.remote_base_path, label=FTPTransport.label)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    users: UserStore = app.state.users
    try:
        await run_in_threadpool(users.refresh)
    except StorageError as exc:
        logger.error("could not load admin users at startup: %s", exc.message)
    yield


async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(exc.as_dict(), status_code=exc.status_code)


def create_app(settings: Optional[Settings] = None, *, storage: Optional[Storage] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    storage = storage or build_storage(settings)

    documents = DocumentRepository(storage, settings.staging_dir, html_min_length=settings.html_min_length)
    users = UserStore(documents)
    sessions = AdminSessionStore(settings.session_ttl_seconds)

    app = FastAPI(title="ARTBAT Prague Admin API", lifespan=_lifespan)
    app.state.settings = settings
    app.state.storage = storage
    app.state.documents = documents
    app.state.media = MediaRepository(storage, settings.staging_dir)
    app.state.users = users
    app.state.auth = AuthService(users, sessions)
    app.state.rate_limiter = RateLimiter()

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.add_exception_handler(StorageError, _storage_error_handler)

    app.include_router(auth_router.router)
    app.include_router(documents_router.router)
    app.include_router(media_router.router)
    app.include_router(status_router.router)
    app.include_router(public_router.router)
    return app
