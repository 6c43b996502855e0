from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter(tags=["status"])

SERVICE_NAME = "ARTBAT Prague Admin"


@router.get("/admin/api/status")
def status(request: Request):
    settings = request.app.state.settings
    storage = request.app.state.storage
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "storage": {
            "backend": storage.label,
            "host": settings.ftp.host if storage.label == "FTP" else "",
            "remotePath": storage.base_path,
        },
    }
