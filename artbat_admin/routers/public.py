"""Read-only feed consumed by the public landing page."""
from __future__ import annotations

from fastapi import APIRouter, Request

from artbat_admin.domain.i18n import normalize_lang
from artbat_admin.domain.updates import public_feed
from artbat_admin.routers.deps import get_documents

router = APIRouter(prefix="/api/public", tags=["public"])


@router.get("/updates")
def updates_feed(request: Request, lang: str = "en"):
    documents = get_documents(request)
    items = documents.load_or_none("updates")
    code = normalize_lang(lang)
    return {"lang": code, "items": public_feed(items or [], code)}
