"""
JSON passthrough endpoints for the site documents.

GET returns the stored document (or the not-found envelope); POST replaces the
whole document. ``/<name>/save`` aliases are kept for the admin UI.
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from artbat_admin.routers.deps import get_documents, require_admin
from artbat_admin.services.session_service import AdminSession

router = APIRouter(prefix="/admin/api", tags=["documents"])

JSON_DOCUMENTS = ("config", "translations", "updates", "pixels")


class HtmlBody(BaseModel):
    content: Any = None
    filename: str = ""


def _register_json_document(name: str) -> None:
    def read_document(request: Request, session: AdminSession = Depends(require_admin)):
        return get_documents(request).load(name)

    def save_document(request: Request, payload: Any = Body(...), session: AdminSession = Depends(require_admin)):
        return get_documents(request).save(name, payload)

    router.add_api_route(f"/{name}", read_document, methods=["GET"], name=f"get_{name}")
    router.add_api_route(f"/{name}", save_document, methods=["POST"], name=f"save_{name}")
    router.add_api_route(f"/{name}/save", save_document, methods=["POST"], name=f"save_{name}_alias")


for _name in JSON_DOCUMENTS:
    _register_json_document(_name)


def _html_envelope(result: Any) -> Any:
    return {"content": result} if isinstance(result, str) else result


@router.get("/html")
def read_html(request: Request, session: AdminSession = Depends(require_admin)):
    return _html_envelope(get_documents(request).load("html"))


@router.post("/html")
@router.post("/html/save")
def save_html(request: Request, body: HtmlBody, session: AdminSession = Depends(require_admin)):
    return get_documents(request).save("html", body.content)


@router.get("/html/current")
def current_html(request: Request, filename: str = "", session: AdminSession = Depends(require_admin)):
    documents = get_documents(request)
    result = documents.load_page(filename) if filename else documents.load("html")
    if not isinstance(result, str):
        return JSONResponse({"error": result.get("message", "HTML file not found")}, status_code=404)
    return {"content": result}


@router.post("/html/update")
def update_html(request: Request, body: HtmlBody, session: AdminSession = Depends(require_admin)):
    if not body.content or not body.filename:
        raise HTTPException(400, "Missing content or filename")
    return get_documents(request).save_page(body.filename, body.content)
