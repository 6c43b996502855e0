from __future__ import annotations

from fastapi import APIRouter, Depends, File, Request, UploadFile
from pydantic import BaseModel

from artbat_admin.domain.media import DEFAULT_UPLOAD_DIR
from artbat_admin.routers.deps import get_media, require_admin
from artbat_admin.services.session_service import AdminSession

router = APIRouter(prefix="/admin/api", tags=["media"])


class FolderBody(BaseModel):
    name: str = ""
    parentDir: str = ""


@router.get("/media")
def list_media(request: Request, session: AdminSession = Depends(require_admin)):
    return get_media(request).list_root()


@router.get("/media/tree")
def media_tree(request: Request, session: AdminSession = Depends(require_admin)):
    return get_media(request).tree()


@router.get("/media/directory")
def media_directory(request: Request, dir: str = "", session: AdminSession = Depends(require_admin)):
    return get_media(request).list_directory(dir)


@router.get("/media/directory/{folder:path}")
def media_folder(folder: str, request: Request, session: AdminSession = Depends(require_admin)):
    return get_media(request).list_directory(folder, include_dirs=True)


@router.post("/media/directory")
def create_folder(request: Request, body: FolderBody, session: AdminSession = Depends(require_admin)):
    return get_media(request).create_folder(body.name, body.parentDir)


@router.post("/media/upload")
@router.post("/upload")
def upload_media(
    request: Request,
    file: UploadFile = File(...),
    dir: str = DEFAULT_UPLOAD_DIR,
    session: AdminSession = Depends(require_admin),
):
    return get_media(request).upload(file.filename or "", file.file, dir or DEFAULT_UPLOAD_DIR)


@router.delete("/media/{filename}")
def delete_media(filename: str, request: Request, dir: str = "", session: AdminSession = Depends(require_admin)):
    return get_media(request).delete(filename, dir)
