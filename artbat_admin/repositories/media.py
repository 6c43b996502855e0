"""Asset files under ``<base>/assets/<folder>/<filename>``."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

from artbat_admin.domain.media import (
    DEFAULT_UPLOAD_DIR,
    MAX_UPLOAD_BYTES,
    is_media_file,
    is_valid_name,
    normalize_folder,
)
from artbat_admin.repositories.errors import (
    PHASE_DELETE,
    PHASE_MKDIR,
    PHASE_UPLOAD,
    PHASE_VALIDATE,
    PHASE_WRITE_LOCAL,
    LocalWriteError,
    RemoteFileMissingError,
    RemoteOperationError,
    UploadError,
    ValidationError,
)
from artbat_admin.repositories.storage import Storage
from artbat_admin.transport.base import Transport

logger = logging.getLogger(__name__)

DOCUMENT = "media"
CHUNK_SIZE = 64 * 1024


class PayloadTooLargeError(ValidationError):
    status_code = 413


def _join(*parts: str) -> str:
    return "/".join(p for p in parts if p)


class MediaRepository:
    def __init__(
        self,
        storage: Storage,
        staging_dir: str | Path,
        *,
        assets_dir: str = "assets",
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
    ) -> None:
        self.storage = storage
        self.staging_dir = Path(staging_dir) / "uploads"
        self.assets_dir = assets_dir
        self.max_upload_bytes = max_upload_bytes

    def _folder(self, folder: str | None) -> str:
        normalized = normalize_folder(folder)
        if normalized is None:
            raise ValidationError(f"Invalid folder '{folder}'", document=DOCUMENT, phase=PHASE_VALIDATE)
        return normalized

    def _name(self, name: str | None, what: str = "file name") -> str:
        value = (name or "").strip()
        if not is_valid_name(value):
            raise ValidationError(f"Invalid {what} '{name}'", document=DOCUMENT, phase=PHASE_VALIDATE)
        return value

    def _remote(self, *parts: str) -> str:
        return self.storage.remote_path(self.assets_dir, *[p for p in parts if p])

    # -------------------------- listings --------------------------
    def list_root(self) -> list[dict]:
        entries = self.storage.with_session(lambda t: t.list_files(self._remote()))
        return [
            {"name": e.name, "path": f"/{self.assets_dir}/{e.name}", "size": e.size, "type": "file"}
            for e in entries
            if not e.is_dir and is_media_file(e.name)
        ]

    def list_directory(self, folder: str | None = "", *, include_dirs: bool = False) -> dict:
        rel = self._folder(folder)
        entries = self.storage.with_session(lambda t: t.list_files(self._remote(rel)))
        files = []
        for e in entries:
            if e.is_dir:
                if include_dirs:
                    files.append({"name": e.name, "path": _join(rel, e.name), "size": 0, "type": "directory"})
            elif is_media_file(e.name):
                files.append({"name": e.name, "path": _join(rel, e.name), "size": e.size, "type": "file"})
        return {"files": files, "total": len(files), "folder": rel or "root"}

    def tree(self, max_depth: int = 3) -> list[dict]:
        return self.storage.with_session(lambda t: self._walk(t, "", 1, max_depth))

    def _walk(self, transport: Transport, rel: str, depth: int, max_depth: int) -> list[dict]:
        nodes = []
        for e in transport.list_files(self._remote(rel)):
            path = _join(rel, e.name)
            if e.is_dir:
                children = self._walk(transport, path, depth + 1, max_depth) if depth < max_depth else []
                nodes.append(
                    {"name": e.name, "type": "directory", "path": f"{self.assets_dir}/{path}", "children": children}
                )
            elif is_media_file(e.name):
                nodes.append({"name": e.name, "type": "file", "path": f"{self.assets_dir}/{path}", "size": e.size})
        return nodes

    # -------------------------- mutations --------------------------
    def create_folder(self, name: str, parent: str | None = "") -> dict:
        folder = self._name(name, "folder name")
        rel = _join(self._folder(parent), folder)
        remote = self._remote(rel)

        def _mkdir(transport: Transport) -> dict:
            created = transport.create_directory(remote)
            if not created:
                raise RemoteOperationError(
                    f"Creating folder {remote} failed ({created.error})", document=DOCUMENT, phase=PHASE_MKDIR
                )
            return {"message": "Folder created", "name": folder, "path": f"{self.assets_dir}/{rel}"}

        return self.storage.with_session(_mkdir)

    def stage_upload(self, folder: str, filename: str, source: BinaryIO) -> Path:
        """Copy an incoming upload to a private staging directory, stopping at the size limit."""
        too_large = False
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            area = Path(tempfile.mkdtemp(prefix=f"{folder.replace('/', '_')}.", dir=self.staging_dir))
            local = area / filename
            written = 0
            with local.open("wb") as fh:
                while True:
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_upload_bytes:
                        too_large = True
                        break
                    fh.write(chunk)
        except OSError as exc:
            raise LocalWriteError(
                f"Staging upload {filename} failed ({exc})", document=DOCUMENT, phase=PHASE_WRITE_LOCAL
            ) from exc
        if too_large:
            shutil.rmtree(area, ignore_errors=True)
            raise PayloadTooLargeError(
                f"{filename} exceeds {self.max_upload_bytes} bytes", document=DOCUMENT, phase=PHASE_VALIDATE
            )
        return local

    def upload(self, filename: str, source: BinaryIO, folder: str | None = DEFAULT_UPLOAD_DIR) -> dict:
        name = self._name(filename)
        rel = self._folder(folder if folder is not None else DEFAULT_UPLOAD_DIR) or DEFAULT_UPLOAD_DIR
        local = self.stage_upload(rel, name, source)
        remote_dir = self._remote(rel)
        remote = self._remote(rel, name)

        def _put(transport: Transport) -> dict:
            ready = transport.create_directory(remote_dir)
            if not ready:
                raise RemoteOperationError(
                    f"Creating folder {remote_dir} failed ({ready.error})", document=DOCUMENT, phase=PHASE_MKDIR
                )
            uploaded = transport.upload_file(str(local), remote)
            if not uploaded:
                raise UploadError(
                    f"Uploading {name} to {remote} failed ({uploaded.error})", document=DOCUMENT, phase=PHASE_UPLOAD
                )
            return {"message": "File uploaded", "filename": name, "path": f"/{self.assets_dir}/{rel}/{name}"}

        result = self.storage.with_session(_put)
        shutil.rmtree(local.parent, ignore_errors=True)
        return result

    def delete(self, filename: str, folder: str | None = "") -> dict:
        name = self._name(filename)
        remote = self._remote(self._folder(folder), name)

        def _rm(transport: Transport) -> dict:
            deleted = transport.delete_file(remote)
            if not deleted:
                error_cls = RemoteFileMissingError if deleted.missing else RemoteOperationError
                raise error_cls(
                    f"Deleting {remote} failed ({deleted.error})", document=DOCUMENT, phase=PHASE_DELETE
                )
            return {"message": "File deleted"}

        result = self.storage.with_session(_rm)
        logger.info("media deleted: %s", remote)
        return result
