"""
Whole-document load/save on top of the storage session.

Each call opens its own session; there is no version token, so two concurrent
saves of the same document end with whichever upload finished last. Every
call also stages its files in a private directory under the staging root, so
a read running next to a save never touches the save's payload.
"""

from __future__ import annotations

import json
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any

from artbat_admin.domain.documents import DocumentSpec, get_document, html_page
from artbat_admin.domain.media import is_valid_html_filename
from artbat_admin.repositories.errors import (
    PHASE_DOWNLOAD,
    PHASE_PARSE,
    PHASE_UPLOAD,
    PHASE_VALIDATE,
    PHASE_WRITE_LOCAL,
    DocumentParseError,
    DownloadError,
    LocalWriteError,
    UnknownDocumentError,
    UploadError,
    ValidationError,
)
from artbat_admin.repositories.storage import Storage
from artbat_admin.transport.base import Transport

logger = logging.getLogger(__name__)

MISSING = object()


class DocumentRepository:
    """Load/save for config, translations, updates, pixels, HTML and users."""

    def __init__(
        self,
        storage: Storage,
        staging_dir: str | Path,
        *,
        html_min_length: int = 100,
        backup_before_save: bool = True,
    ) -> None:
        self.storage = storage
        self.staging_dir = Path(staging_dir)
        self.html_min_length = html_min_length
        self.backup_before_save = backup_before_save

    # -------------------------- helpers --------------------------
    def spec(self, name: str) -> DocumentSpec:
        spec = get_document(name)
        if spec is None:
            raise UnknownDocumentError(f"Unknown document '{name}'", document=name)
        return spec

    def page_spec(self, filename: str) -> DocumentSpec:
        if not is_valid_html_filename(filename):
            raise ValidationError(
                f"Invalid page filename '{filename}'", document="html", phase=PHASE_VALIDATE
            )
        return html_page(filename)

    def staging_area(self, spec: DocumentSpec, phase: str) -> Path:
        """Fresh directory for one call's staged copies."""
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            return Path(tempfile.mkdtemp(prefix=f"{spec.filename}.", dir=self.staging_dir))
        except OSError as exc:
            error_cls = LocalWriteError if phase == PHASE_WRITE_LOCAL else DownloadError
            raise error_cls(
                f"{spec.label}: cannot create staging directory in {self.staging_dir} ({exc})",
                document=spec.name,
                phase=phase,
            ) from exc

    def not_found(self, spec: DocumentSpec) -> dict:
        return {"message": f"{spec.label} file not found on {self.storage.label}"}

    def is_not_found(self, result: Any) -> bool:
        return (
            isinstance(result, dict)
            and list(result) == ["message"]
            and str(result["message"]).endswith(f"file not found on {self.storage.label}")
        )

    # -------------------------- load --------------------------
    def load(self, name: str) -> Any:
        """Parsed document, raw text for HTML, or the not-found envelope."""
        return self.load_spec(self.spec(name))

    def load_page(self, filename: str) -> Any:
        return self.load_spec(self.page_spec(filename))

    def load_or_none(self, name: str) -> Any:
        spec = self.spec(name)
        result = self.storage.with_session(lambda t: self._load(t, spec))
        return None if result is MISSING else result

    def load_spec(self, spec: DocumentSpec) -> Any:
        result = self.storage.with_session(lambda t: self._load(t, spec))
        return self.not_found(spec) if result is MISSING else result

    def _load(self, transport: Transport, spec: DocumentSpec) -> Any:
        area = self.staging_area(spec, PHASE_DOWNLOAD)
        try:
            return self._download(transport, spec, area / spec.filename)
        finally:
            shutil.rmtree(area, ignore_errors=True)

    def _download(self, transport: Transport, spec: DocumentSpec, local: Path) -> Any:
        remote = self.storage.remote_path(spec.filename)
        result = transport.download_file(remote, str(local))
        if not result:
            if result.missing:
                logger.info("%s not found at %s", spec.label, remote)
                return MISSING
            raise DownloadError(
                f"{spec.label}: download of {remote} failed ({result.error})",
                document=spec.name,
                phase=PHASE_DOWNLOAD,
            )
        try:
            text = local.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DownloadError(
                f"{spec.label}: staged copy {local} unreadable ({exc})",
                document=spec.name,
                phase=PHASE_DOWNLOAD,
            ) from exc
        if spec.is_text:
            return text
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DocumentParseError(
                f"{spec.label}: {remote} is not valid JSON ({exc})",
                document=spec.name,
                phase=PHASE_PARSE,
            ) from exc

    # -------------------------- save --------------------------
    def save(self, name: str, content: Any) -> dict:
        return self.save_spec(self.spec(name), content)

    def save_page(self, filename: str, content: Any) -> dict:
        return self.save_spec(self.page_spec(filename), content)

    def save_spec(self, spec: DocumentSpec, content: Any) -> dict:
        payload = self._serialize(spec, content)
        return self.storage.with_session(lambda t: self._save(t, spec, payload))

    def _serialize(self, spec: DocumentSpec, content: Any) -> str:
        if spec.is_text:
            if not isinstance(content, str) or len(content.strip()) < self.html_min_length:
                length = len(content) if isinstance(content, str) else 0
                logger.error(
                    "%s: refusing to overwrite with %s content of length %d",
                    spec.label,
                    type(content).__name__,
                    length,
                )
                raise ValidationError(
                    f"{spec.label}: content too short or invalid (length {length}, "
                    f"minimum {self.html_min_length}); refusing to overwrite",
                    document=spec.name,
                    phase=PHASE_VALIDATE,
                )
            return content
        try:
            return json.dumps(content, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                f"{spec.label}: content is not JSON serializable ({exc})",
                document=spec.name,
                phase=PHASE_VALIDATE,
            ) from exc

    def _save(self, transport: Transport, spec: DocumentSpec, payload: str) -> dict:
        remote = self.storage.remote_path(spec.filename)
        area = self.staging_area(spec, PHASE_WRITE_LOCAL)
        keep = False
        try:
            if self.backup_before_save:
                self._backup(transport, spec, remote, area)

            local = area / spec.filename
            try:
                local.write_text(payload, encoding="utf-8")
            except OSError as exc:
                raise LocalWriteError(
                    f"{spec.label}: writing staged copy {local} failed ({exc})",
                    document=spec.name,
                    phase=PHASE_WRITE_LOCAL,
                ) from exc

            uploaded = transport.upload_file(str(local), remote)
            if not uploaded:
                keep = True
                logger.error("%s: upload failed, staged copy kept at %s", spec.label, local)
                raise UploadError(
                    f"{spec.label}: upload to {remote} failed ({uploaded.error})",
                    document=spec.name,
                    phase=PHASE_UPLOAD,
                )
        finally:
            if not keep:
                shutil.rmtree(area, ignore_errors=True)
        logger.info("%s saved to %s", spec.label, remote)
        return {"message": f"{spec.label} saved successfully to {self.storage.label}"}

    def _backup(self, transport: Transport, spec: DocumentSpec, remote: str, area: Path) -> bool:
        """Best effort: copy the current remote file to ``<name>.backup``."""
        local = area / f"{spec.filename}.backup"
        downloaded = transport.download_file(remote, str(local))
        if not downloaded:
            if downloaded.missing:
                logger.warning("%s: no current copy at %s, skipping backup", spec.label, remote)
            else:
                logger.warning("%s: backup download failed (%s)", spec.label, downloaded.error)
            return False
        uploaded = transport.upload_file(str(local), f"{remote}.backup")
        if not uploaded:
            logger.warning("%s: backup upload failed (%s)", spec.label, uploaded.error)
            return False
        logger.info("%s: backup written to %s.backup", spec.label, remote)
        return True
