"""Exceptions raised by the storage adapter and repositories."""

from __future__ import annotations

from typing import Optional

PHASE_CONNECT = "connect"
PHASE_DOWNLOAD = "download"
PHASE_PARSE = "parse"
PHASE_VALIDATE = "validate"
PHASE_WRITE_LOCAL = "write-local"
PHASE_UPLOAD = "upload-remote"
PHASE_DELETE = "delete"
PHASE_MKDIR = "mkdir"


class StorageError(Exception):
    """Base class; carries the document and phase that failed."""

    status_code = 500

    def __init__(self, message: str, *, document: Optional[str] = None, phase: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.document = document
        self.phase = phase

    def as_dict(self) -> dict:
        payload: dict = {"error": self.message}
        if self.document:
            payload["document"] = self.document
        if self.phase:
            payload["phase"] = self.phase
        return payload


class StorageConnectionError(StorageError):
    status_code = 503


class DownloadError(StorageError):
    status_code = 502


class DocumentParseError(StorageError):
    pass


class LocalWriteError(StorageError):
    pass


class UploadError(StorageError):
    status_code = 502


class RemoteOperationError(StorageError):
    status_code = 502


class ValidationError(StorageError):
    status_code = 400


class UnknownDocumentError(StorageError):
    status_code = 404


class RemoteFileMissingError(RemoteOperationError):
    status_code = 404
