"""
Transport contract shared by the FTP and local-filesystem backends.

Transports never raise for remote failures: every operation returns a
``TransferResult`` (falsy on failure) or, for listings, an empty list. The
caller decides what a failure means for the document it is handling.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Optional, Protocol

TYPE_FILE = "file"
TYPE_DIR = "dir"


@dataclass(frozen=True)
class TransferResult:
    ok: bool
    path: str
    error: str = ""
    # remote file absent, as opposed to a transfer failure
    missing: bool = False

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, path: str) -> "TransferResult":
        return cls(True, path)

    @classmethod
    def failure(cls, path: str, error: str, *, missing: bool = False) -> "TransferResult":
        return cls(False, path, error=error, missing=missing)


@dataclass(frozen=True)
class RemoteEntry:
    name: str
    type: str
    size: int = 0
    modified: Optional[str] = None

    @property
    def is_dir(self) -> bool:
        return self.type == TYPE_DIR


class Transport(Protocol):
    """Connection-scoped file transport."""

    label: str

    def connect(self) -> TransferResult: ...

    def disconnect(self) -> None: ...

    def upload_file(self, local_path: str, remote_path: str) -> TransferResult: ...

    def download_file(self, remote_path: str, local_path: str) -> TransferResult: ...

    def list_files(self, remote_path: str) -> list[RemoteEntry]: ...

    def create_directory(self, remote_path: str) -> TransferResult: ...

    def delete_file(self, remote_path: str) -> TransferResult: ...


def join_remote(*parts: str) -> str:
    """Join remote path segments with forward slashes, collapsing duplicates."""
    cleaned = [p.strip("/") for p in parts if p and p.strip("/")]
    absolute = bool(parts) and str(parts[0]).startswith("/")
    joined = "/".join(cleaned)
    return ("/" + joined) if absolute else joined


def resolve_remote(root: str, remote_path: str) -> str:
    """Resolve ``remote_path`` against ``root`` unless it is already absolute."""
    if remote_path.startswith("/"):
        return posixpath.normpath(remote_path)
    return posixpath.normpath(posixpath.join(root or "/", remote_path))
