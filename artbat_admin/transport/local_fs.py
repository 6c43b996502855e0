"""Local-filesystem transport with the same contract as the FTP client."""

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path

from artbat_admin.transport.base import TYPE_DIR, TYPE_FILE, RemoteEntry, TransferResult, resolve_remote

logger = logging.getLogger(__name__)


class LocalTransport:
    """Serves "remote" paths from a directory on this machine."""

    label = "local storage"

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.connected = False

    def _local(self, remote_path: str) -> Path:
        # normpath on an absolute path drops any leading "..", so this stays under root
        rel = resolve_remote("/", remote_path).lstrip("/")
        return self.root / rel

    def connect(self) -> TransferResult:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("[local] storage root %s unavailable: %s", self.root, exc)
            return TransferResult.failure(str(self.root), str(exc))
        self.connected = True
        return TransferResult.success(str(self.root))

    def disconnect(self) -> None:
        self.connected = False

    def upload_file(self, local_path: str, remote_path: str) -> TransferResult:
        target = self._local(remote_path)
        if not self.connected:
            return TransferResult.failure(remote_path, "not connected")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(local_path, target)
        except OSError as exc:
            logger.error("[local] upload %s -> %s failed: %s", local_path, target, exc)
            return TransferResult.failure(remote_path, str(exc))
        return TransferResult.success(remote_path)

    def download_file(self, remote_path: str, local_path: str) -> TransferResult:
        source = self._local(remote_path)
        if not self.connected:
            return TransferResult.failure(remote_path, "not connected")
        if not source.is_file():
            logger.warning("[local] file not found: %s", source)
            return TransferResult.failure(remote_path, "remote file not found", missing=True)
        try:
            Path(local_path).parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, local_path)
        except OSError as exc:
            logger.error("[local] download %s -> %s failed: %s", source, local_path, exc)
            return TransferResult.failure(remote_path, str(exc))
        return TransferResult.success(remote_path)

    def list_files(self, remote_path: str) -> list[RemoteEntry]:
        folder = self._local(remote_path)
        if not self.connected or not folder.is_dir():
            return []
        entries = []
        try:
            for item in sorted(folder.iterdir(), key=lambda p: p.name):
                stat = item.stat()
                entries.append(
                    RemoteEntry(
                        name=item.name,
                        type=TYPE_DIR if item.is_dir() else TYPE_FILE,
                        size=0 if item.is_dir() else stat.st_size,
                        modified=datetime.fromtimestamp(stat.st_mtime).isoformat(),
                    )
                )
        except OSError as exc:
            logger.error("[local] listing %s failed: %s", folder, exc)
            return []
        return entries

    def create_directory(self, remote_path: str) -> TransferResult:
        if not self.connected:
            return TransferResult.failure(remote_path, "not connected")
        try:
            self._local(remote_path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return TransferResult.failure(remote_path, str(exc))
        return TransferResult.success(remote_path)

    def delete_file(self, remote_path: str) -> TransferResult:
        target = self._local(remote_path)
        if not self.connected:
            return TransferResult.failure(remote_path, "not connected")
        if not target.is_file():
            return TransferResult.failure(remote_path, "remote file not found", missing=True)
        try:
            target.unlink()
        except OSError as exc:
            return TransferResult.failure(remote_path, str(exc))
        return TransferResult.success(remote_path)
