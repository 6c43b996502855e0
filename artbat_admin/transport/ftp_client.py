"""
Thin wrapper around ftplib.FTP used as the remote document store.

One instance holds at most one passive-mode session. Every operation returns
a TransferResult (or an empty listing) instead of raising, and logs the
failure detail before swallowing it.
"""

from __future__ import annotations

import ftplib
import logging
import posixpath
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from artbat_admin.core.config import FTPCredentials
from artbat_admin.transport.base import (
    TYPE_DIR,
    TYPE_FILE,
    RemoteEntry,
    TransferResult,
    resolve_remote,
)

logger = logging.getLogger(__name__)


def _mlsd_timestamp(value: str | None) -> Optional[str]:
    if not value:
        return None
    try:
        return datetime.strptime(value[:14], "%Y%m%d%H%M%S").isoformat()
    except ValueError:
        return value


def parse_list_line(line: str) -> Optional[RemoteEntry]:
    """Parse one unix-style ``LIST`` line (fallback when MLSD is unsupported)."""
    parts = line.split(None, 8)
    if len(parts) < 9:
        return None
    name = parts[8]
    if name in (".", ".."):
        return None
    kind = TYPE_DIR if parts[0].startswith("d") else TYPE_FILE
    try:
        size = int(parts[4])
    except ValueError:
        size = 0
    return RemoteEntry(name=name, type=kind, size=size, modified=" ".join(parts[5:8]))


class FTPTransport:
    """Connection-scoped FTP client."""

    label = "FTP"

    def __init__(
        self,
        credentials: FTPCredentials,
        *,
        timeout: float = 30.0,
        ftp_factory: Callable[[], ftplib.FTP] = ftplib.FTP,
    ) -> None:
        self.credentials = credentials
        self.timeout = timeout
        self._ftp_factory = ftp_factory
        self._ftp: ftplib.FTP | None = None
        self._root = "/"

    @property
    def connected(self) -> bool:
        return self._ftp is not None

    def _resolve(self, remote_path: str) -> str:
        return resolve_remote(self._root, remote_path)

    # -------------------------- session --------------------------
    def connect(self) -> TransferResult:
        creds = self.credentials
        if self._ftp is not None:
            return TransferResult.success(creds.host)
        logger.info("[ftp] connecting %s", creds.describe())
        ftp = self._ftp_factory()
        try:
            ftp.connect(creds.host, creds.port, timeout=self.timeout)
            ftp.login(creds.user, creds.password)
            ftp.set_pasv(True)
            self._root = ftp.pwd() or "/"
        except ftplib.all_errors as exc:
            logger.error("[ftp] connection to %s as %s failed: %s", creds.host, creds.user, exc)
            ftp.close()
            return TransferResult.failure(creds.host, str(exc))
        self._ftp = ftp
        logger.info("[ftp] connected to %s:%s (root %s)", creds.host, creds.port, self._root)
        return TransferResult.success(creds.host)

    def disconnect(self) -> None:
        ftp, self._ftp = self._ftp, None
        if ftp is None:
            return
        try:
            ftp.quit()
        except ftplib.all_errors as exc:
            logger.warning("[ftp] quit failed, closing socket: %s", exc)
            ftp.close()
        logger.info("[ftp] disconnected from %s", self.credentials.host)

    # -------------------------- transfers --------------------------
    def upload_file(self, local_path: str, remote_path: str) -> TransferResult:
        ftp = self._ftp
        target = self._resolve(remote_path)
        if ftp is None:
            return TransferResult.failure(target, "not connected")
        try:
            with open(local_path, "rb") as fh:
                ftp.storbinary(f"STOR {target}", fh)
        except ftplib.all_errors as exc:
            logger.error("[ftp] upload %s -> %s failed: %s", local_path, target, exc)
            return TransferResult.failure(target, str(exc))
        logger.info("[ftp] uploaded %s -> %s", local_path, target)
        return TransferResult.success(target)

    def _exists(self, target: str) -> bool | None:
        """True/False when the listing answered, None when the session failed."""
        parent, name = posixpath.split(target)
        try:
            names = self._ftp.nlst(parent or "/")  # type: ignore[union-attr]
        except ftplib.error_perm:
            # most servers answer 550 for an empty or absent directory
            return False
        except ftplib.all_errors as exc:
            logger.error("[ftp] cannot list %s: %s", parent, exc)
            return None
        return any(posixpath.basename(n.rstrip("/")) == name for n in names)

    def download_file(self, remote_path: str, local_path: str) -> TransferResult:
        ftp = self._ftp
        target = self._resolve(remote_path)
        if ftp is None:
            return TransferResult.failure(target, "not connected")
        exists = self._exists(target)
        if exists is None:
            return TransferResult.failure(target, "existence check failed")
        if not exists:
            logger.warning("[ftp] remote file not found: %s", target)
            return TransferResult.failure(target, "remote file not found", missing=True)
        local = Path(local_path)
        try:
            local.parent.mkdir(parents=True, exist_ok=True)
            with local.open("wb") as fh:
                ftp.retrbinary(f"RETR {target}", fh.write)
        except ftplib.all_errors as exc:
            logger.error("[ftp] download %s -> %s failed: %s", target, local, exc)
            local.unlink(missing_ok=True)
            return TransferResult.failure(target, str(exc))
        logger.info("[ftp] downloaded %s -> %s", target, local)
        return TransferResult.success(target)

    # -------------------------- directories --------------------------
    def list_files(self, remote_path: str) -> list[RemoteEntry]:
        ftp = self._ftp
        target = self._resolve(remote_path)
        if ftp is None:
            return []
        try:
            ftp.cwd(target)
            try:
                entries = [
                    RemoteEntry(
                        name=name,
                        type=TYPE_DIR if facts.get("type") == "dir" else TYPE_FILE,
                        size=int(facts.get("size") or 0),
                        modified=_mlsd_timestamp(facts.get("modify")),
                    )
                    for name, facts in ftp.mlsd(facts=["type", "size", "modify"])
                    if facts.get("type") in ("file", "dir")
                ]
            except ftplib.error_perm:
                lines: list[str] = []
                ftp.retrlines("LIST", lines.append)
                entries = [e for e in (parse_list_line(line) for line in lines) if e]
        except ftplib.all_errors as exc:
            logger.error("[ftp] listing %s failed: %s", target, exc)
            return []
        return entries

    def create_directory(self, remote_path: str) -> TransferResult:
        ftp = self._ftp
        target = self._resolve(remote_path)
        if ftp is None:
            return TransferResult.failure(target, "not connected")
        try:
            ftp.cwd("/")
            for segment in [s for s in target.split("/") if s]:
                try:
                    ftp.cwd(segment)
                except ftplib.error_perm:
                    ftp.mkd(segment)
                    ftp.cwd(segment)
        except ftplib.all_errors as exc:
            logger.error("[ftp] mkdir %s failed: %s", target, exc)
            return TransferResult.failure(target, str(exc))
        logger.info("[ftp] directory ready: %s", target)
        return TransferResult.success(target)

    def delete_file(self, remote_path: str) -> TransferResult:
        ftp = self._ftp
        target = self._resolve(remote_path)
        if ftp is None:
            return TransferResult.failure(target, "not connected")
        try:
            ftp.delete(target)
        except ftplib.error_perm as exc:
            logger.error("[ftp] delete %s refused: %s", target, exc)
            return TransferResult.failure(target, str(exc), missing=str(exc).startswith("550"))
        except ftplib.all_errors as exc:
            logger.error("[ftp] delete %s failed: %s", target, exc)
            return TransferResult.failure(target, str(exc))
        logger.info("[ftp] deleted %s", target)
        return TransferResult.success(target)
