"""
Configuration helpers for the admin backend.

Routers and repositories read a Settings object instead of touching
os.environ directly. Storage credentials have no defaults: a missing value is
reported by ``Settings.storage_problems()`` and the app refuses to start.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

STORAGE_FTP = "ftp"
STORAGE_LOCAL = "local"


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class FTPCredentials:
    host: str
    user: str
    password: str
    port: int = 21

    def describe(self) -> dict:
        """Loggable view: never includes the password itself."""
        return {"host": self.host, "user": self.user, "port": self.port, "has_password": bool(self.password)}


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    storage_backend: str
    ftp: FTPCredentials
    remote_base_path: str
    ftp_timeout_seconds: float
    local_storage_root: str
    staging_dir: Path
    html_min_length: int
    session_ttl_seconds: int
    cors_origins: tuple[str, ...] = field(default_factory=tuple)
    log_level: str = "INFO"

    def storage_problems(self) -> list[str]:
        problems: list[str] = []
        if self.storage_backend == STORAGE_FTP:
            for env_name, value in (
                ("FTP_HOST", self.ftp.host),
                ("FTP_USER", self.ftp.user),
                ("FTP_PASSWORD", self.ftp.password),
                ("FTP_REMOTE_PATH", self.remote_base_path),
            ):
                if not value:
                    problems.append(f"{env_name} is not set")
        elif self.storage_backend == STORAGE_LOCAL:
            if not self.local_storage_root:
                problems.append("LOCAL_STORAGE_ROOT is not set")
        else:
            problems.append(f"unknown STORAGE_BACKEND '{self.storage_backend}'")
        return problems

    def require_storage(self) -> None:
        problems = self.storage_problems()
        if problems:
            raise ConfigError("Storage is not configured: " + "; ".join(problems))


def _int(value: str | None, default: int = 0) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _float(value: str | None, default: float = 0.0) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _base_path(value: str | None) -> str:
    v = (value or "").strip()
    if not v:
        return ""
    return "/" + v.strip("/") if v.strip("/") else "/"


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    staging = os.getenv("STAGING_DIR") or os.path.join(tempfile.gettempdir(), "artbat-admin-staging")
    origins = tuple(o.strip() for o in (os.getenv("CORS_ORIGINS") or "").split(",") if o.strip())
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        storage_backend=(os.getenv("STORAGE_BACKEND") or STORAGE_FTP).strip().lower(),
        ftp=FTPCredentials(
            host=(os.getenv("FTP_HOST") or "").strip(),
            user=(os.getenv("FTP_USER") or "").strip(),
            password=os.getenv("FTP_PASSWORD") or "",
            port=_int(os.getenv("FTP_PORT"), 21),
        ),
        remote_base_path=_base_path(os.getenv("FTP_REMOTE_PATH")),
        ftp_timeout_seconds=max(1.0, _float(os.getenv("FTP_TIMEOUT_SECONDS"), 30.0)),
        local_storage_root=(os.getenv("LOCAL_STORAGE_ROOT") or "").strip(),
        staging_dir=Path(staging),
        html_min_length=max(0, _int(os.getenv("HTML_MIN_LENGTH"), 100)),
        session_ttl_seconds=max(60, _int(os.getenv("ADMIN_SESSION_TTL_SECONDS"), 86400)),
        cors_origins=origins,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
