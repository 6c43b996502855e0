"""
Admin accounts kept in the remote ``users.json`` document.

The store is an explicit handle: the app refreshes it at startup (and on
demand); nothing else caches users.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from artbat_admin.core.security import hash_password, is_legacy_hash, verify_password
from artbat_admin.repositories.documents import DocumentRepository
from artbat_admin.repositories.errors import StorageError

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_EDITOR = "editor"
PROTECTED_USERNAME = "admin"

DEFAULT_USER_SETTINGS = {"maxLoginAttempts": 5, "sessionTimeout": 3600, "passwordMinLength": 8}


class UserStoreError(Exception):
    """Raised for invalid user-management requests (duplicates, unknown users...)."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class AdminUser:
    username: str
    password_hash: str
    role: str = ROLE_EDITOR
    is_active: bool = True
    email: str = ""
    id: str = ""
    created_at: Optional[str] = None
    last_login: Optional[str] = None
    extra: dict = field(default_factory=dict)

    _KNOWN = {"id", "username", "email", "passwordHash", "password", "role", "isActive", "createdAt", "lastLogin"}

    @classmethod
    def from_dict(cls, data: dict) -> "AdminUser":
        return cls(
            username=str(data.get("username") or ""),
            # older documents store the hash under "password"
            password_hash=str(data.get("passwordHash") or data.get("password") or ""),
            role=str(data.get("role") or ROLE_EDITOR),
            is_active=bool(data.get("isActive", True)),
            email=str(data.get("email") or ""),
            id=str(data.get("id") or ""),
            created_at=data.get("createdAt"),
            last_login=data.get("lastLogin"),
            extra={k: v for k, v in data.items() if k not in cls._KNOWN},
        )

    def to_dict(self) -> dict:
        out = dict(self.extra)
        out.update(
            {
                "id": self.id,
                "username": self.username,
                "email": self.email,
                "passwordHash": self.password_hash,
                "role": self.role,
                "isActive": self.is_active,
                "createdAt": self.created_at,
                "lastLogin": self.last_login,
            }
        )
        return out

    def public(self) -> dict:
        return {"username": self.username, "role": self.role, "email": self.email}


def parse_users_document(data: Any) -> tuple[list[AdminUser], dict]:
    """Accept ``{"users": [...], "settings": {...}}`` or a bare list of users."""
    if isinstance(data, list):
        raw_users, settings = data, {}
    elif isinstance(data, dict):
        raw_users = data.get("users") or []
        settings = data.get("settings") or {}
    else:
        raw_users, settings = [], {}
    users = [AdminUser.from_dict(u) for u in raw_users if isinstance(u, dict) and u.get("username")]
    return users, dict(settings)


class UserStore:
    def __init__(self, documents: DocumentRepository) -> None:
        self.documents = documents
        self._users: dict[str, AdminUser] = {}
        self._settings: dict = dict(DEFAULT_USER_SETTINGS)
        self._lock = threading.Lock()

    # -------------------------- cache --------------------------
    def refresh(self) -> int:
        """Reload users from the remote document; returns how many were loaded."""
        data = self.documents.load_or_none("users")
        if data is None:
            logger.warning("users.json not found; no admin accounts available")
        users, settings = parse_users_document(data)
        with self._lock:
            self._users = {u.username: u for u in users}
            self._settings = {**DEFAULT_USER_SETTINGS, **settings}
        logger.info("loaded %d admin users", len(users))
        return len(users)

    def all(self) -> list[AdminUser]:
        with self._lock:
            return list(self._users.values())

    def find_active(self, username: str) -> Optional[AdminUser]:
        with self._lock:
            user = self._users.get((username or "").strip())
        if user and user.is_active:
            return user
        return None

    def authenticate(self, username: str, password: str) -> Optional[AdminUser]:
        user = self.find_active(username)
        if not user or not verify_password(password or "", user.password_hash):
            return None
        user.last_login = _now_iso()
        if is_legacy_hash(user.password_hash):
            self._upgrade_hash(user.username, password)
        return user

    def _upgrade_hash(self, username: str, password: str) -> None:
        """Rewrite a bcrypt hash as argon2; login still succeeds if the upload fails."""
        try:
            self.set_password(username, password)
        except (StorageError, UserStoreError) as exc:
            logger.warning("could not upgrade password hash for %s: %s", username, exc)
            return
        logger.info("password hash for %s upgraded to argon2", username)

    # -------------------------- remote edits --------------------------
    def _edit(self, mutate) -> list[AdminUser]:
        """Download users.json, apply ``mutate(users)``, upload, refresh the cache."""
        data = self.documents.load_or_none("users")
        users, settings = parse_users_document(data)
        if data is None:
            settings = dict(DEFAULT_USER_SETTINGS)
        mutate(users)
        self.documents.save("users", {"users": [u.to_dict() for u in users], "settings": settings})
        with self._lock:
            self._users = {u.username: u for u in users}
            self._settings = {**DEFAULT_USER_SETTINGS, **settings}
        return users

    def _min_length(self) -> int:
        try:
            return int(self._settings.get("passwordMinLength") or 0)
        except (TypeError, ValueError):
            return 0

    def add_user(self, username: str, password: str, *, email: str = "", role: str = ROLE_EDITOR) -> AdminUser:
        username = (username or "").strip()
        if not username or not password:
            raise UserStoreError("username and password are required")
        if role not in (ROLE_ADMIN, ROLE_EDITOR):
            raise UserStoreError(f"unknown role '{role}'")
        created = AdminUser(
            username=username,
            password_hash=hash_password(password),
            role=role,
            email=(email or "").strip(),
            id=uuid.uuid4().hex,
            created_at=_now_iso(),
        )

        def _add(users: list[AdminUser]) -> None:
            for u in users:
                if u.username == username or (created.email and u.email == created.email):
                    raise UserStoreError("a user with that username or email already exists")
            if len(password) < self._min_length():
                raise UserStoreError(f"password must be at least {self._min_length()} characters")
            users.append(created)

        self._edit(_add)
        return created

    def remove_user(self, username: str) -> None:
        if username == PROTECTED_USERNAME:
            raise UserStoreError("the main administrator cannot be removed")

        def _remove(users: list[AdminUser]) -> None:
            remaining = [u for u in users if u.username != username]
            if len(remaining) == len(users):
                raise UserStoreError(f"unknown user '{username}'")
            users[:] = remaining

        self._edit(_remove)

    def set_password(self, username: str, password: str) -> None:
        if not password:
            raise UserStoreError("password cannot be empty")

        def _passwd(users: list[AdminUser]) -> None:
            user = next((u for u in users if u.username == username), None)
            if user is None:
                raise UserStoreError(f"unknown user '{username}'")
            user.password_hash = hash_password(password)

        self._edit(_passwd)

    def set_active(self, username: str, active: bool) -> None:
        def _toggle(users: list[AdminUser]) -> None:
            user = next((u for u in users if u.username == username), None)
            if user is None:
                raise UserStoreError(f"unknown user '{username}'")
            user.is_active = active

        self._edit(_toggle)
