"""Admin bearer-token sessions (issue, lookup, revoke)."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request

from artbat_admin.core.security import new_token

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class AdminSession:
    token: str
    username: str
    role: str
    expires_at: float

    def public(self) -> dict:
        return {"username": self.username, "role": self.role, "expiresAt": int(self.expires_at)}


class AdminSessionStore:
    """In-memory token store; tokens do not survive a restart."""

    def __init__(self, ttl_seconds: int = 86400, clock: Callable[[], float] = time.time) -> None:
        self.ttl_seconds = max(60, ttl_seconds)
        self._clock = clock
        self._sessions: dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    def issue(self, username: str, role: str) -> AdminSession:
        session = AdminSession(new_token(), username, role, self._clock() + self.ttl_seconds)
        with self._lock:
            self._purge_locked()
            self._sessions[session.token] = session
        return session

    def get(self, token: str | None) -> Optional[AdminSession]:
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session and session.expires_at < self._clock():
                del self._sessions[token]
                return None
            return session

    def revoke(self, token: str | None) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def _purge_locked(self) -> None:
        now = self._clock()
        self._sessions = {t: s for t, s in self._sessions.items() if s.expires_at >= now}


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization") or ""
    if header.lower().startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX) :].strip() or None
    return None
