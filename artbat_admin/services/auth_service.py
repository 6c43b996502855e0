"""
Admin login and token verification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from artbat_admin.repositories.users import UserStore
from artbat_admin.services.session_service import AdminSession, AdminSessionStore

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for authentication-related exceptions."""


class InvalidCredentialsError(AuthError):
    pass


class TokenMissingError(AuthError):
    pass


class TokenInvalidError(AuthError):
    pass


@dataclass
class LoginSuccess:
    token: str
    user: dict


class AuthService:
    """Checks credentials against the user store and issues bearer tokens."""

    def __init__(self, users: UserStore, sessions: AdminSessionStore) -> None:
        self.users = users
        self.sessions = sessions

    def login(self, username: str, password: str) -> LoginSuccess:
        user = self.users.authenticate(username, password)
        if user is None:
            logger.warning("failed admin login for %r", username)
            raise InvalidCredentialsError("Invalid credentials")
        session = self.sessions.issue(user.username, user.role)
        logger.info("admin %s logged in", user.username)
        return LoginSuccess(token=session.token, user=user.public())

    def verify(self, token: str | None) -> AdminSession:
        if not token:
            raise TokenMissingError("Token not provided")
        session = self.sessions.get(token)
        if session is None:
            raise TokenInvalidError("Invalid or expired token")
        if self.users.find_active(session.username) is None:
            # account removed or deactivated since the token was issued
            self.sessions.revoke(token)
            raise TokenInvalidError("Invalid or expired token")
        return session

    def logout(self, token: str | None) -> None:
        self.sessions.revoke(token)
