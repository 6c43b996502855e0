"""
Service layer for admin authentication and sessions.
"""

from .auth_service import AuthService  # noqa: F401
from .session_service import AdminSessionStore  # noqa: F401
