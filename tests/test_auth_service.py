from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from artbat_admin.repositories.documents import DocumentRepository  # noqa: E402
from artbat_admin.repositories.users import UserStore  # noqa: E402
from artbat_admin.services.auth_service import (  # noqa: E402
    AuthService,
    InvalidCredentialsError,
    TokenInvalidError,
    TokenMissingError,
)
from artbat_admin.services.session_service import AdminSessionStore  # noqa: E402
from fakes import FakeRemote  # noqa: E402


class Clock:
    def __init__(self) -> None:
        self.now = 1_700_000_000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def setup(tmp_path):
    users = UserStore(DocumentRepository(FakeRemote().storage(), tmp_path / "staging"))
    users.add_user("admin", "s3cret-pass", role="admin")
    clock = Clock()
    return AuthService(users, AdminSessionStore(ttl_seconds=3600, clock=clock)), users, clock


def test_login_issues_token_that_verifies(setup):
    svc, _, _ = setup
    result = svc.login("admin", "s3cret-pass")

    session = svc.verify(result.token)
    assert session.username == "admin"
    assert session.role == "admin"
    assert result.user["username"] == "admin"


def test_bad_credentials(setup):
    svc, _, _ = setup
    with pytest.raises(InvalidCredentialsError):
        svc.login("admin", "nope")
    with pytest.raises(InvalidCredentialsError):
        svc.login("ghost", "s3cret-pass")


def test_token_expires_after_ttl(setup):
    svc, _, clock = setup
    token = svc.login("admin", "s3cret-pass").token

    clock.now += 3599
    svc.verify(token)
    clock.now += 2
    with pytest.raises(TokenInvalidError):
        svc.verify(token)


def test_missing_token_and_logout(setup):
    svc, _, _ = setup
    with pytest.raises(TokenMissingError):
        svc.verify(None)

    token = svc.login("admin", "s3cret-pass").token
    svc.logout(token)
    with pytest.raises(TokenInvalidError):
        svc.verify(token)


def test_deactivated_user_loses_session(setup):
    svc, users, _ = setup
    users.add_user("maria", "long-enough")
    token = svc.login("maria", "long-enough").token

    users.set_active("maria", False)

    with pytest.raises(TokenInvalidError):
        svc.verify(token)
