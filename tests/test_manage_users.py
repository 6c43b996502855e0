from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the package and scripts importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
for path in (ROOT, ROOT / "scripts"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import manage_users  # noqa: E402
from artbat_admin.repositories.documents import DocumentRepository  # noqa: E402
from artbat_admin.repositories.users import UserStore  # noqa: E402
from fakes import FakeRemote  # noqa: E402


@pytest.fixture()
def store(tmp_path):
    return UserStore(DocumentRepository(FakeRemote().storage(), tmp_path / "staging"))


def test_add_and_list(store, capsys):
    assert manage_users.main(["add", "--username", "maria", "--password", "long-enough"], store=store) == 0
    assert manage_users.main(["list"], store=store) == 0

    out = capsys.readouterr().out
    assert "user maria added" in out
    assert "1. maria" in out
    assert "role=editor active" in out


def test_password_prompt_is_used_when_flag_missing(store, monkeypatch):
    answers = iter(["prompted-pass", "prompted-pass"])
    monkeypatch.setattr(manage_users.getpass, "getpass", lambda prompt="": next(answers))

    assert manage_users.main(["add", "--username", "petr"], store=store) == 0
    assert store.authenticate("petr", "prompted-pass") is not None


def test_protected_admin_returns_error_code(store, capsys):
    manage_users.main(["add", "--username", "admin", "--password", "s3cret-pass", "--role", "admin"], store=store)

    assert manage_users.main(["remove", "--username", "admin"], store=store) == 2
    assert "Error:" in capsys.readouterr().err


def test_deactivate_then_activate(store):
    manage_users.main(["add", "--username", "maria", "--password", "long-enough"], store=store)

    assert manage_users.main(["deactivate", "--username", "maria"], store=store) == 0
    assert store.authenticate("maria", "long-enough") is None
    assert manage_users.main(["activate", "--username", "maria"], store=store) == 0
    assert store.authenticate("maria", "long-enough") is not None


def test_storage_failure_returns_one(tmp_path, capsys):
    remote = FakeRemote()
    remote.fail_connect = True
    store = UserStore(DocumentRepository(remote.storage(), tmp_path / "staging"))

    assert manage_users.main(["list"], store=store) == 1
    assert "unavailable" in capsys.readouterr().err
