"""
FTPTransport against an in-process pyftpdlib server.
"""
from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest

# Make the package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from artbat_admin.core.config import FTPCredentials  # noqa: E402
from artbat_admin.repositories.documents import DocumentRepository  # noqa: E402
from artbat_admin.repositories.storage import Storage  # noqa: E402
from artbat_admin.transport.ftp_client import FTPTransport, parse_list_line  # noqa: E402

pytest.importorskip("pyftpdlib")
from pyftpdlib.authorizers import DummyAuthorizer  # noqa: E402
from pyftpdlib.handlers import FTPHandler  # noqa: E402
from pyftpdlib.servers import FTPServer  # noqa: E402


@pytest.fixture()
def ftp_server(tmp_path):
    """Serve tmp_path/ftproot on a random localhost port for the test's duration."""
    root = tmp_path / "ftproot"
    (root / "artbat-prague").mkdir(parents=True)

    authorizer = DummyAuthorizer()
    authorizer.add_user("artbat", "secret", str(root), perm="elradfmwMT")
    handler = type("TestHandler", (FTPHandler,), {"authorizer": authorizer, "auth_failed_timeout": 0.1})
    server = FTPServer(("127.0.0.1", 0), handler)
    host, port = server.socket.getsockname()[:2]

    stop = threading.Event()

    def _serve():
        while not stop.is_set():
            server.serve_forever(timeout=0.05, blocking=False, handle_exit=False)
        server.close_all()

    thread = threading.Thread(target=_serve, daemon=True)
    thread.start()
    yield root, FTPCredentials(host=host, user="artbat", password="secret", port=port)
    stop.set()
    thread.join(timeout=5)


def _transport(creds: FTPCredentials) -> FTPTransport:
    return FTPTransport(creds, timeout=5)


def test_bad_password_returns_failure_without_raising(ftp_server):
    _, creds = ftp_server
    transport = _transport(FTPCredentials(creds.host, creds.user, "wrong", creds.port))

    result = transport.connect()

    assert not result
    assert not transport.connected
    transport.disconnect()  # safe after a failed connect


def test_disconnect_without_connect_is_safe(ftp_server):
    _, creds = ftp_server
    _transport(creds).disconnect()


def test_upload_download_list_delete(ftp_server, tmp_path):
    root, creds = ftp_server
    transport = _transport(creds)
    assert transport.connect()
    try:
        src = tmp_path / "config.json"
        src.write_text('{"venue": "O2"}', encoding="utf-8")

        assert transport.upload_file(str(src), "/artbat-prague/config.json")
        assert (root / "artbat-prague" / "config.json").read_text(encoding="utf-8") == '{"venue": "O2"}'

        dest = tmp_path / "out" / "nested" / "config.json"
        assert transport.download_file("artbat-prague/config.json", str(dest))
        assert dest.read_text(encoding="utf-8") == '{"venue": "O2"}'

        listing = {e.name: e for e in transport.list_files("/artbat-prague")}
        assert listing["config.json"].type == "file"
        assert listing["config.json"].size == len('{"venue": "O2"}')

        assert transport.delete_file("/artbat-prague/config.json")
        assert not (root / "artbat-prague" / "config.json").exists()
    finally:
        transport.disconnect()


def test_download_of_missing_file_is_flagged_and_creates_nothing(ftp_server, tmp_path):
    _, creds = ftp_server
    transport = _transport(creds)
    assert transport.connect()
    try:
        dest = tmp_path / "staging" / "updates.json"
        result = transport.download_file("/artbat-prague/updates.json", str(dest))
    finally:
        transport.disconnect()

    assert not result
    assert result.missing
    assert not dest.exists()


def test_create_directory_is_idempotent(ftp_server):
    root, creds = ftp_server
    transport = _transport(creds)
    assert transport.connect()
    try:
        assert transport.create_directory("/artbat-prague/assets/artists")
        assert transport.create_directory("/artbat-prague/assets/artists")
        dirs = [e for e in transport.list_files("/artbat-prague/assets") if e.is_dir]
    finally:
        transport.disconnect()

    assert (root / "artbat-prague" / "assets" / "artists").is_dir()
    assert [d.name for d in dirs] == ["artists"]


def test_listing_unknown_directory_is_empty(ftp_server):
    _, creds = ftp_server
    transport = _transport(creds)
    assert transport.connect()
    try:
        assert transport.list_files("/nope") == []
    finally:
        transport.disconnect()


def test_repository_round_trip_over_ftp(ftp_server, tmp_path):
    _, creds = ftp_server
    storage = Storage(lambda: _transport(creds), "/artbat-prague")
    repo = DocumentRepository(storage, tmp_path / "staging")
    updates = [{"id": "u1", "ts": "2025-01-01T00:00:00Z", "title": {"en": "Lineup", "cs": "Line-up"}}]

    assert repo.load("updates") == {"message": "Updates file not found on FTP"}
    assert repo.save("updates", updates) == {"message": "Updates saved successfully to FTP"}
    assert repo.load("updates") == updates


def test_parse_list_line_fallback():
    entry = parse_list_line("drwxr-xr-x   2 owner group     4096 Mar 01 12:00 artists")
    assert entry.name == "artists" and entry.is_dir
    entry = parse_list_line("-rw-r--r--   1 owner group   12345 Mar 01 12:00 hero image.jpg")
    assert entry.name == "hero image.jpg" and entry.size == 12345 and entry.type == "file"
    assert parse_list_line("total 8") is None
