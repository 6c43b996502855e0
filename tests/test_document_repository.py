from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

# Make the package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from artbat_admin.repositories.documents import DocumentRepository  # noqa: E402
from artbat_admin.repositories.errors import (  # noqa: E402
    DocumentParseError,
    DownloadError,
    StorageConnectionError,
    UnknownDocumentError,
    UploadError,
    ValidationError,
)
from fakes import FakeRemote  # noqa: E402

BASE = "/artbat-prague"
LONG_HTML = "<!doctype html><html><head><title>ARTBAT Prague</title></head><body>" + "x" * 200 + "</body></html>"


@pytest.fixture()
def remote():
    return FakeRemote()


@pytest.fixture()
def repo(remote, tmp_path):
    return DocumentRepository(remote.storage(BASE), tmp_path / "staging", html_min_length=100)


def test_missing_document_returns_not_found_sentinel(repo, remote, tmp_path):
    result = repo.load("translations")

    assert result == {"message": "Translations file not found on FTP"}
    assert repo.is_not_found(result)
    assert not [p for p in (tmp_path / "staging").rglob("*") if p.is_file()]
    assert remote.disconnects == 1


def test_save_then_load_returns_same_document(repo, remote):
    config = {
        "event": {"title": {"en": "ARTBAT Prague", "cs": "ARTBAT Praha", "uk": "ARTBAT Прага"}},
        "tickets": [{"name": "Early bird", "price": 990, "soldOut": False}],
        "faqs": [],
        "venue": "O2 universum",
    }

    saved = repo.save("config", config)

    assert saved == {"message": "Config saved successfully to FTP"}
    assert repo.load("config") == config
    assert json.loads(remote.text(f"{BASE}/config.json")) == config


@pytest.mark.parametrize(
    "document",
    [
        {},
        [],
        "plain string",
        0,
        3.5,
        True,
        {"a": {"b": {"c": {"d": [1, [2, [3, {"e": None}]]]}}}},
        {"title": {"cs": "Žluťoučký kůň", "uk": "Привіт, Прага", "en": "Hello ❤"}},
        [{"quote": 'He said "hi"\n\tand left', "slash": "a\\b"}],
    ],
)
def test_load_after_save_returns_equal_document(repo, document):
    repo.save("translations", document)
    assert repo.load("translations") == document


def test_read_during_save_does_not_change_uploaded_payload(repo, remote):
    remote.put_text(f"{BASE}/config.json", json.dumps({"venue": "OLD"}))
    reads = []
    remote.before_upload[f"{BASE}/config.json"] = lambda: reads.append(repo.load("config"))

    result = repo.save("config", {"venue": "NEW"})

    assert result == {"message": "Config saved successfully to FTP"}
    assert reads == [{"venue": "OLD"}]
    assert repo.load("config") == {"venue": "NEW"}


def test_successful_calls_leave_no_staged_files(repo, remote, tmp_path):
    remote.put_text(f"{BASE}/index.html", LONG_HTML)

    repo.load("html")
    repo.save("html", LONG_HTML.replace("x", "z"))

    assert not list((tmp_path / "staging").rglob("*"))


def test_updates_keep_submitted_order(repo, remote):
    existing = [{"id": "u1", "ts": "2025-01-01T00:00:00Z", "pinned": False}]
    remote.put_text(f"{BASE}/updates.json", json.dumps(existing))

    submitted = existing + [{"id": "u2", "ts": "2025-02-01T00:00:00Z", "pinned": True}]
    repo.save("updates", submitted)

    assert [u["id"] for u in repo.load("updates")] == ["u1", "u2"]


@pytest.mark.parametrize("content", ["", "short", "   " + "a" * 50 + "   ", None, {"content": LONG_HTML}])
def test_html_validation_gate_blocks_remote_writes(repo, remote, content):
    with pytest.raises(ValidationError) as excinfo:
        repo.save("html", content)

    assert excinfo.value.document == "html"
    assert excinfo.value.phase == "validate"
    assert excinfo.value.status_code == 400
    assert remote.uploads() == []
    assert remote.connects == 0


def test_html_backup_happens_before_overwrite(repo, remote):
    old = LONG_HTML.replace("ARTBAT Prague", "Old page")
    remote.put_text(f"{BASE}/index.html", old)

    repo.save("html", LONG_HTML)

    assert remote.uploads() == [f"{BASE}/index.html.backup", f"{BASE}/index.html"]
    assert remote.text(f"{BASE}/index.html.backup") == old
    assert remote.text(f"{BASE}/index.html") == LONG_HTML


def test_backup_failure_does_not_block_save(repo, remote):
    remote.put_text(f"{BASE}/index.html", LONG_HTML)
    remote.fail_upload.add(f"{BASE}/index.html.backup")
    new = LONG_HTML.replace("x", "y")

    result = repo.save("html", new)

    assert result == {"message": "HTML saved successfully to FTP"}
    assert remote.text(f"{BASE}/index.html") == new


def test_first_save_skips_backup_when_nothing_to_back_up(repo, remote):
    repo.save("pixels", {"gtm": [], "ga": [], "fb": [], "tt": [], "custom": [], "settings": {}})
    assert remote.uploads() == [f"{BASE}/pixels.json"]


def test_html_loads_as_raw_text(repo, remote):
    remote.put_text(f"{BASE}/index.html", LONG_HTML)
    assert repo.load("html") == LONG_HTML


def test_upload_failure_names_document_and_phase_and_keeps_staged_file(repo, remote, tmp_path):
    remote.fail_upload.add(f"{BASE}/config.json")

    with pytest.raises(UploadError) as excinfo:
        repo.save("config", {"venue": "O2"})

    err = excinfo.value
    assert err.document == "config"
    assert err.phase == "upload-remote"
    assert "Config" in err.message
    assert [p.read_text(encoding="utf-8") for p in (tmp_path / "staging").rglob("config.json")] == [
        json.dumps({"venue": "O2"}, ensure_ascii=False, indent=2)
    ]
    assert remote.disconnects == 1


def test_invalid_json_reports_parse_phase(repo, remote):
    remote.put_text(f"{BASE}/translations.json", "{ not json")

    with pytest.raises(DocumentParseError) as excinfo:
        repo.load("translations")

    assert excinfo.value.document == "translations"
    assert excinfo.value.phase == "parse"


def test_transfer_failure_is_not_reported_as_missing(repo, remote):
    remote.put_text(f"{BASE}/updates.json", "[]")
    remote.fail_download.add(f"{BASE}/updates.json")

    with pytest.raises(DownloadError) as excinfo:
        repo.load("updates")

    assert excinfo.value.phase == "download"
    assert "Updates" in excinfo.value.message


def test_connection_failure_surfaces_as_connection_error(repo, remote):
    remote.fail_connect = True
    with pytest.raises(StorageConnectionError):
        repo.load("config")
    assert remote.disconnects == 1


def test_unknown_document_is_rejected(repo):
    with pytest.raises(UnknownDocumentError):
        repo.load("secrets")


def test_extra_pages_require_plain_html_filename(repo, remote):
    with pytest.raises(ValidationError):
        repo.save_page("../config.json", LONG_HTML)

    assert repo.save_page("ru.html", LONG_HTML) == {"message": "ru.html saved successfully to FTP"}
    assert remote.text(f"{BASE}/ru.html") == LONG_HTML


def test_load_or_none_distinguishes_missing(repo, remote):
    assert repo.load_or_none("users") is None
    remote.put_text(f"{BASE}/users.json", '{"users": []}')
    assert repo.load_or_none("users") == {"users": []}
