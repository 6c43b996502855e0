from __future__ import annotations

import sys
from pathlib import Path

# Make the package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from artbat_admin.domain.updates import paragraphs, parse_ts, public_feed, sort_updates  # noqa: E402


def test_pinned_first_then_newest_without_mutating_input():
    items = [
        {"id": "a", "ts": "2025-01-01T00:00:00Z"},
        {"id": "b", "ts": "2025-02-01T00:00:00+01:00"},
        {"id": "c", "ts": "2024-06-01T00:00:00Z", "pinned": True},
        {"id": "d", "ts": "not a date"},
    ]

    ordered = sort_updates(items)

    assert [u["id"] for u in ordered] == ["c", "b", "a", "d"]
    assert [u["id"] for u in items] == ["a", "b", "c", "d"]


def test_parse_ts_treats_naive_as_utc():
    assert parse_ts("2025-01-01T00:00:00") == parse_ts("2025-01-01T00:00:00Z")
    assert parse_ts(None).year == 1970


def test_paragraphs_split_on_blank_lines():
    assert paragraphs("one\n\n\ntwo\nstill two") == ["one", "two\nstill two"]
    assert paragraphs(["a", " ", "b"]) == ["a", "b"]
    assert paragraphs(None) == []


def test_public_feed_assigns_ids_and_localizes():
    feed = public_feed([{"ts": "2025-01-01T00:00:00Z", "title": {"en": "Hi", "uk": "Привіт"}}], "uk")
    assert feed == [{"ts": "2025-01-01T00:00:00Z", "title": "Привіт", "body": [], "id": "update-1"}]
    assert public_feed({"message": "Updates file not found on FTP"}, "en") == []
