"""Reader-side helpers for the updates (news posts) feed."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Iterable

from artbat_admin.domain.i18n import localize

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_PARAGRAPH_SPLIT = re.compile(r"\n{2,}")


def parse_ts(value: Any) -> datetime:
    """Parse an ISO timestamp; unparseable values sort as the oldest."""
    if not isinstance(value, str) or not value.strip():
        return _EPOCH
    text = value.strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_updates(items: Iterable[dict]) -> list[dict]:
    """Pinned first, then newest first. The stored order is never changed."""
    entries = [item for item in items if isinstance(item, dict)]
    return sorted(entries, key=lambda u: (not bool(u.get("pinned")), -parse_ts(u.get("ts")).timestamp()))


def paragraphs(body: Any) -> list[str]:
    if isinstance(body, list):
        return [str(line).strip() for line in body if str(line).strip()]
    if isinstance(body, str):
        return [p.strip() for p in _PARAGRAPH_SPLIT.split(body) if p.strip()]
    return []


def localized_update(update: dict, lang: str) -> dict:
    out = dict(update)
    out["title"] = localize(update.get("title"), lang)
    out["body"] = paragraphs(localize(update.get("body"), lang))
    return out


def public_feed(items: Any, lang: str) -> list[dict]:
    if not isinstance(items, list):
        return []
    feed = []
    for index, update in enumerate(sort_updates(items), start=1):
        entry = localized_update(update, lang)
        entry.setdefault("id", f"update-{index}")
        feed.append(entry)
    return feed
