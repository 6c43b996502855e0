"""Registry of the well-known documents kept under the remote base path."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

KIND_JSON = "json"
KIND_TEXT = "text"


@dataclass(frozen=True)
class DocumentSpec:
    name: str
    filename: str
    label: str
    kind: str = KIND_JSON

    @property
    def is_text(self) -> bool:
        return self.kind == KIND_TEXT


CONFIG = DocumentSpec("config", "config.json", "Config")
TRANSLATIONS = DocumentSpec("translations", "translations.json", "Translations")
UPDATES = DocumentSpec("updates", "updates.json", "Updates")
PIXELS = DocumentSpec("pixels", "pixels.json", "Pixels")
HTML = DocumentSpec("html", "index.html", "HTML", KIND_TEXT)
USERS = DocumentSpec("users", "users.json", "Users")

DOCUMENTS = {spec.name: spec for spec in (CONFIG, TRANSLATIONS, UPDATES, PIXELS, HTML, USERS)}


def get_document(name: str) -> Optional[DocumentSpec]:
    return DOCUMENTS.get((name or "").strip().lower())


def html_page(filename: str) -> DocumentSpec:
    """Descriptor for an extra page saved next to index.html (e.g. ``ru.html``)."""
    if filename == HTML.filename:
        return HTML
    return DocumentSpec(f"html:{filename}", filename, filename, KIND_TEXT)
