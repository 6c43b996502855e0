"""
Multilingual field helpers.

A field is either a plain string (legacy, single language) or a mapping keyed
by language code. Readers ask for a language and fall back to English, then
to any non-empty translation.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

DEFAULT_LANG = "en"
SUPPORTED_LANGS = ("en", "cs", "uk")


def _present(value: Any) -> bool:
    return value is not None and value != "" and value != []


def localize(value: Any, lang: str, default_lang: str = DEFAULT_LANG, fallback: Any = "") -> Any:
    """Resolve ``value`` for ``lang``; non-mapping values are returned verbatim."""
    if isinstance(value, Mapping):
        for key in (lang, default_lang):
            candidate = value.get(key)
            if _present(candidate):
                return candidate
        for candidate in value.values():
            if _present(candidate):
                return candidate
        return fallback
    if value is None:
        return fallback
    return value


def normalize_lang(lang: str | None, supported: Iterable[str] = SUPPORTED_LANGS) -> str:
    code = (lang or "").strip().lower().split("-", 1)[0]
    allowed = tuple(supported)
    return code if code in allowed else DEFAULT_LANG


def supported_languages(config: Any) -> tuple[str, ...]:
    """Language codes from the config's language registry, defaulting to en/cs/uk."""
    registry = config.get("languages") if isinstance(config, Mapping) else None
    codes: list[str] = []
    if isinstance(registry, Mapping):
        codes = [str(code) for code in registry.keys()]
    elif isinstance(registry, list):
        for item in registry:
            if isinstance(item, Mapping) and item.get("code"):
                codes.append(str(item["code"]))
            elif isinstance(item, str):
                codes.append(item)
    return tuple(c.lower() for c in codes) or SUPPORTED_LANGS


def get_by_path(data: Any, path: str) -> Any:
    """Look up a dotted path (``hero.title``) in nested mappings; None when absent."""
    current = data
    for key in (path or "").split("."):
        if not isinstance(current, Mapping) or current.get(key) is None:
            return None
        current = current[key]
    return current


def section_text(translations: Any, lang: str, path: str) -> Any:
    """Translation lookup in ``{"sections": {lang: {...}}}`` with English fallback."""
    sections = translations.get("sections") if isinstance(translations, Mapping) else None
    if not isinstance(sections, Mapping):
        return None
    value = get_by_path(sections.get(lang), path)
    if value is None and lang != DEFAULT_LANG:
        value = get_by_path(sections.get(DEFAULT_LANG), path)
    return value
