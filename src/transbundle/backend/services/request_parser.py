"""Helpers for normalising incoming translation requests."""

from __future__ import annotations

from werkzeug.exceptions import BadRequest

from transbundle.backend.config.schema import is_language_code


def parse_language(raw: str | None) -> str | None:
    """Return the language code from a path segment, or ``None`` for all languages."""

    if raw is None:
        return None

    language = raw.strip()
    if not language:
        raise BadRequest("Language code must not be empty")
    if not is_language_code(language):
        raise BadRequest(f"Invalid language code: {language}")

    return language
