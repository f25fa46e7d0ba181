"""Merge normalised translation files into a single payload."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .archive import JSON_SUFFIX
from .errors import ArchiveError

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    """Parsed catalogues keyed by language code plus the files left out."""

    translations: dict[str, Any] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)


def language_code_for(filename: str) -> str:
    """Return the language code encoded in a normalised file name."""

    return filename.split(".", 1)[0]


def collect_translations(directory: Path) -> AggregationResult:
    """Parse every top-level ``*.json`` file of ``directory``.

    Empty, malformed, and non-object files are skipped and reported in
    :attr:`AggregationResult.skipped`; they never fail the whole run. When two
    files share a language code the later one in sorted order wins and the
    earlier one is reported as a duplicate.
    """

    if not directory.is_dir():
        raise ArchiveError(f"Working directory missing: {directory}")

    result = AggregationResult()
    sources: dict[str, str] = {}
    try:
        candidates = sorted(
            entry
            for entry in directory.iterdir()
            if entry.is_file() and entry.name.endswith(JSON_SUFFIX)
        )
    except OSError as exc:
        raise ArchiveError(f"Unable to list {directory}: {exc}") from exc

    for path in candidates:
        code = language_code_for(path.name)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Unable to read %s: %s", path.name, exc)
            result.skipped[path.name] = "unreadable"
            continue

        if not content.strip():
            logger.warning("Skipping empty translation file %s", path.name)
            result.skipped[path.name] = "empty"
            continue

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.error("Skipping malformed translation file %s: %s", path.name, exc)
            result.skipped[path.name] = "malformed"
            continue

        if not isinstance(parsed, dict):
            logger.warning(
                "Skipping %s: expected a JSON object, found %s",
                path.name,
                type(parsed).__name__,
            )
            result.skipped[path.name] = "not an object"
            continue

        previous = sources.get(code)
        if previous is not None:
            logger.warning(
                "%s replaces %s for language %s", path.name, previous, code
            )
            result.skipped[previous] = "duplicate language code"

        result.translations[code] = parsed
        sources[code] = path.name

    return result


def aggregate_translations(directory: Path) -> dict[str, Any]:
    """Return the merged translations mapping for ``directory``."""

    return collect_translations(directory).translations


__all__ = [
    "AggregationResult",
    "aggregate_translations",
    "collect_translations",
    "language_code_for",
]
