"""Unpack downloaded bundles and flatten them into one file per language.

Bundles requested with a ``%LANG_ISO%`` directory prefix arrive as one folder
per language code holding the project's original file names::

    en/messages.json
    fr/messages.json

Normalisation moves every JSON file of a language folder to ``<code>.json`` at
the top of the working directory. Flat bundles (no prefix) already use that
layout and are left untouched.
"""

from __future__ import annotations

import logging
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ArchiveError

logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"


@dataclass(frozen=True)
class RenameConflict:
    """Two sources were normalised onto the same destination file."""

    destination: str
    replaced: str
    kept: str


@dataclass
class NormalisationReport:
    """Outcome of flattening a working directory."""

    renamed: dict[str, str] = field(default_factory=dict)
    conflicts: list[RenameConflict] = field(default_factory=list)

    @property
    def languages(self) -> list[str]:
        """Language codes that received a file from a language folder."""

        return sorted({Path(target).stem for target in self.renamed.values()})


def _ensure_inside(root: Path, member: str) -> None:
    resolved = (root / member).resolve()
    if resolved != root and root not in resolved.parents:
        raise ArchiveError(f"Archive entry escapes the working directory: {member}")


def extract_archive(archive_path: Path, target_dir: Path) -> list[str]:
    """Decompress every entry of ``archive_path`` into ``target_dir``."""

    if not archive_path.is_file():
        raise ArchiveError(f"Archive not found: {archive_path}")

    root = target_dir.resolve()
    try:
        with zipfile.ZipFile(archive_path) as bundle:
            members = bundle.namelist()
            for member in members:
                _ensure_inside(root, member)
            bundle.extractall(root)
    except ArchiveError:
        raise
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError) as exc:
        raise ArchiveError(f"Corrupt archive {archive_path.name}: {exc}") from exc
    except OSError as exc:
        raise ArchiveError(f"Unable to extract {archive_path.name}: {exc}") from exc

    logger.info("Extracted %d entries from %s", len(members), archive_path.name)
    return members


def _language_directories(root: Path) -> list[Path]:
    """Top-level folders, ignoring archiver metadata such as ``__MACOSX``."""

    return sorted(
        (entry for entry in root.iterdir() if entry.is_dir() and not entry.name.startswith("__")),
        key=lambda entry: entry.name,
    )


def normalise_layout(target_dir: Path) -> NormalisationReport:
    """Rename ``<code>/<anything>.json`` to ``<code>.json`` at the top level.

    Files inside a language folder are processed in sorted name order and the
    last one processed wins when several map onto the same destination. Every
    replacement is logged and recorded in the returned report.
    """

    report = NormalisationReport()

    try:
        for directory in _language_directories(target_dir):
            destination = target_dir / f"{directory.name}{JSON_SUFFIX}"
            sources = sorted(
                (
                    entry
                    for entry in directory.iterdir()
                    if entry.is_file() and entry.name.endswith(JSON_SUFFIX)
                ),
                key=lambda entry: entry.name,
            )
            for source in sources:
                relative = f"{directory.name}/{source.name}"
                if destination.exists():
                    replaced = next(
                        (
                            previous
                            for previous, target in reversed(report.renamed.items())
                            if target == destination.name
                        ),
                        destination.name,
                    )
                    conflict = RenameConflict(
                        destination=destination.name,
                        replaced=replaced,
                        kept=relative,
                    )
                    report.conflicts.append(conflict)
                    logger.warning(
                        "%s overwrites %s while normalising %s",
                        relative,
                        replaced,
                        destination.name,
                    )
                source.replace(destination)
                report.renamed[relative] = destination.name

            if not any(directory.iterdir()):
                directory.rmdir()
    except OSError as exc:
        raise ArchiveError(f"Unable to normalise {target_dir}: {exc}") from exc

    return report


def unpack_bundle(archive_path: Path, target_dir: Path) -> NormalisationReport:
    """Extract ``archive_path`` into ``target_dir``, normalise it and drop the archive."""

    extract_archive(archive_path, target_dir)
    report = normalise_layout(target_dir)
    try:
        archive_path.unlink()
    except OSError as exc:
        raise ArchiveError(f"Unable to remove {archive_path.name}: {exc}") from exc
    return report


__all__ = [
    "JSON_SUFFIX",
    "NormalisationReport",
    "RenameConflict",
    "extract_archive",
    "normalise_layout",
    "unpack_bundle",
]
