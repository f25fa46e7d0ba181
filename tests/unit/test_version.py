"""Unit coverage for the project version helper."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path

import pytest

from transbundle.backend.version import PYPROJECT_PATH, get_project_version, read_pyproject_version


def test_get_project_version_prefers_installed_metadata(monkeypatch) -> None:
    get_project_version.cache_clear()  # type: ignore[attr-defined]
    monkeypatch.setattr(metadata, "version", lambda package: "9.9.9")

    try:
        assert get_project_version() == "9.9.9"
    finally:
        get_project_version.cache_clear()  # type: ignore[attr-defined]


def test_get_project_version_falls_back_to_pyproject(monkeypatch) -> None:
    get_project_version.cache_clear()  # type: ignore[attr-defined]

    def raise_package_not_found(_: str) -> str:
        raise metadata.PackageNotFoundError

    monkeypatch.setattr(metadata, "version", raise_package_not_found)

    try:
        assert get_project_version() == read_pyproject_version(PYPROJECT_PATH)
    finally:
        get_project_version.cache_clear()  # type: ignore[attr-defined]


def test_read_pyproject_version_ignores_other_sections(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(
        '[tool.other]\nversion = "0.0.1"\n\n[project]\nname = "demo"\nversion = "1.2.3"\n',
        encoding="utf-8",
    )

    assert read_pyproject_version(pyproject) == "1.2.3"


def test_read_pyproject_version_requires_a_version(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "demo"\n', encoding="utf-8")

    with pytest.raises(RuntimeError):
        read_pyproject_version(pyproject)
