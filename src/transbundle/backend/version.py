"""Expose the project version for health checks and diagnostics."""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "transbundle"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"

_PROJECT_VERSION = re.compile(
    r'^\[project\][^\[]*?^version\s*=\s*"([^"]+)"', re.MULTILINE | re.DOTALL
)


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed version, or the one declared in ``pyproject.toml``."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return read_pyproject_version(PYPROJECT_PATH)


def read_pyproject_version(path: Path) -> str:
    """Extract ``[project].version`` from a ``pyproject.toml`` file."""

    if not path.exists():  # pragma: no cover - repository invariant
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    match = _PROJECT_VERSION.search(path.read_text(encoding="utf-8"))
    if match is None:
        raise RuntimeError("Unable to determine project version from pyproject.toml")
    return match.group(1)


__all__ = ["get_project_version", "read_pyproject_version"]
