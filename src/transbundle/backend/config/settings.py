"""Configuration loader combining an optional YAML file with the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .schema import ConfigurationError, ServiceSettings

CONFIG_FILE_ENV = "TRANSBUNDLE_CONFIG"

# (environment variable, section or None for top-level, field)
_ENVIRONMENT_FIELDS: tuple[tuple[str, str | None, str], ...] = (
    ("LOKALISE_API_KEY", "provider", "api_token"),
    ("LOKALISE_PROJECT_ID", "provider", "project_id"),
    ("LOKALISE_API_URL", "provider", "api_base_url"),
    ("TRANSBUNDLE_HTTP_TIMEOUT", "provider", "timeout_seconds"),
    ("TRANSBUNDLE_LANGUAGES", "bundle", "languages"),
    ("TRANSBUNDLE_FETCH_MODE", None, "fetch_mode"),
    ("TRANSBUNDLE_DEADLINE", None, "request_deadline_seconds"),
    ("TRANSBUNDLE_SCRATCH_DIR", None, "scratch_root"),
    ("TRANSBUNDLE_ALLOWED_ORIGINS", None, "allowed_origins"),
    ("TRANSBUNDLE_LOG_LEVEL", None, "log_level"),
)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


def _merge_environment(raw: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    merged = {
        key: dict(value) if isinstance(value, Mapping) else value
        for key, value in raw.items()
    }
    for variable, section, field in _ENVIRONMENT_FIELDS:
        value = environ.get(variable)
        if value is None or not value.strip():
            continue
        if section is None:
            merged[field] = value.strip()
            continue
        target = merged.setdefault(section, {})
        if not isinstance(target, dict):
            raise ConfigurationError(f"Configuration section '{section}' must be a mapping")
        target[field] = value.strip()
    return merged


def build_settings(
    environ: Mapping[str, str] | None = None,
    *,
    config_file: Path | None = None,
) -> ServiceSettings:
    """Validate settings from ``config_file`` overlaid with ``environ``."""

    environ = os.environ if environ is None else environ

    if config_file is None:
        configured = environ.get(CONFIG_FILE_ENV)
        config_file = Path(configured).expanduser() if configured else None

    raw: dict[str, Any] = {}
    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        raw = _load_yaml(config_file)

    merged = _merge_environment(raw, environ)
    if "provider" not in merged:
        raise ConfigurationError(
            "LOKALISE_API_KEY and LOKALISE_PROJECT_ID must be configured"
        )

    try:
        return ServiceSettings.model_validate(merged)
    except ValidationError as error:
        raise ConfigurationError(f"Configuration validation failed: {error}") from error


@lru_cache(maxsize=1)
def load_settings() -> ServiceSettings:
    """Load and cache settings from the process environment."""

    return build_settings()


__all__ = ["CONFIG_FILE_ENV", "build_settings", "load_settings"]
