"""Pydantic models describing the service and bundle configuration."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from typing_extensions import Self

LANGUAGE_CODE_PATTERN = re.compile(r"^[A-Za-z]{2,3}([_-][A-Za-z0-9]{2,8})*$")
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class FetchMode(str, Enum):
    """How the archive is obtained from the localization service."""

    BUNDLE = "bundle"
    DIRECT = "direct"


def is_language_code(value: str) -> bool:
    return bool(LANGUAGE_CODE_PATTERN.match(value))


def _coerce_code_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, Sequence):
        raise ConfigurationError("Language filters must be a list of codes")
    codes = [str(item).strip() for item in value if str(item).strip()]
    invalid = [code for code in codes if not is_language_code(code)]
    if invalid:
        raise ConfigurationError(f"Invalid language codes: {', '.join(invalid)}")
    return codes


class ProviderSettings(ImmutableModel):
    """Connection details for the localization service."""

    api_token: SecretStr
    project_id: str
    api_base_url: str = "https://api.lokalise.com/api2"
    timeout_seconds: float = Field(default=30.0, gt=0)
    chunk_size: int = Field(default=64 * 1024, gt=0)

    @field_validator("project_id")
    @classmethod
    def _require_project(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ConfigurationError("A project identifier is required")
        return value

    @field_validator("api_base_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        if not value.startswith(("https://", "http://")):
            raise ConfigurationError("The provider API URL must be absolute")
        return value.rstrip("/")

    @model_validator(mode="after")
    def _require_token(self) -> Self:
        if not self.api_token.get_secret_value().strip():
            raise ConfigurationError("An API token is required")
        return self


class BundleOptions(ImmutableModel):
    """Export options sent with every bundle request."""

    format: str = "json"
    plural_format: str = "i18next"
    original_filenames: bool = True
    directory_prefix: str = "%LANG_ISO%"
    indentation: str = "2sp"
    languages: tuple[str, ...] = ()

    @field_validator("format")
    @classmethod
    def _json_only(cls, value: str) -> str:
        if value != "json":
            raise ConfigurationError("Only the json export format is supported")
        return value

    @field_validator("languages", mode="before")
    @classmethod
    def _coerce_languages(cls, value: Any) -> tuple[str, ...]:
        return tuple(_coerce_code_list(value))


class BundleRequest(ImmutableModel):
    """Transient description of a bundle sent to the provider."""

    project_id: str
    format: str = "json"
    plural_format: str = "i18next"
    original_filenames: bool = True
    directory_prefix: str = "%LANG_ISO%"
    indentation: str = "2sp"
    filter_langs: tuple[str, ...] = ()

    @field_validator("filter_langs", mode="before")
    @classmethod
    def _coerce_filter(cls, value: Any) -> tuple[str, ...]:
        return tuple(_coerce_code_list(value))

    @classmethod
    def from_options(
        cls,
        project_id: str,
        options: BundleOptions,
        *,
        languages: Sequence[str] = (),
        directory_prefix: str | None = None,
    ) -> BundleRequest:
        return cls(
            project_id=project_id,
            format=options.format,
            plural_format=options.plural_format,
            original_filenames=options.original_filenames,
            directory_prefix=(
                options.directory_prefix if directory_prefix is None else directory_prefix
            ),
            indentation=options.indentation,
            filter_langs=tuple(languages) or options.languages,
        )

    def as_payload(self) -> dict[str, Any]:
        """Return the request body understood by the provider."""

        payload: dict[str, Any] = {
            "format": self.format,
            "plural_format": self.plural_format,
            "original_filenames": self.original_filenames,
            "directory_prefix": self.directory_prefix,
            "indentation": self.indentation,
        }
        if self.filter_langs:
            payload["filter_langs"] = list(self.filter_langs)
        return payload


class BundleDescriptor(BaseModel):
    """Provider response pointing at a downloadable archive."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    bundle_url: str
    project_id: str | None = None

    @field_validator("bundle_url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        if not value.startswith(("https://", "http://")):
            raise ValueError("bundle_url must be an absolute http(s) URL")
        return value


class ServiceSettings(ImmutableModel):
    """Top-level configuration for the translation proxy."""

    provider: ProviderSettings
    bundle: BundleOptions = Field(default_factory=BundleOptions)
    fetch_mode: FetchMode = FetchMode.BUNDLE
    request_deadline_seconds: float = Field(default=120.0, gt=0)
    scratch_root: Path | None = None
    allowed_origins: tuple[str, ...] = ()
    log_level: str = "INFO"

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _coerce_origins(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        return tuple(str(origin).strip() for origin in value if str(origin).strip())

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ConfigurationError(f"Unsupported log level: {value}")
        return level


__all__ = [
    "BundleDescriptor",
    "BundleOptions",
    "BundleRequest",
    "ConfigurationError",
    "FetchMode",
    "ImmutableModel",
    "LANGUAGE_CODE_PATTERN",
    "ProviderSettings",
    "ServiceSettings",
    "is_language_code",
]
