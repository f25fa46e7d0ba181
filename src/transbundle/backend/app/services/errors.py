"""Exceptions raised by the translation bundle pipeline."""

from __future__ import annotations


class TranslationPipelineError(RuntimeError):
    """Base class for failures that abort a whole pipeline run."""


class ProviderError(TranslationPipelineError):
    """The localization service rejected a request or returned garbage."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ArchiveError(TranslationPipelineError):
    """The downloaded archive or the working directory could not be processed."""


class PipelineTimeout(TranslationPipelineError):
    """The pipeline did not finish before its deadline."""


__all__ = [
    "ArchiveError",
    "PipelineTimeout",
    "ProviderError",
    "TranslationPipelineError",
]
