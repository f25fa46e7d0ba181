"""Request → download → unpack → aggregate, one isolated run at a time."""

from __future__ import annotations

import logging
from typing import Any, Callable
from uuid import uuid4

from transbundle.backend.config.schema import ServiceSettings, is_language_code

from .aggregator import collect_translations
from .archive import unpack_bundle
from .errors import ArchiveError
from .provider import LokaliseClient
from .workspace import Deadline, scratch_workspace

logger = logging.getLogger(__name__)


class TranslationPipeline:
    """Fetch the current translation bundle and return it keyed by language."""

    def __init__(
        self,
        settings: ServiceSettings,
        *,
        client: LokaliseClient | None = None,
        request_ids: Callable[[], str] | None = None,
    ) -> None:
        self._settings = settings
        self._client = client or LokaliseClient(settings.provider)
        self._request_ids = request_ids or (lambda: uuid4().hex)

    @property
    def settings(self) -> ServiceSettings:
        return self._settings

    def run(self, language: str | None = None, *, request_id: str | None = None) -> dict[str, Any]:
        """Execute the pipeline, optionally scoped to a single ``language``."""

        if language is not None and not is_language_code(language):
            raise ValueError(f"Invalid language code: {language!r}")

        request_id = request_id or self._request_ids()
        languages = (language,) if language else self._settings.bundle.languages
        deadline = Deadline(self._settings.request_deadline_seconds)

        logger.info(
            "[%s] fetching translations (languages: %s, mode: %s)",
            request_id,
            ", ".join(languages) or "all",
            self._settings.fetch_mode.value,
        )

        try:
            with scratch_workspace(request_id, base_dir=self._settings.scratch_root) as workspace:
                self._client.fetch_archive(
                    workspace.archive_path,
                    self._settings.bundle,
                    languages=languages,
                    mode=self._settings.fetch_mode,
                    deadline=deadline,
                )
                deadline.check("download")

                report = unpack_bundle(workspace.archive_path, workspace.translations_dir)
                deadline.check("extraction")

                result = collect_translations(workspace.translations_dir)
        except OSError as exc:
            raise ArchiveError(f"Filesystem error in workspace: {exc}") from exc

        if report.conflicts:
            logger.warning(
                "[%s] %d rename conflict(s): %s",
                request_id,
                len(report.conflicts),
                ", ".join(f"{c.kept} replaced {c.replaced}" for c in report.conflicts),
            )
        if result.skipped:
            logger.warning(
                "[%s] skipped %d file(s): %s",
                request_id,
                len(result.skipped),
                ", ".join(f"{name} ({reason})" for name, reason in result.skipped.items()),
            )
        logger.info(
            "[%s] served %d language(s): %s",
            request_id,
            len(result.translations),
            ", ".join(sorted(result.translations)) or "none",
        )
        return result.translations


__all__ = ["TranslationPipeline"]
