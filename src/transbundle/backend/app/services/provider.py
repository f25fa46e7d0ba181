"""Client for requesting and downloading translation bundles from Lokalise."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

import requests
from pydantic import ValidationError

from transbundle.backend.config.schema import (
    BundleDescriptor,
    BundleOptions,
    BundleRequest,
    FetchMode,
    ProviderSettings,
)

from .errors import ArchiveError, ProviderError
from .workspace import Deadline

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-Api-Token"


class LokaliseClient:
    """Thin wrapper around the file download endpoints of the Lokalise API."""

    def __init__(
        self,
        settings: ProviderSettings,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()

    @property
    def settings(self) -> ProviderSettings:
        return self._settings

    def _headers(self) -> dict[str, str]:
        return {
            TOKEN_HEADER: self._settings.api_token.get_secret_value(),
            "Accept": "application/json",
        }

    def _timeout(self, deadline: Deadline | None) -> float:
        ceiling = self._settings.timeout_seconds
        return deadline.timeout(ceiling) if deadline is not None else ceiling

    def request_bundle(
        self,
        bundle: BundleRequest,
        *,
        deadline: Deadline | None = None,
    ) -> BundleDescriptor:
        """Ask the provider to build a bundle and return its descriptor."""

        url = f"{self._settings.api_base_url}/projects/{bundle.project_id}/files/download"
        logger.info(
            "Requesting %s bundle for project %s (languages: %s)",
            bundle.format,
            bundle.project_id,
            ", ".join(bundle.filter_langs) or "all",
        )
        try:
            response = self._session.post(
                url,
                json=bundle.as_payload(),
                headers=self._headers(),
                timeout=self._timeout(deadline),
            )
        except requests.RequestException as exc:
            raise ProviderError(f"Bundle request failed: {exc}") from exc

        if not response.ok:
            raise ProviderError(
                f"Bundle request returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise ProviderError("Bundle response is not valid JSON") from exc

        if not isinstance(payload, dict):
            raise ProviderError("Bundle response must be a JSON object")

        try:
            return BundleDescriptor.model_validate(payload)
        except ValidationError as exc:
            raise ProviderError(f"Malformed bundle descriptor: {exc}") from exc

    def download_archive(
        self,
        url: str,
        destination: Path,
        *,
        mode: FetchMode = FetchMode.BUNDLE,
        deadline: Deadline | None = None,
    ) -> int:
        """Write the archive at ``url`` to ``destination`` and return its size."""

        if mode is FetchMode.DIRECT:
            return self._download_whole(url, destination, deadline)
        return self._download_streamed(url, destination, deadline)

    def _download_whole(self, url: str, destination: Path, deadline: Deadline | None) -> int:
        try:
            response = self._session.get(
                url,
                headers={TOKEN_HEADER: self._settings.api_token.get_secret_value()},
                timeout=self._timeout(deadline),
            )
        except requests.RequestException as exc:
            raise ProviderError(f"Archive download failed: {exc}") from exc

        if not response.ok:
            raise ProviderError(
                f"Archive download returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            destination.write_bytes(response.content)
        except OSError as exc:
            raise ArchiveError(f"Unable to write archive to {destination}: {exc}") from exc

        size = len(response.content)
        logger.info("Downloaded %d bytes to %s", size, destination.name)
        return size

    def _download_streamed(self, url: str, destination: Path, deadline: Deadline | None) -> int:
        written = 0
        try:
            with self._session.get(url, stream=True, timeout=self._timeout(deadline)) as response:
                if not response.ok:
                    raise ProviderError(
                        f"Archive download returned HTTP {response.status_code}",
                        status_code=response.status_code,
                    )
                with destination.open("wb") as handle:
                    for chunk in response.iter_content(chunk_size=self._settings.chunk_size):
                        if deadline is not None:
                            deadline.check("archive download")
                        if chunk:
                            handle.write(chunk)
                            written += len(chunk)
                    handle.flush()
        except requests.RequestException as exc:
            raise ProviderError(f"Archive download failed: {exc}") from exc
        except OSError as exc:
            raise ArchiveError(f"Unable to write archive to {destination}: {exc}") from exc

        logger.info("Streamed %d bytes to %s", written, destination.name)
        return written

    def fetch_archive(
        self,
        destination: Path,
        options: BundleOptions,
        *,
        languages: Sequence[str] = (),
        mode: FetchMode = FetchMode.BUNDLE,
        deadline: Deadline | None = None,
    ) -> BundleDescriptor:
        """Request a bundle for the configured project and download it."""

        bundle = BundleRequest.from_options(
            self._settings.project_id,
            options,
            languages=languages,
            directory_prefix="" if mode is FetchMode.DIRECT else None,
        )
        descriptor = self.request_bundle(bundle, deadline=deadline)
        if deadline is not None:
            deadline.check("bundle request")
        self.download_archive(descriptor.bundle_url, destination, mode=mode, deadline=deadline)
        return descriptor


__all__ = ["LokaliseClient", "TOKEN_HEADER"]
