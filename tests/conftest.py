"""Test configuration utilities and shared fixtures."""

import io
import json
import sys
import zipfile
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
import requests  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from transbundle.backend.app import create_app  # noqa: E402
from transbundle.backend.app.services.pipeline import TranslationPipeline  # noqa: E402
from transbundle.backend.app.services.provider import LokaliseClient  # noqa: E402
from transbundle.backend.config.schema import ProviderSettings, ServiceSettings  # noqa: E402

BUNDLE_URL = "https://s3.test/bundles/archive.zip"


def build_zip(files: Mapping[str, str | bytes]) -> bytes:
    """Return the bytes of a zip archive holding ``files``."""

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def build_damaged_zip(name: str = "en/en.json") -> bytes:
    """Return a DEFLATE archive whose compressed stream has been corrupted."""

    content = json.dumps({f"key_{index}": f"value {index}" for index in range(200)})
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(name, content)
    data = bytearray(buffer.getvalue())
    # local file header is 30 bytes followed by the name; no extra field
    start = 30 + len(name.encode("utf-8")) + 2
    for offset in range(start, start + 8):
        data[offset] ^= 0xFF
    return bytes(data)


class FakeResponse:
    """Subset of :class:`requests.Response` used by the provider client."""

    def __init__(
        self,
        status_code: int = 200,
        *,
        json_body: Any = None,
        content: bytes = b"",
        chunk_size: int = 7,
    ) -> None:
        self.status_code = status_code
        self._json_body = json_body
        self.content = content
        self._chunk_size = chunk_size

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._json_body is None:
            raise ValueError("No JSON body")
        return self._json_body

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        step = min(chunk_size, self._chunk_size)
        for start in range(0, len(self.content), step):
            yield self.content[start : start + step]

    def close(self) -> None:
        pass

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class FakeSession:
    """Records calls and replays canned bundle and archive responses."""

    def __init__(self) -> None:
        self.posts: list[dict[str, Any]] = []
        self.gets: list[dict[str, Any]] = []
        self.bundle_response = FakeResponse(json_body={"project_id": "123.abc", "bundle_url": BUNDLE_URL})
        self.archive_response = FakeResponse(content=build_zip({}))
        self.error: Exception | None = None
        self.download_error: Exception | None = None

    def serve_archive(self, files: Mapping[str, str | bytes]) -> None:
        self.archive_response = FakeResponse(content=build_zip(files))

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.posts.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.bundle_response

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.gets.append({"url": url, **kwargs})
        if self.download_error is not None:
            raise self.download_error
        return self.archive_response


@pytest.fixture()
def scratch_root(tmp_path: Path) -> Path:
    root = tmp_path / "scratch"
    root.mkdir()
    return root


@pytest.fixture()
def settings(scratch_root: Path) -> ServiceSettings:
    """Return settings pointing at a fake project and an isolated scratch root."""

    return ServiceSettings(
        provider=ProviderSettings(api_token="secret-token", project_id="123.abc"),
        scratch_root=scratch_root,
        allowed_origins=("https://allowed.test",),
    )


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def zip_bytes() -> Callable[[Mapping[str, str | bytes]], bytes]:
    return build_zip


@pytest.fixture()
def damaged_zip() -> Callable[..., bytes]:
    return build_damaged_zip


@pytest.fixture()
def fake_response() -> type[FakeResponse]:
    return FakeResponse


@pytest.fixture()
def client_factory(fake_session: FakeSession) -> Callable[[ProviderSettings], LokaliseClient]:
    def factory(provider: ProviderSettings) -> LokaliseClient:
        return LokaliseClient(provider, session=fake_session)  # type: ignore[arg-type]

    return factory


@pytest.fixture()
def pipeline(settings: ServiceSettings, client_factory) -> TranslationPipeline:
    return TranslationPipeline(settings, client=client_factory(settings.provider))


@pytest.fixture()
def app(settings: ServiceSettings, pipeline: TranslationPipeline) -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app(settings, pipeline=pipeline)
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()


@pytest.fixture()
def network_error() -> requests.RequestException:
    return requests.ConnectionError("connection refused")
