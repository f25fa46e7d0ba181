"""Unit tests for the translation sync command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from transbundle.backend.app.services import sync
from transbundle.backend.app.services.errors import ProviderError


def test_write_catalogues_creates_one_file_per_language(tmp_path: Path) -> None:
    output = tmp_path / "translations"

    written = sync.write_catalogues(
        {"fr": {"hello": "Salut"}, "en": {"hello": "Hi"}}, output
    )

    assert [path.name for path in written] == ["en.json", "fr.json"]
    assert json.loads((output / "fr.json").read_text(encoding="utf-8")) == {"hello": "Salut"}
    assert (output / "en.json").read_text(encoding="utf-8").startswith('{\n  "hello"')


class StubPipeline:
    result: dict = {}
    error: Exception | None = None
    calls: list = []

    def __init__(self, settings) -> None:
        self.settings = settings

    def run(self, language=None):
        StubPipeline.calls.append(language)
        if StubPipeline.error is not None:
            raise StubPipeline.error
        return StubPipeline.result


@pytest.fixture()
def stub_pipeline(monkeypatch: pytest.MonkeyPatch) -> type[StubPipeline]:
    monkeypatch.setenv("LOKALISE_API_KEY", "token")
    monkeypatch.setenv("LOKALISE_PROJECT_ID", "123.abc")
    monkeypatch.delenv("TRANSBUNDLE_CONFIG", raising=False)
    monkeypatch.setattr(sync, "TranslationPipeline", StubPipeline)
    StubPipeline.result = {"en": {"hello": "Hi"}}
    StubPipeline.error = None
    StubPipeline.calls = []
    return StubPipeline


def test_main_writes_fetched_catalogues(stub_pipeline, tmp_path: Path, capsys) -> None:
    exit_code = sync.main([str(tmp_path), "--language", "en"])

    assert exit_code == 0
    assert stub_pipeline.calls == ["en"]
    assert (tmp_path / "en.json").exists()
    assert "en.json" in capsys.readouterr().out


def test_main_reports_pipeline_failures(stub_pipeline, tmp_path: Path, capsys) -> None:
    stub_pipeline.error = ProviderError("HTTP 503", status_code=503)

    exit_code = sync.main([str(tmp_path / "out")])

    assert exit_code == 1
    assert "HTTP 503" in capsys.readouterr().out
    assert not (tmp_path / "out").exists()


def test_main_reports_missing_configuration(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys
) -> None:
    monkeypatch.delenv("LOKALISE_API_KEY", raising=False)
    monkeypatch.delenv("LOKALISE_PROJECT_ID", raising=False)
    monkeypatch.delenv("TRANSBUNDLE_CONFIG", raising=False)

    assert sync.main([str(tmp_path)]) == 1
    assert "failed to load configuration" in capsys.readouterr().out
