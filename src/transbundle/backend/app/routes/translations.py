"""Proxy endpoints serving the provider's translations to the front-end."""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, current_app

from transbundle.backend.app.http import fetch_failed_response
from transbundle.backend.app.services.errors import TranslationPipelineError
from transbundle.backend.app.services.pipeline import TranslationPipeline
from transbundle.backend.services import build_translations_response, parse_language

blueprint = Blueprint("translations", __name__, url_prefix="/translations")

logger = logging.getLogger(__name__)

PIPELINE_EXTENSION = "transbundle.pipeline"


def _pipeline() -> TranslationPipeline:
    return current_app.extensions[PIPELINE_EXTENSION]


def _serve(language: str | None) -> tuple[Any, int]:
    try:
        translations = _pipeline().run(language)
    except TranslationPipelineError:
        logger.exception(
            "Error fetching translations (language: %s)", language or "all"
        )
        return fetch_failed_response().to_response()

    return build_translations_response(translations)


@blueprint.get("")
def get_all_translations() -> tuple[Any, int]:
    """Return every configured language keyed by language code."""

    return _serve(None)


@blueprint.get("/<lng>")
def get_language_translations(lng: str) -> tuple[Any, int]:
    """Return the catalogue for a single language code."""

    return _serve(parse_language(lng))
