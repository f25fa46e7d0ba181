"""Service-layer helpers for the transbundle backend."""

from .request_parser import parse_language
from .response_builder import build_translations_response

__all__ = [
    "parse_language",
    "build_translations_response",
]
