"""Utilities for serialising translation responses."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Tuple

from flask import jsonify

ResponseTuple = Tuple[Any, int]


def build_translations_response(payload: Mapping[str, Any]) -> ResponseTuple:
    """Return a Flask JSON response for the aggregated ``payload``."""

    return jsonify(dict(payload)), 200
