"""Utilities for validating service configuration and surfacing issues."""

from __future__ import annotations

import argparse
from collections import Counter
from pathlib import Path
from typing import Sequence

from .schema import ConfigurationError, FetchMode, ServiceSettings
from .settings import build_settings


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_bundle(settings: ServiceSettings) -> list[str]:
    errors: list[str] = []
    bundle = settings.bundle

    duplicates = [code for code, count in Counter(bundle.languages).items() if count > 1]
    if duplicates:
        errors.append(
            _format_scope(
                "bundle.languages",
                f"duplicate language codes detected: {sorted(duplicates)}",
            )
        )

    if settings.fetch_mode is FetchMode.BUNDLE and not bundle.directory_prefix:
        errors.append(
            _format_scope(
                "bundle.directory_prefix",
                (
                    "an empty directory prefix produces flat archives; "
                    "use '%LANG_ISO%' so files can be attributed to a language"
                ),
            )
        )

    if bundle.directory_prefix and "%LANG_ISO%" not in bundle.directory_prefix:
        errors.append(
            _format_scope(
                "bundle.directory_prefix",
                "the prefix must contain the %LANG_ISO% placeholder",
            )
        )

    return errors


def _validate_timeouts(settings: ServiceSettings) -> list[str]:
    errors: list[str] = []
    if settings.provider.timeout_seconds > settings.request_deadline_seconds:
        errors.append(
            _format_scope(
                "provider.timeout_seconds",
                "HTTP timeout exceeds the request deadline and will never apply",
            )
        )
    return errors


def _validate_scratch_root(settings: ServiceSettings) -> list[str]:
    root = settings.scratch_root
    if root is None:
        return []
    if not root.exists():
        return [_format_scope("scratch_root", f"directory does not exist: {root}")]
    if not root.is_dir():
        return [_format_scope("scratch_root", f"not a directory: {root}")]
    return []


def validate_settings(settings: ServiceSettings) -> list[str]:
    """Return human readable issues detected in ``settings``."""

    errors: list[str] = []
    errors.extend(_validate_bundle(settings))
    errors.extend(_validate_timeouts(settings))
    errors.extend(_validate_scratch_root(settings))
    return errors


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate the translation proxy configuration."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (defaults to $TRANSBUNDLE_CONFIG)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = build_settings(config_file=args.config)
    except ConfigurationError as error:
        print(f"failed to load configuration: {error}")
        return 1

    issues = validate_settings(settings)
    if issues:
        print(f"{len(issues)} issue(s) detected:")
        for issue in issues:
            print(f"  - {issue}")
        return 1

    print(f"project {settings.provider.project_id}: OK")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
