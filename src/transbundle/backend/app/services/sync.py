"""Write a pipeline run to disk for offline use or static hosting."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

from transbundle.backend.config.schema import ConfigurationError
from transbundle.backend.config.settings import build_settings

from .errors import TranslationPipelineError
from .pipeline import TranslationPipeline


def write_catalogues(translations: Mapping[str, Any], output_dir: Path) -> list[Path]:
    """Persist each language catalogue as ``<code>.json`` in ``output_dir``."""

    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for code in sorted(translations):
        path = output_dir / f"{code}.json"
        path.write_text(
            json.dumps(translations[code], ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )
        written.append(path)
    return written


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Download the current translation bundle and write one file per language."
    )
    parser.add_argument("output", type=Path, help="Directory receiving <code>.json files")
    parser.add_argument(
        "--language",
        default=None,
        help="Only fetch a single language code",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (defaults to $TRANSBUNDLE_CONFIG)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for syncing translations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = build_settings(config_file=args.config)
    except ConfigurationError as error:
        print(f"failed to load configuration: {error}")
        return 1

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    pipeline = TranslationPipeline(settings)

    try:
        translations = pipeline.run(args.language)
    except (TranslationPipelineError, ValueError) as error:
        print(f"failed to fetch translations: {error}")
        return 1

    for path in write_catalogues(translations, args.output):
        print(f"wrote {path}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
