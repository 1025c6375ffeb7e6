"""Convenience script for running the Referent pipeline locally on one URL."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure the src directory is on the Python path so the referent package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from referent.config import Settings  # noqa: E402  (import after path setup)
from referent.errors import ReferentError  # noqa: E402
from referent.presentation import ACTION_LABELS, Action, render_result, translation_source  # noqa: E402
from referent.services.extractor import ArticleExtractor  # noqa: E402
from referent.services.generator import GenerationClient  # noqa: E402
from referent.services.urls import normalize_url  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    """Parse one article and print the requested Russian rendition."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("url", help="URL of an English-language article")
    parser.add_argument(
        "action",
        nargs="?",
        default=Action.SUMMARY.value,
        choices=[action.value for action in Action],
        help="; ".join(f"{action.value}: {label}" for action, label in ACTION_LABELS.items()),
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    settings = Settings.from_env()
    extractor = ArticleExtractor(timeout=settings.fetch_timeout)
    generator = GenerationClient(settings)
    action = Action(args.action)

    try:
        url = normalize_url(args.url)
        article = extractor.extract(url)
        if action.mode is None:
            text = generator.translate(translation_source(article))
        else:
            text = generator.generate(article.title, article.content, action.mode)
    except ReferentError as exc:
        logging.error("%s", exc.message)
        return 1

    print(render_result(action, text))
    return 0


if __name__ == "__main__":
    sys.exit(main())
