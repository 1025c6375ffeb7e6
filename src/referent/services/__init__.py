"""Service layer entry points for Referent."""

from __future__ import annotations

from .extractor import ArticleExtractor, parse_article_html  # noqa: F401
from .generator import GenerationClient  # noqa: F401
from .prompts import build_prompt, build_translation_prompt  # noqa: F401
from .urls import normalize_url, parse_mode  # noqa: F401

__all__ = [
    "ArticleExtractor",
    "GenerationClient",
    "build_prompt",
    "build_translation_prompt",
    "normalize_url",
    "parse_article_html",
    "parse_mode",
]
