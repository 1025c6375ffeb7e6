"""Formatting helpers shared by the web page and the command-line runner."""

from __future__ import annotations

import re
from enum import Enum
from typing import List

from referent.models import GenerationMode, ParsedArticle

__all__ = ["ACTION_LABELS", "Action", "render_result", "split_theses", "translation_source"]


class Action(str, Enum):
    """Actions offered to the user: the generation modes plus full translation."""

    SUMMARY = "summary"
    THESIS = "thesis"
    TELEGRAM = "telegram"
    TRANSLATE = "translate"

    @property
    def mode(self) -> GenerationMode | None:
        """Return the matching :class:`GenerationMode`, or ``None`` for translation."""

        if self is Action.TRANSLATE:
            return None
        return GenerationMode(self.value)


ACTION_LABELS = {
    Action.SUMMARY: "О чем статья?",
    Action.THESIS: "Тезисы",
    Action.TELEGRAM: "Пост для Telegram",
    Action.TRANSLATE: "Перевод",
}

_BULLET_RE = re.compile(r"^\s*(?:[•\-–—*]|\d+[.)])\s*")


def split_theses(text: str) -> List[str]:
    """Split a thesis answer into list items without their bullet markers."""

    items: List[str] = []
    for line in text.splitlines():
        item = _BULLET_RE.sub("", line, count=1).strip()
        if item:
            items.append(item)
    return items


def render_result(action: Action | str, text: str) -> str:
    """Return ``text`` ready for display; theses become a bulleted list."""

    if Action(action) is Action.THESIS:
        return "\n".join(f"• {item}" for item in split_theses(text))
    return text.strip()


def translation_source(article: ParsedArticle) -> str:
    """Return the text sent for translation: the title followed by the content."""

    return "\n\n".join(part for part in (article.title, article.content) if part)
