from __future__ import annotations

from referent.models import GenerationMode, ParsedArticle
from referent.presentation import Action, render_result, split_theses, translation_source


def test_split_theses_strips_bullet_markers() -> None:
    text = "• Первый тезис\n- Второй тезис\n\n3) Третий тезис\n  * Четвёртый"

    assert split_theses(text) == ["Первый тезис", "Второй тезис", "Третий тезис", "Четвёртый"]


def test_render_result_formats_theses_as_list() -> None:
    assert render_result("thesis", "- A\n- B") == "• A\n• B"


def test_render_result_keeps_other_modes_as_plain_text() -> None:
    text = "  Заголовок 🚀\n\n- не список\n#теги  "

    assert render_result(Action.TELEGRAM, text) == "Заголовок 🚀\n\n- не список\n#теги"


def test_action_modes() -> None:
    assert Action.SUMMARY.mode is GenerationMode.SUMMARY
    assert Action.TRANSLATE.mode is None


def test_translation_source_joins_title_and_content() -> None:
    assert translation_source(ParsedArticle(title="T", content="Body")) == "T\n\nBody"
    assert translation_source(ParsedArticle(title=None, content="Body")) == "Body"
