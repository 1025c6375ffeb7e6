"""Prompt templates sent to the completion API."""

from __future__ import annotations

from referent.models import GenerationMode

__all__ = ["build_prompt", "build_translation_prompt"]

SUMMARY_TEMPLATE = """Ты — эксперт по анализу статей. Прочитай следующую статью на английском языке и напиши краткое описание на русском языке (2-4 абзаца).

Опиши:
- Основную тему и цель статьи
- Ключевые идеи и выводы автора
- Для кого статья может быть полезна

Сохрани нейтральный тон, не добавляй свои комментарии или оценки.

{title_part}Текст статьи:
{content}"""

THESIS_TEMPLATE = """Ты — эксперт по анализу статей. Прочитай следующую статью на английском языке и выдели ключевые тезисы на русском языке.

Формат ответа:
- Каждый тезис на отдельной строке
- Начинай каждый тезис с маркера "•" или "-"
- Тезисы должны быть краткими (1-2 предложения каждый)
- Выдели 5-10 самых важных тезисов
- Сохрани логическую структуру (если есть порядок изложения в статье)

{title_part}Текст статьи:
{content}"""

TELEGRAM_TEMPLATE = """Ты — копирайтер, который пишет посты для Telegram-каналов. Прочитай следующую статью на английском языке и создай готовый пост для Telegram на русском языке.

Требования к посту:
- Заголовок (первая строка, можно использовать эмодзи для привлечения внимания)
- 2-4 абзаца основного текста
- Используй короткие предложения и абзацы (Telegram лучше читается с переносами строк)
- Добавь хештеги в конце (3-5 релевантных хештегов)
- Тон: информативный, но живой и понятный
- Длина: примерно 500-800 символов (оптимально для Telegram)

Не добавляй ссылки на оригинал, не упоминай источник — только содержание статьи.

{title_part}Текст статьи:
{content}"""

TRANSLATION_TEMPLATE = (
    "Переведи следующий текст статьи на русский язык. Сохрани структуру и абзацы. "
    "Не добавляй комментарии — только перевод.\n\n{content}"
)

_TEMPLATES = {
    GenerationMode.SUMMARY: SUMMARY_TEMPLATE,
    GenerationMode.THESIS: THESIS_TEMPLATE,
    GenerationMode.TELEGRAM: TELEGRAM_TEMPLATE,
}


def build_prompt(title: str | None, content: str, mode: GenerationMode | str) -> str:
    """Render the instruction for ``mode`` around the article ``content``."""

    try:
        template = _TEMPLATES[GenerationMode(mode)]
    except ValueError:
        raise ValueError(f"Unsupported generation mode: {mode!r}") from None

    title_part = f"Заголовок статьи: {title}\n\n" if title else ""
    return template.format(title_part=title_part, content=content)


def build_translation_prompt(content: str) -> str:
    """Render the fixed whole-article translation instruction."""

    return TRANSLATION_TEMPLATE.format(content=content)
