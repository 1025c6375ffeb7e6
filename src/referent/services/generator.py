"""Generation helpers backed by an OpenAI-compatible completion API (OpenRouter)."""

from __future__ import annotations

import logging
from typing import Any

import openai
from openai import OpenAI

from referent.config import Settings
from referent.errors import ConfigurationError, EmptyResponseError, UpstreamError, ValidationError
from referent.models import GenerationMode
from referent.services.prompts import build_prompt, build_translation_prompt

logger = logging.getLogger(__name__)

__all__ = ["GenerationClient", "MIN_ARTICLE_LENGTH"]

#: Articles shorter than this (after trimming) are never sent to the paid API.
MIN_ARTICLE_LENGTH = 100
GENERATION_MAX_TOKENS = 2048
TRANSLATION_MAX_TOKENS = 8192

ARTICLE_TOO_SHORT_MESSAGE = "Статья слишком короткая для обработки"
TRANSLATION_REQUIRED_MESSAGE = "Текст статьи для перевода обязателен"
MISSING_API_KEY_MESSAGE = "Сервис AI не настроен: отсутствует API-ключ"
TRANSLATION_MISSING_API_KEY_MESSAGE = "Сервис перевода не настроен: отсутствует API-ключ"


class GenerationClient:
    """Turn article text into Russian output through the completion API.

    The underlying :class:`openai.OpenAI` client is created lazily so that a
    missing API key is reported as :class:`ConfigurationError` on first use
    instead of failing application start-up.
    """

    def __init__(self, settings: Settings, client: Any | None = None) -> None:
        self._settings = settings
        self._client = client

    def _require_api_key(self, message: str = MISSING_API_KEY_MESSAGE) -> str:
        api_key = self._settings.api_key
        if api_key is None:
            logger.error("OPENROUTER_API_KEY is not configured")
            raise ConfigurationError(message)
        return api_key

    def _get_client(self, api_key: str) -> Any:
        if self._client is None:
            self._client = OpenAI(
                api_key=api_key,
                base_url=self._settings.openrouter_base_url,
                timeout=self._settings.generation_timeout,
                max_retries=0,
            )
        return self._client

    def _complete(
        self,
        prompt: str,
        *,
        max_tokens: int,
        origin: str | None,
        service_name: str,
        empty_message: str,
        missing_key_message: str = MISSING_API_KEY_MESSAGE,
    ) -> str:
        client = self._get_client(self._require_api_key(missing_key_message))

        try:
            response = client.chat.completions.create(
                model=self._settings.openrouter_model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
                extra_headers={"HTTP-Referer": origin} if origin else None,
            )
        except openai.APIStatusError as exc:
            logger.error(
                "Completion API returned %s: %s", exc.status_code, getattr(exc, "body", None)
            )
            raise UpstreamError(
                f"Ошибка сервиса {service_name} ({exc.status_code}). Попробуйте позже.",
                status=exc.status_code,
            ) from exc
        except openai.APIConnectionError as exc:
            logger.error("Completion API is unreachable: %s", exc)
            raise UpstreamError(
                f"Ошибка сервиса {service_name}. Попробуйте позже."
            ) from exc

        choices = getattr(response, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        result = (getattr(message, "content", None) or "").strip()

        if not result:
            logger.error("Completion API returned an empty answer")
            raise EmptyResponseError(empty_message)

        return result

    def generate(
        self,
        title: str | None,
        content: str | None,
        mode: GenerationMode | str,
        origin: str | None = None,
    ) -> str:
        """Return the Russian ``mode`` rendition of an article.

        Raises :class:`ValidationError` for articles under
        :data:`MIN_ARTICLE_LENGTH` characters, :class:`ConfigurationError` when
        no API key is configured, :class:`UpstreamError` when the API fails and
        :class:`EmptyResponseError` when it answers with no text. None of them
        is retried.
        """

        if not content or len(content.strip()) < MIN_ARTICLE_LENGTH:
            raise ValidationError(ARTICLE_TOO_SHORT_MESSAGE)

        mode = GenerationMode(mode)
        prompt = build_prompt(title, content, mode)

        logger.info(
            "Requesting %s generation (content length: %d, title length: %d)",
            mode.value,
            len(content),
            len(title or ""),
        )
        result = self._complete(
            prompt,
            max_tokens=GENERATION_MAX_TOKENS,
            origin=origin,
            service_name="генерации",
            empty_message="Сервис вернул пустой результат",
        )
        logger.info("Generated %s output (%d characters)", mode.value, len(result))
        return result

    def translate(self, content: str | None, origin: str | None = None) -> str:
        """Return a Russian translation of the whole article text."""

        text = (content or "").strip()
        if not text:
            raise ValidationError(TRANSLATION_REQUIRED_MESSAGE)

        logger.info("Requesting translation (content length: %d)", len(text))
        result = self._complete(
            build_translation_prompt(text),
            max_tokens=TRANSLATION_MAX_TOKENS,
            origin=origin,
            service_name="перевода",
            empty_message="Сервис вернул пустой перевод",
            missing_key_message=TRANSLATION_MISSING_API_KEY_MESSAGE,
        )
        logger.info("Translated article (%d characters)", len(result))
        return result
