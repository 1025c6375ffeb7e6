"""Validation helpers for user supplied article URLs and generation modes."""

from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit, urlunsplit

from referent.errors import ValidationError
from referent.models import GenerationMode

logger = logging.getLogger(__name__)

__all__ = ["normalize_url", "parse_mode"]

URL_REQUIRED_MESSAGE = "URL статьи обязателен"
BAD_SCHEME_MESSAGE = "URL должен начинаться с http:// или https://"
MISSING_HOST_MESSAGE = "Некорректный URL: отсутствует домен"
INVALID_URL_MESSAGE = "Некорректный URL статьи"

MODE_REQUIRED_MESSAGE = "Режим генерации обязателен"
INVALID_MODE_MESSAGE = "Недопустимый режим генерации. Используйте: summary, thesis, telegram"

_ALLOWED_SCHEMES = {"http", "https"}
_DEFAULT_PORTS = {"http": 80, "https": 443}
_WHITESPACE_OR_CONTROL = re.compile(r"[\s\x00-\x1f\x7f]")


def _build_netloc(scheme: str, parts) -> str:
    hostname = parts.hostname or ""
    if ":" in hostname:
        hostname = f"[{hostname}]"

    netloc = hostname
    port = parts.port
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"

    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    return netloc


def normalize_url(raw_url: str | None) -> str:
    """Validate ``raw_url`` and return its canonical form.

    Scheme and host are lower-cased, default ports are dropped and an empty
    path becomes ``/``. Path, query and fragment are preserved as given, so
    normalizing the result again returns the same string.
    """

    if raw_url is None or not raw_url.strip():
        raise ValidationError(URL_REQUIRED_MESSAGE)

    trimmed = raw_url.strip()

    try:
        if _WHITESPACE_OR_CONTROL.search(trimmed):
            raise ValueError("URL contains whitespace or control characters")

        parts = urlsplit(trimmed)
        if not parts.scheme:
            raise ValueError("URL has no scheme")

        scheme = parts.scheme.lower()
        if scheme not in _ALLOWED_SCHEMES:
            raise ValidationError(BAD_SCHEME_MESSAGE)

        if not parts.netloc:
            # Browsers read "http:host/path" and "http:///host/path" as "http://host/path".
            rest = trimmed[len(parts.scheme) + 1 :].lstrip("/\\")
            parts = urlsplit(f"{scheme}://{rest}")

        if not parts.hostname:
            raise ValidationError(MISSING_HOST_MESSAGE)

        netloc = _build_netloc(scheme, parts)
    except ValidationError:
        logger.info("Rejected article URL %r", raw_url)
        raise
    except ValueError as exc:
        logger.info("Could not parse article URL %r: %s", raw_url, exc)
        raise ValidationError(INVALID_URL_MESSAGE) from None

    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, parts.fragment))


def parse_mode(raw_mode: str | None) -> GenerationMode:
    """Return the :class:`GenerationMode` named by ``raw_mode``."""

    if raw_mode is None or not raw_mode.strip():
        raise ValidationError(MODE_REQUIRED_MESSAGE)

    try:
        return GenerationMode(raw_mode.strip().lower())
    except ValueError:
        raise ValidationError(INVALID_MODE_MESSAGE) from None
