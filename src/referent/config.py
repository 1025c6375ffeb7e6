"""Runtime configuration for the Referent service."""

from __future__ import annotations

import os
from typing import Mapping, Tuple

from pydantic import BaseModel, Field

__all__ = [
    "Settings",
    "DEFAULT_OPENROUTER_BASE_URL",
    "DEFAULT_OPENROUTER_MODEL",
    "DEFAULT_FETCH_TIMEOUT",
    "DEFAULT_GENERATION_TIMEOUT",
]

DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_OPENROUTER_MODEL = "deepseek/deepseek-chat"
DEFAULT_FETCH_TIMEOUT: Tuple[float, float] = (10.0, 60.0)
DEFAULT_GENERATION_TIMEOUT = 120.0


def _parse_fetch_timeout(raw: str) -> Tuple[float, float]:
    parts = [part.strip() for part in raw.split(",") if part.strip()]
    try:
        values = [float(part) for part in parts]
    except ValueError as exc:
        raise ValueError(f"REFERENT_FETCH_TIMEOUT must be numeric, got {raw!r}") from exc

    if len(values) == 1:
        return (values[0], values[0])
    if len(values) == 2:
        return (values[0], values[1])
    raise ValueError(f"REFERENT_FETCH_TIMEOUT must be 'connect,read' seconds, got {raw!r}")


class Settings(BaseModel):
    """Settings injected into the extractor, the generation client and the API."""

    openrouter_api_key: str | None = Field(
        default=None,
        description="Bearer credential for OpenRouter. Generation is refused while it is blank.",
    )
    openrouter_base_url: str = Field(
        default=DEFAULT_OPENROUTER_BASE_URL,
        description="Base URL of the OpenAI-compatible completion API",
    )
    openrouter_model: str = Field(
        default=DEFAULT_OPENROUTER_MODEL,
        description="Model identifier sent with every completion request",
    )
    fetch_timeout: Tuple[float, float] = Field(
        default=DEFAULT_FETCH_TIMEOUT,
        description="(connect, read) timeout in seconds for downloading article pages",
    )
    generation_timeout: float = Field(
        default=DEFAULT_GENERATION_TIMEOUT,
        description="Timeout in seconds for a single completion request",
    )

    @property
    def api_key(self) -> str | None:
        """Return the trimmed API key, or ``None`` when it is missing or blank."""

        if self.openrouter_api_key is None:
            return None
        key = self.openrouter_api_key.strip()
        return key or None

    @property
    def generation_configured(self) -> bool:
        return self.api_key is not None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``environ`` (defaults to :data:`os.environ`)."""

        env = os.environ if environ is None else environ
        values: dict[str, object] = {"openrouter_api_key": env.get("OPENROUTER_API_KEY")}

        base_url = env.get("OPENROUTER_BASE_URL", "").strip()
        if base_url:
            values["openrouter_base_url"] = base_url

        model = env.get("OPENROUTER_MODEL", "").strip()
        if model:
            values["openrouter_model"] = model

        fetch_timeout = env.get("REFERENT_FETCH_TIMEOUT", "").strip()
        if fetch_timeout:
            values["fetch_timeout"] = _parse_fetch_timeout(fetch_timeout)

        generation_timeout = env.get("REFERENT_GENERATION_TIMEOUT", "").strip()
        if generation_timeout:
            try:
                values["generation_timeout"] = float(generation_timeout)
            except ValueError as exc:
                raise ValueError(
                    f"REFERENT_GENERATION_TIMEOUT must be numeric, got {generation_timeout!r}"
                ) from exc

        return cls.model_validate(values)
