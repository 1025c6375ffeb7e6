"""Domain models used across the application."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class GenerationMode(str, Enum):
    """Output shape requested from the completion API."""

    SUMMARY = "summary"
    THESIS = "thesis"
    TELEGRAM = "telegram"


class ParsedArticle(BaseModel):
    """Representation of an extracted article."""

    model_config = ConfigDict(frozen=True)

    date: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
