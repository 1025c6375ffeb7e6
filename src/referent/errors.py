"""Exception hierarchy shared by the extractor, the generator and the API."""

from __future__ import annotations

__all__ = [
    "ReferentError",
    "ValidationError",
    "ConfigurationError",
    "ExtractionError",
    "FetchError",
    "ParseError",
    "GenerationError",
    "UpstreamError",
    "EmptyResponseError",
]


class ReferentError(Exception):
    """Base class for every failure the service knows how to report."""

    #: HTTP status used when the error reaches the API boundary unmapped.
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ReferentError):
    """The caller supplied missing or malformed input."""

    status_code = 400


class ConfigurationError(ReferentError):
    """The deployment is missing something it needs (e.g. the API key)."""

    status_code = 500


class ExtractionError(ReferentError):
    """The target page could not be turned into an article."""

    status_code = 400


class FetchError(ExtractionError):
    """The article page could not be downloaded."""

    def __init__(
        self, message: str, *, status: int | None = None, status_text: str | None = None
    ) -> None:
        super().__init__(message)
        self.status = status
        self.status_text = status_text


class ParseError(ExtractionError):
    """The HTML parser refused the downloaded document."""


class GenerationError(ReferentError):
    """The completion API did not produce a usable answer."""

    status_code = 502


class UpstreamError(GenerationError):
    """The completion API answered with an error or could not be reached."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class EmptyResponseError(GenerationError):
    """The completion API answered successfully but without any text."""
