"""API routes exposing the extractor and the generation client."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from referent.errors import (
    ConfigurationError,
    ExtractionError,
    FetchError,
    GenerationError,
    ValidationError,
)
from referent.models import GenerationMode, ParsedArticle
from referent.services.extractor import ArticleExtractor
from referent.services.generator import MIN_ARTICLE_LENGTH, GenerationClient
from referent.services.urls import normalize_url, parse_mode

logger = logging.getLogger(__name__)

router = APIRouter()

REQUEST_ID_HEADER = "X-Request-ID"

MISSING_FIELDS_MESSAGE = "URL статьи и режим генерации обязательны"
FETCH_FAILED_MESSAGE = "Не удалось загрузить статью. Проверьте URL и попробуйте позже"
NO_ARTICLE_TEXT_MESSAGE = "Не удалось извлечь текст статьи. Возможно, страница не содержит статьи"
GENERATION_FAILED_MESSAGE = "Ошибка сервиса генерации. Попробуйте позже"
INTERNAL_ERROR_MESSAGE = "Внутренняя ошибка сервера"


class GenerateRequest(BaseModel):
    url: str | None = None
    mode: str | None = None


class GenerateResponse(BaseModel):
    result: str


class ParseRequest(BaseModel):
    url: str | None = None


class TranslateRequest(BaseModel):
    content: str | None = None


class TranslateResponse(BaseModel):
    translation: str


def get_extractor(request: Request) -> ArticleExtractor:
    return request.app.state.extractor


def get_generator(request: Request) -> GenerationClient:
    return request.app.state.generator


def _new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def _start_request(request: Request, response: Response, endpoint: str) -> str:
    request_id = _new_request_id()
    request.state.request_id = request_id
    response.headers[REQUEST_ID_HEADER] = request_id
    logger.info("[%s] New %s request", request_id, endpoint)
    return request_id


def _error(status_code: int, message: str, request_id: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=message,
        headers={REQUEST_ID_HEADER: request_id},
    )


@router.post("/generate", response_model=GenerateResponse)
async def generate(
    request: Request,
    response: Response,
    payload: GenerateRequest | None = Body(default=None),
    extractor: ArticleExtractor = Depends(get_extractor),
    generator: GenerationClient = Depends(get_generator),
) -> GenerateResponse:
    """Extract the article behind ``url`` and render it in the requested mode."""

    request_id = _start_request(request, response, "/generate")
    body = payload or GenerateRequest()

    if not body.url or not body.mode:
        logger.info("[%s] Missing url or mode", request_id)
        raise _error(400, MISSING_FIELDS_MESSAGE, request_id)

    try:
        url = normalize_url(body.url)
        mode: GenerationMode = parse_mode(body.mode)
    except ValidationError as exc:
        logger.info("[%s] Validation failed: %s", request_id, exc.message)
        raise _error(400, exc.message, request_id) from exc

    try:
        article: ParsedArticle = await run_in_threadpool(extractor.extract, url)
    except ExtractionError as exc:
        logger.warning("[%s] Could not parse %s: %s", request_id, url, exc.message)
        names_status = isinstance(exc, FetchError) and exc.status is not None
        message = exc.message if names_status else FETCH_FAILED_MESSAGE
        raise _error(400, message, request_id) from exc
    except Exception as exc:  # noqa: BLE001 - reported as a generic server error
        logger.exception("[%s] Unexpected failure while parsing %s", request_id, url)
        raise _error(500, str(exc) or INTERNAL_ERROR_MESSAGE, request_id) from exc

    if not article.content or len(article.content.strip()) < MIN_ARTICLE_LENGTH:
        logger.warning(
            "[%s] Extracted content too short (%d characters)",
            request_id,
            len(article.content or ""),
        )
        raise _error(400, NO_ARTICLE_TEXT_MESSAGE, request_id)

    origin = request.headers.get("origin")

    try:
        result = await run_in_threadpool(
            generator.generate, article.title, article.content, mode, origin
        )
    except (ConfigurationError, ValidationError) as exc:
        logger.error("[%s] Generation refused: %s", request_id, exc.message)
        raise _error(500, exc.message, request_id) from exc
    except GenerationError as exc:
        logger.error("[%s] Generation failed for mode %s: %s", request_id, mode.value, exc.message)
        raise _error(502, exc.message or GENERATION_FAILED_MESSAGE, request_id) from exc
    except Exception as exc:  # noqa: BLE001 - reported as a generic server error
        logger.exception("[%s] Unexpected generation failure", request_id)
        raise _error(500, str(exc) or INTERNAL_ERROR_MESSAGE, request_id) from exc

    logger.info("[%s] Generated %s output (%d characters)", request_id, mode.value, len(result))
    return GenerateResponse(result=result)


@router.post("/parse", response_model=ParsedArticle)
async def parse(
    request: Request,
    response: Response,
    payload: ParseRequest | None = Body(default=None),
    extractor: ArticleExtractor = Depends(get_extractor),
) -> ParsedArticle:
    """Return the date, title and main text of the article behind ``url``."""

    request_id = _start_request(request, response, "/parse")
    body = payload or ParseRequest()

    try:
        url = normalize_url(body.url)
        article: ParsedArticle = await run_in_threadpool(extractor.extract, url)
    except (ValidationError, ExtractionError) as exc:
        logger.warning("[%s] Parse request failed: %s", request_id, exc.message)
        raise _error(400, exc.message, request_id) from exc
    except Exception as exc:  # noqa: BLE001 - the parse endpoint reports every failure as 400
        logger.exception("[%s] Unexpected failure while parsing", request_id)
        raise _error(400, str(exc) or INTERNAL_ERROR_MESSAGE, request_id) from exc

    logger.info(
        "[%s] Parsed article (date: %s, title: %s, content length: %d)",
        request_id,
        article.date is not None,
        article.title is not None,
        len(article.content or ""),
    )
    return article


@router.post("/translate", response_model=TranslateResponse)
async def translate(
    request: Request,
    response: Response,
    payload: TranslateRequest | None = Body(default=None),
    generator: GenerationClient = Depends(get_generator),
) -> TranslateResponse:
    """Translate already extracted article text into Russian."""

    request_id = _start_request(request, response, "/translate")
    body = payload or TranslateRequest()
    origin = request.headers.get("origin")

    try:
        translation = await run_in_threadpool(generator.translate, body.content, origin)
    except ValidationError as exc:
        logger.info("[%s] Nothing to translate", request_id)
        raise _error(400, exc.message, request_id) from exc
    except ConfigurationError as exc:
        logger.error("[%s] Translation refused: %s", request_id, exc.message)
        raise _error(500, exc.message, request_id) from exc
    except GenerationError as exc:
        logger.error("[%s] Translation failed: %s", request_id, exc.message)
        raise _error(502, exc.message, request_id) from exc
    except Exception as exc:  # noqa: BLE001 - reported as a generic server error
        logger.exception("[%s] Unexpected translation failure", request_id)
        raise _error(500, str(exc) or INTERNAL_ERROR_MESSAGE, request_id) from exc

    logger.info("[%s] Translated article (%d characters)", request_id, len(translation))
    return TranslateResponse(translation=translation)
