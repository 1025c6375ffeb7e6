"""Article download and main-content extraction.

The heuristic works on arbitrary pages without per-site configuration:

1. noise subtrees (navigation, sidebars, comments, scripts) are dropped;
2. every element matching one of :data:`CONTAINER_SELECTORS` is scored by the
   length of the text :func:`extract_text_from_element` collects from it, and
   the longest wins;
3. short results fall back to ``<main>``/``<body>`` and finally to a flat scan
   of every text block in the body.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Sequence, Tuple

import requests
from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup

from referent.config import DEFAULT_FETCH_TIMEOUT
from referent.errors import FetchError, ParseError
from referent.models import ParsedArticle

logger = logging.getLogger(__name__)

__all__ = [
    "ArticleExtractor",
    "DEFAULT_HEADERS",
    "date_candidates",
    "extract_date",
    "extract_main_content",
    "extract_text_from_element",
    "extract_title",
    "parse_article_html",
]

DEFAULT_HEADERS = {
    "User-Agent": (
        "ReferentHW/1.0 (+https://localhost) "
        "Mozilla/5.0 (compatible; ReferentBot/1.0)"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

DATE_META_SELECTORS = (
    'meta[property="article:published_time"]',
    'meta[property="og:published_time"]',
    'meta[name="article:published_time"]',
    'meta[name="pubdate"]',
    'meta[name="date"]',
    'meta[itemprop="datePublished"]',
)

NOISE_SELECTORS = (
    "script",
    "style",
    "noscript",
    "header",
    "footer",
    "nav",
    "aside",
    ".sidebar",
    "#sidebar",
    ".comments",
    "#comments",
    ".share",
    ".social",
    ".breadcrumbs",
    ".menu",
    ".navigation",
    ".footer",
    ".header",
    '[role="navigation"]',
    '[role="complementary"]',
)

CONTAINER_SELECTORS = (
    "main",
    "article",
    '[role="article"]',
    '[role="main"]',
    ".post",
    ".post-content",
    ".article",
    ".article-body",
    ".entry-content",
    ".content",
    ".main-content",
    ".page-content",
    ".post-body",
    "#content",
    "#main",
    "#article",
)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
TEXT_BLOCK_SELECTOR = ", ".join(("p", "li", *HEADING_TAGS, "blockquote", "pre", "div"))
STRUCTURED_TEXT_SELECTOR = ", ".join(("p", "li", *HEADING_TAGS))
BODY_SCAN_SELECTOR = ", ".join(("p", "li", *HEADING_TAGS, "div"))
SKIPPED_CLASS_MARKERS = ("nav", "menu", "header", "footer", "sidebar")

#: Blocks must carry more than this many characters to count as text on their own.
MIN_BLOCK_LENGTH = 20
#: Results shorter than this trigger the fallbacks.
MIN_CONTENT_LENGTH = 200
MAX_CONTENT_LENGTH = 20_000
TRUNCATION_MARKER = "\n\n[контент обрезан]"

_WHITESPACE_RE = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _dedupe(values: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    unique: List[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        unique.append(value)
    return unique


def date_candidates(soup: BeautifulSoup) -> List[str]:
    """Return publication date candidates in priority order, without repeats.

    Meta tags are consulted in :data:`DATE_META_SELECTORS` order, followed by the
    ``datetime`` attribute and text of every ``<time>`` element. Raw strings are
    returned as-is; no date parsing is attempted.
    """

    candidates: List[str] = []

    for selector in DATE_META_SELECTORS:
        meta = soup.select_one(selector)
        if meta is not None and meta.get("content"):
            candidates.append(str(meta["content"]))

    for time_tag in soup.find_all("time"):
        datetime_attr = time_tag.get("datetime")
        if datetime_attr:
            candidates.append(str(datetime_attr))
        text = time_tag.get_text().strip()
        if text:
            candidates.append(text)

    return _dedupe(value.strip() for value in candidates if value.strip())


def extract_date(soup: BeautifulSoup) -> str | None:
    """Return the highest priority publication date string, if any."""

    candidates = date_candidates(soup)
    return candidates[0] if candidates else None


def extract_title(soup: BeautifulSoup) -> str | None:
    """Return ``og:title``, the first ``<h1>`` or ``<title>``, whichever is non-empty first."""

    og_title = soup.select_one('meta[property="og:title"]')
    if og_title is not None:
        value = str(og_title.get("content") or "").strip()
        if value:
            return value

    for tag_name in ("h1", "title"):
        tag = soup.find(tag_name)
        if tag is not None:
            value = tag.get_text().strip()
            if value:
                return value

    return None


def _direct_text(node: Tag) -> str:
    """Return the text owned by ``node`` itself, ignoring descendant elements."""

    return "".join(
        str(child)
        for child in node.children
        if isinstance(child, NavigableString) and not isinstance(child, Comment)
    )


def extract_text_from_element(element: Tag) -> str:
    """Collect readable text below ``element``.

    Paragraphs, list items, headings, quotes and preformatted blocks contribute
    their whole text. A ``<div>`` contributes its own text when that is longer
    than :data:`MIN_BLOCK_LENGTH`; failing that, a div without nested
    paragraphs, list items or headings contributes its full text under the same
    length rule. Other divs are skipped because their descendants are visited
    anyway.
    """

    parts: List[str] = []

    for node in element.select(TEXT_BLOCK_SELECTOR):
        if node.name == "div":
            direct = _collapse(_direct_text(node))
            if len(direct) > MIN_BLOCK_LENGTH:
                parts.append(direct)
            elif node.select_one(STRUCTURED_TEXT_SELECTOR) is None:
                text = _collapse(node.get_text())
                if len(text) > MIN_BLOCK_LENGTH:
                    parts.append(text)
            continue

        part = _collapse(node.get_text())
        if part:
            parts.append(part)

    return "\n\n".join(parts).strip()


def _remove_noise(soup: BeautifulSoup) -> None:
    for node in soup.select(", ".join(NOISE_SELECTORS)):
        # A parent matched earlier may already have taken this node with it.
        if not node.decomposed:
            node.decompose()


def _best_container(soup: BeautifulSoup, selectors: Sequence[str]) -> Tuple[Tag | None, str]:
    best_element: Tag | None = None
    best_text = ""
    seen: set[int] = set()

    for selector in selectors:
        for element in soup.select(selector):
            if id(element) in seen:
                continue
            seen.add(id(element))

            text = extract_text_from_element(element)
            if len(text) > len(best_text):
                best_element = element
                best_text = text

    return best_element, best_text


def _scan_body(soup: BeautifulSoup) -> str:
    body = soup.body
    if body is None:
        return ""

    parts: List[str] = []
    for node in body.select(BODY_SCAN_SELECTOR):
        classes = node.get("class") or []
        if isinstance(classes, str):
            classes = [classes]
        class_name = " ".join(classes).lower()
        if any(marker in class_name for marker in SKIPPED_CLASS_MARKERS):
            continue

        part = _collapse(node.get_text())
        if len(part) > MIN_BLOCK_LENGTH:
            parts.append(part)

    return "\n\n".join(parts).strip()


def extract_main_content(soup: BeautifulSoup) -> str | None:
    """Return the main readable text of ``soup``, or ``None`` when nothing was found.

    ``soup`` is modified in place: noise subtrees are removed before scoring.
    """

    _remove_noise(soup)

    best_element, final_text = _best_container(soup, CONTAINER_SELECTORS)
    if best_element is not None:
        logger.debug("Best container <%s> yielded %d characters", best_element.name, len(final_text))

    if len(final_text) < MIN_CONTENT_LENGTH:
        for fallback in (soup.find("main"), soup.body):
            if fallback is None:
                continue
            fallback_text = extract_text_from_element(fallback)
            if len(fallback_text) > len(final_text):
                final_text = fallback_text

    if len(final_text) < MIN_CONTENT_LENGTH:
        body_text = _scan_body(soup)
        if len(body_text) > len(final_text):
            final_text = body_text

    if len(final_text) > MAX_CONTENT_LENGTH:
        final_text = final_text[:MAX_CONTENT_LENGTH] + TRUNCATION_MARKER

    return final_text or None


def parse_article_html(html: str | bytes) -> ParsedArticle:
    """Extract date, title and main content from an HTML document."""

    try:
        soup = BeautifulSoup(html, "lxml")
    except ParserRejectedMarkup as exc:
        raise ParseError("Не удалось разобрать HTML статьи") from exc

    date = extract_date(soup)
    title = extract_title(soup)
    content = extract_main_content(soup)

    return ParsedArticle(date=date, title=title, content=content)


class ArticleExtractor:
    """Download an article page and turn it into a :class:`ParsedArticle`.

    Without an injected ``session`` every download uses its own short-lived
    :class:`requests.Session`, so cookies set by one site never reach a later
    fetch.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: Tuple[float, float] = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        self._session = session
        self._timeout = timeout

    def fetch_html(self, url: str) -> str:
        """Return the body of ``url``; raise :class:`FetchError` on any failure."""

        if self._session is not None:
            return self._fetch(self._session, url)
        with requests.Session() as session:
            return self._fetch(session, url)

    def _fetch(self, session: requests.Session, url: str) -> str:
        try:
            response = session.get(url, headers=DEFAULT_HEADERS, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.warning("Failed to fetch %s: %s", url, exc)
            raise FetchError(str(exc)) from exc

        if not 200 <= response.status_code < 300:
            logger.warning(
                "Unsuccessful response for %s: %s %s", url, response.status_code, response.reason
            )
            status_line = f"{response.status_code} {response.reason or ''}".strip()
            raise FetchError(
                f"Не удалось загрузить статью (HTTP {status_line})",
                status=response.status_code,
                status_text=response.reason,
            )

        # requests falls back to ISO-8859-1 for text/* without a declared charset.
        if "charset" not in response.headers.get("Content-Type", "").lower():
            response.encoding = response.apparent_encoding or "utf-8"

        return response.text

    def extract(self, url: str) -> ParsedArticle:
        """Fetch ``url`` and extract its date, title and main content."""

        logger.info("Parsing article %s", url)
        html = self.fetch_html(url)
        article = parse_article_html(html)

        logger.info(
            "Parsed article %s (date: %s, title: %s, content length: %d)",
            url,
            article.date is not None,
            article.title is not None,
            len(article.content or ""),
        )
        return article
