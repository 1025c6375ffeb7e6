from __future__ import annotations

from types import SimpleNamespace

import pytest
import requests
from bs4 import BeautifulSoup

from referent.errors import FetchError
from referent.services.extractor import (
    DEFAULT_HEADERS,
    MAX_CONTENT_LENGTH,
    TRUNCATION_MARKER,
    ArticleExtractor,
    date_candidates,
    extract_date,
    extract_main_content,
    extract_text_from_element,
    extract_title,
    parse_article_html,
)

LONG_SENTENCE = "This sentence is long enough to be kept by the extractor. "


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def test_article_paragraphs_are_kept_and_nav_is_dropped() -> None:
    html = (
        "<html><body><article>"
        "<p>A long paragraph of more than 20 characters.</p>"
        "<nav><p>Skip this</p></nav>"
        "</article></body></html>"
    )

    article = parse_article_html(html)

    assert article.content is not None
    assert "A long paragraph of more than 20 characters." in article.content
    assert "Skip this" not in article.content


def test_div_with_direct_text_is_captured() -> None:
    html = "<html><body><div>This div holds more than thirty characters of text.</div></body></html>"

    article = parse_article_html(html)

    assert article.content == "This div holds more than thirty characters of text."


def test_short_container_falls_back_to_body() -> None:
    body_paragraphs = "".join(f"<p>{LONG_SENTENCE}{index}</p>" for index in range(6))
    html = (
        "<html><body>"
        "<article><p>Tiny article container text.</p></article>"
        f"<section>{body_paragraphs}</section>"
        "</body></html>"
    )

    article = parse_article_html(html)

    assert article.content is not None
    assert len(article.content) >= 200
    assert "Tiny article container text." in article.content
    assert f"{LONG_SENTENCE.strip()} 5" in article.content


def test_longest_container_wins() -> None:
    html = (
        "<html><body>"
        "<div class='post'><p>Short post body that is here.</p></div>"
        f"<div class='entry-content'>{''.join(f'<p>{LONG_SENTENCE}</p>' for _ in range(5))}</div>"
        "</body></html>"
    )

    content = extract_main_content(_soup(html))

    assert content is not None
    assert "Short post body" not in content
    assert content.count(LONG_SENTENCE.strip()) == 5


def test_noise_blocks_are_removed_before_scoring() -> None:
    paragraphs = "".join(f"<p>{LONG_SENTENCE}</p>" for _ in range(5))
    html = (
        "<html><body><main>"
        f"{paragraphs}"
        "<div class='comments'><p>First comment that should never appear.</p></div>"
        "<div class='share'><p>Share this on every network you know of.</p></div>"
        "<script>var tracking = 'should not appear anywhere';</script>"
        "</main></body></html>"
    )

    content = extract_main_content(_soup(html))

    assert content is not None
    assert "comment" not in content
    assert "Share this" not in content
    assert "tracking" not in content


def test_body_scan_skips_navigation_classes() -> None:
    html = (
        "<html><body>"
        "<ul><li class='menu-item'>Menu entry that is long enough to count</li></ul>"
        "<div class='story'>"
        "<p>Story text that is long enough to count here</p>"
        "<p>Second story paragraph, long enough too</p>"
        "</div>"
        "</body></html>"
    )

    content = extract_main_content(_soup(html))

    assert content is not None
    assert "Story text" in content
    assert "Menu entry" not in content


def test_text_extraction_skips_structural_divs_and_joins_with_blank_lines() -> None:
    html = (
        "<div id='root'>"
        "<div><p>First paragraph   with\n extra   spacing.</p><p>Second paragraph.</p></div>"
        "<h2>Heading</h2>"
        "<div>short</div>"
        "</div>"
    )
    root = _soup(html).find(id="root")

    text = extract_text_from_element(root)

    assert text == "First paragraph with extra spacing.\n\nSecond paragraph.\n\nHeading"


def test_div_direct_text_ignores_nested_elements() -> None:
    html = (
        "<div id='root'><div>Direct text that is clearly longer than twenty"
        "<p>Nested paragraph.</p></div></div>"
    )
    root = _soup(html).find(id="root")

    text = extract_text_from_element(root)

    assert text == "Direct text that is clearly longer than twenty\n\nNested paragraph."


def test_content_is_truncated_once_with_marker() -> None:
    paragraph = "word " * 400
    html = "<html><body><article>" + f"<p>{paragraph}</p>" * 20 + "</article></body></html>"

    content = extract_main_content(_soup(html))

    assert content is not None
    assert content.endswith(TRUNCATION_MARKER)
    assert content.count(TRUNCATION_MARKER) == 1
    assert len(content) == MAX_CONTENT_LENGTH + len(TRUNCATION_MARKER)


def test_empty_document_has_no_content() -> None:
    article = parse_article_html("<html><head><title> </title></head><body></body></html>")

    assert article.content is None
    assert article.title is None
    assert article.date is None


def test_malformed_markup_does_not_raise() -> None:
    html = "<html><body><article><p>Unclosed paragraph that goes on and on<div><li>item text that keeps going"

    article = parse_article_html(html)

    assert article.content is not None
    assert "Unclosed paragraph" in article.content


def test_extract_date_prefers_meta_and_dedupes_time_candidates() -> None:
    html = """
    <html><head>
      <meta name="date" content="2024-03-01" />
      <meta property="article:published_time" content=" 2024-03-01 " />
    </head><body>
      <time datetime="2024-03-01">March 1, 2024</time>
      <time datetime="2024-02-28">March 1, 2024</time>
    </body></html>
    """
    soup = _soup(html)

    assert extract_date(soup) == "2024-03-01"


def test_extract_date_falls_back_to_time_elements() -> None:
    soup = _soup("<html><body><time>  Yesterday  </time><time datetime='2024-01-01'></time></body></html>")

    assert extract_date(soup) == "Yesterday"


def test_extract_date_returns_none_without_candidates() -> None:
    assert extract_date(_soup("<html><body><p>No dates here.</p></body></html>")) is None


def test_extract_title_order_of_preference() -> None:
    og = _soup(
        "<html><head><meta property='og:title' content=' OG Title ' /><title>Doc</title></head>"
        "<body><h1>Heading</h1></body></html>"
    )
    heading = _soup(
        "<html><head><meta property='og:title' content='  ' /><title>Doc</title></head>"
        "<body><header><h1> Heading </h1></header></body></html>"
    )
    document = _soup("<html><head><title> Doc title </title></head><body><h1> </h1></body></html>")

    assert extract_title(og) == "OG Title"
    assert extract_title(heading) == "Heading"
    assert extract_title(document) == "Doc title"


class DummyResponse:
    def __init__(self, text: str, status_code: int = 200, reason: str = "OK") -> None:
        self.text = text
        self.status_code = status_code
        self.reason = reason
        self.headers = {"Content-Type": "text/html; charset=utf-8"}


def test_extract_fetches_with_identifying_headers() -> None:
    captured: dict[str, object] = {}

    def fake_get(url, headers, timeout):
        captured.update(url=url, headers=headers, timeout=timeout)
        return DummyResponse(
            "<html><head><title>Story</title></head><body><article>"
            "<p>A long paragraph of more than 20 characters.</p></article></body></html>"
        )

    extractor = ArticleExtractor(session=SimpleNamespace(get=fake_get), timeout=(1.0, 2.0))

    article = extractor.extract("https://example.com/story")

    assert article.title == "Story"
    assert article.content == "A long paragraph of more than 20 characters."
    assert captured == {
        "url": "https://example.com/story",
        "headers": DEFAULT_HEADERS,
        "timeout": (1.0, 2.0),
    }


def test_extract_raises_fetch_error_for_unsuccessful_status() -> None:
    extractor = ArticleExtractor(
        session=SimpleNamespace(get=lambda url, headers, timeout: DummyResponse("", 404, "Not Found"))
    )

    with pytest.raises(FetchError) as excinfo:
        extractor.extract("https://example.com/missing")

    assert excinfo.value.status == 404
    assert excinfo.value.status_text == "Not Found"
    assert "HTTP 404 Not Found" in excinfo.value.message


def test_extract_wraps_transport_errors() -> None:
    def fail(url, headers, timeout):
        raise requests.ConnectionError("Name or service not known")

    extractor = ArticleExtractor(session=SimpleNamespace(get=fail))

    with pytest.raises(FetchError) as excinfo:
        extractor.extract("https://unreachable.invalid/")

    assert excinfo.value.status is None
    assert "Name or service not known" in excinfo.value.message


def test_date_candidates_dedupe_in_first_seen_order() -> None:
    html = """
    <html><head>
      <meta property="og:published_time" content="2024-05-02T10:00:00Z" />
      <meta name="pubdate" content="2024-05-02T10:00:00Z" />
    </head><body>
      <time datetime="2024-05-02">May 2</time>
      <time datetime="2024-05-02T10:00:00Z">May 2</time>
    </body></html>
    """

    assert date_candidates(_soup(html)) == ["2024-05-02T10:00:00Z", "2024-05-02", "May 2"]


def test_each_fetch_uses_a_fresh_session_without_cookies(monkeypatch) -> None:
    sent_cookies: list[dict] = []

    class CookieKeepingSession:
        def __init__(self) -> None:
            self.cookies: dict[str, str] = {}

        def __enter__(self):
            return self

        def __exit__(self, *exc_info) -> None:
            return None

        def get(self, url, headers, timeout):
            sent_cookies.append(dict(self.cookies))
            self.cookies["session"] = "user-a-secret"
            return DummyResponse("<html><body><p>A long paragraph of more than 20 characters.</p></body></html>")

    monkeypatch.setattr(requests, "Session", CookieKeepingSession)
    extractor = ArticleExtractor()

    extractor.extract("https://example.com/first")
    extractor.extract("https://example.com/second")

    assert sent_cookies == [{}, {}]


def _raw_response(body: bytes, content_type: str) -> requests.Response:
    response = requests.Response()
    response.status_code = 200
    response.reason = "OK"
    response._content = body
    response.headers["Content-Type"] = content_type
    response.encoding = requests.utils.get_encoding_from_headers(response.headers)
    return response


def test_utf8_page_without_declared_charset_is_decoded_correctly() -> None:
    paragraph = "It’s a café story — “quoted” and naïve, told twice. " * 8
    body = f"<html><body><article><p>{paragraph}</p></article></body></html>".encode("utf-8")
    response = _raw_response(body, "text/html")
    extractor = ArticleExtractor(session=SimpleNamespace(get=lambda url, headers, timeout: response))

    article = extractor.extract("https://example.com/cafe")

    assert article.content.startswith("It’s a café story — “quoted”")
    assert "â\x80" not in article.content


def test_declared_charset_is_respected() -> None:
    body = "<html><body><p>Grüße aus Köln, eine lange Geschichte.</p></body></html>".encode("latin-1")
    response = _raw_response(body, "text/html; charset=ISO-8859-1")
    extractor = ArticleExtractor(session=SimpleNamespace(get=lambda url, headers, timeout: response))

    article = extractor.extract("https://example.com/koeln")

    assert article.content == "Grüße aus Köln, eine lange Geschichte."
