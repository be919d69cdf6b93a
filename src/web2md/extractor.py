"""Article extraction from raw page HTML.

Wraps readability-lxml (the Python port of Mozilla's Readability) and
degrades through fixed precedence chains instead of failing:

    content:  readability summary -> <body> inner HTML -> raw HTML
    title:    readability title   -> <title>           -> "Untitled"
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from bs4 import BeautifulSoup
from readability import Document

log = structlog.get_logger()

UNTITLED = "Untitled"

# readability-lxml returns this placeholder when a page has no <title>
_READABILITY_NO_TITLE = "[no-title]"

_BYLINE_META = [
    {"name": "author"},
    {"property": "article:author"},
    {"name": "byl"},
    {"name": "parsely-author"},
]


@dataclass(frozen=True)
class ExtractedContent:
    title: str
    content: str  # HTML fragment handed to the markdown normaliser
    byline: str | None = None


def _has_text(fragment: str | None) -> bool:
    if not fragment or not fragment.strip():
        return False
    return bool(BeautifulSoup(fragment, "html.parser").get_text(strip=True))


def _find_byline(soup: BeautifulSoup) -> str | None:
    for attrs in _BYLINE_META:
        tag = soup.find("meta", attrs=attrs)
        if tag is not None:
            value = str(tag.get("content") or "").strip()
            if value:
                return value
    for selector in ('[rel="author"]', ".byline", ".author"):
        node = soup.select_one(selector)
        if node is not None:
            value = node.get_text(" ", strip=True)
            if value:
                return value
    return None


def extract_content(html: str, url: str) -> ExtractedContent:
    """Isolate the readable article from *html*. Never raises."""
    article_title: str | None = None
    article_html: str | None = None
    try:
        doc = Document(html, url=url)
        article_html = doc.summary(html_partial=True)
        article_title = doc.title()
    except Exception:
        # Readability raises on empty or unparseable markup; fall through to
        # the whole-document chain below.
        log.warning("readability_failed", url=url, exc_info=True)

    soup = BeautifulSoup(html, "html.parser")

    if article_title == _READABILITY_NO_TITLE:
        article_title = None
    document_title = soup.title.get_text(strip=True) if soup.title is not None else None
    title = (article_title or "").strip() or document_title or UNTITLED

    if _has_text(article_html):
        content = article_html
        source = "readability"
    elif soup.body is not None and _has_text(soup.body.decode_contents()):
        content = soup.body.decode_contents()
        source = "body"
    else:
        content = html
        source = "raw"

    log.debug("content_extracted", url=url, source=source, content_length=len(content))
    return ExtractedContent(title=title, content=content, byline=_find_byline(soup))
