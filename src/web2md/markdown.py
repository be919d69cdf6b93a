"""HTML to Markdown conversion.

Boilerplate elements are removed (tag and content) before conversion, on
top of whatever the extractor already dropped. Conversion uses markdownify
with ATX headings, fenced code blocks and a single ``-`` bullet marker.
Output is deterministic for identical input.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag
from markdownify import MarkdownConverter

REMOVED_TAGS = ("script", "style", "nav", "footer", "aside", "iframe", "noscript")

_EXCESSIVE_BLANK_LINES_RE = re.compile(r"\n{3,}")
_TRAILING_WHITESPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)


class _GfmConverter(MarkdownConverter):
    """markdownify converter with GitHub-flavoured task list items."""

    def convert_input(self, el: Tag, text: str, *args: object, **kwargs: object) -> str:
        if el.get("type") == "checkbox":
            return "[x] " if el.has_attr("checked") else "[ ] "
        return ""


def _code_language(el: Tag) -> str:
    """Return the ``language-*`` class hint of a ``<pre>`` block or its ``<code>``."""
    classes = list(el.get("class") or [])
    code = el.find("code")
    if isinstance(code, Tag):
        classes = [*classes, *(code.get("class") or [])]
    for cls in classes:
        if isinstance(cls, str) and cls.startswith("language-"):
            return cls[len("language-") :]
    return ""


def strip_boilerplate(html: str) -> str:
    """Remove boilerplate elements (and everything inside them) from *html*."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(list(REMOVED_TAGS)):
        tag.decompose()
    return str(soup)


def html_to_markdown(html: str) -> str:
    """Convert an HTML fragment to normalised Markdown."""
    if not html or not html.strip():
        return ""

    converter = _GfmConverter(
        heading_style="ATX",
        bullets="-",
        code_language_callback=_code_language,
        escape_underscores=False,
    )
    md = converter.convert(strip_boilerplate(html))

    md = _TRAILING_WHITESPACE_RE.sub("", md)
    md = _EXCESSIVE_BLANK_LINES_RE.sub("\n\n", md)
    return md.strip()
