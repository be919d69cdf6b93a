"""Pure projections of a ``PageDocument`` for the four retrieval tiers.

Nothing here performs I/O; the tool handlers load the document and call
these functions to shape the result.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from web2md.parser import CHARS_PER_TOKEN, estimate_tokens

if TYPE_CHECKING:
    from web2md.models.document import PageDocument, Section

DEFAULT_MAX_TOKENS = 4000
EXCERPT_RADIUS = 150
ELLIPSIS = "..."
SECTION_SEPARATOR = "\n\n---\n\n"

# A paragraph break is only used as the cut point if it falls inside the
# last 20% of the truncation window.
_PARAGRAPH_CUT_THRESHOLD = 0.8


# ---------------------------------------------------------------------------
# Outline
# ---------------------------------------------------------------------------


def render_outline(sections: Iterable[Section]) -> str:
    """One bullet per section, indented two spaces per level below H1."""
    return "\n".join(
        f"{'  ' * max(0, s.level - 1)}- {s.heading} (~{s.tokens} tokens)" for s in sections
    )


# ---------------------------------------------------------------------------
# Section lookup
# ---------------------------------------------------------------------------


def heading_matches(queries: Iterable[str], heading: str) -> bool:
    """True if any query equals or is a substring of *heading*, ignoring case."""
    heading_lower = heading.lower()
    return any(
        heading_lower == query or query in heading_lower
        for query in (q.lower() for q in queries)
    )


def select_sections(sections: Iterable[Section], queries: Iterable[str]) -> list[Section]:
    """Sections matching any query, in document order."""
    query_set = {q.lower() for q in queries}
    return [s for s in sections if heading_matches(query_set, s.heading)]


def render_sections(sections: Iterable[Section]) -> str:
    # The synthetic intro (level 0) is rendered as an H1
    return SECTION_SEPARATOR.join(
        f"{'#' * (s.level or 1)} {s.heading}\n\n{s.content}" for s in sections
    )


# ---------------------------------------------------------------------------
# Full content
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BudgetedContent:
    content: str
    total_tokens: int
    returned_tokens: int
    truncated: bool


def truncation_notice(max_tokens: int, total_tokens: int) -> str:
    return (
        f"\n\n---\n*[Truncated: ~{max_tokens} of {total_tokens} tokens. "
        "Use web_section for specific parts.]*"
    )


def render_full_content(document: PageDocument) -> str:
    return f"# {document.title}\n\nSource: {document.url}\n\n{document.markdown}"


def truncate_to_budget(content: str, max_tokens: int) -> BudgetedContent:
    """Cap *content* at ``max_tokens * 4`` characters plus a truncation notice.

    The cut is moved back to the last blank line when one exists within the
    final 20% of the window, so paragraphs are not severed mid-sentence.
    """
    total_tokens = estimate_tokens(content)
    if total_tokens <= max_tokens:
        return BudgetedContent(
            content=content,
            total_tokens=total_tokens,
            returned_tokens=total_tokens,
            truncated=False,
        )

    max_chars = max_tokens * CHARS_PER_TOKEN
    window = content[:max_chars]
    last_paragraph = window.rfind("\n\n")
    if last_paragraph > max_chars * _PARAGRAPH_CUT_THRESHOLD:
        window = window[:last_paragraph]

    return BudgetedContent(
        content=window + truncation_notice(max_tokens, total_tokens),
        total_tokens=total_tokens,
        returned_tokens=max_tokens,
        truncated=True,
    )


# ---------------------------------------------------------------------------
# In-page search
# ---------------------------------------------------------------------------


def excerpt_around(content: str, index: int, length: int, radius: int = EXCERPT_RADIUS) -> str:
    """Window of *radius* chars either side of a match, clamped to *content*.

    The ellipsis marker is added only on a side where the window was clipped.
    """
    start = max(0, index - radius)
    end = min(len(content), index + length + radius)
    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(content) else ""
    return f"{prefix}{content[start:end]}{suffix}"


def search_sections(sections: Iterable[Section], query: str) -> list[tuple[str, str]]:
    """``(heading, excerpt)`` for each section whose content contains *query*.

    Matching is case-insensitive and looks at section content only; only the
    first occurrence per section is excerpted.
    """
    # Match on the original text: lowercasing can change a string's length
    pattern = re.compile(re.escape(query), re.IGNORECASE)
    matches: list[tuple[str, str]] = []
    for section in sections:
        found = pattern.search(section.content)
        if found is None:
            continue
        excerpt = excerpt_around(section.content, found.start(), found.end() - found.start())
        matches.append((section.heading, excerpt))
    return matches
