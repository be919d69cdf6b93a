"""Section parser for normalised page markdown.

Single-pass algorithm that splits Markdown into heading-delimited sections
(H1-H6) in document order. Content that appears before the first heading
is collected into a synthetic level-0 intro section, emitted only when
something was actually there.
"""

from __future__ import annotations

import math
import re

from web2md.models.document import INTRO_HEADING, Section

CHARS_PER_TOKEN = 4

_HEADING_RE = re.compile(r"^(#{1,6})\s+(\S.*)$")


def estimate_tokens(text: str) -> int:
    """Fixed-ratio token estimate: ``ceil(len(text) / 4)``."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def _build_section(heading: str, level: int, buffer: list[str]) -> Section:
    content = "\n".join(buffer).strip()
    return Section(
        heading=heading,
        level=level,
        content=content,
        tokens=estimate_tokens(content),
    )


def parse_sections(markdown: str) -> list[Section]:
    """Split *markdown* into an ordered list of sections.

    A heading line is 1-6 ``#`` followed by whitespace and non-empty text.
    Every other line belongs to the body of the section that precedes it.
    A heading with no body still yields a section (with empty content).
    The last heading is always emitted, body or not, and markdown without
    headings always yields exactly one section (the intro).
    """
    sections: list[Section] = []

    heading = INTRO_HEADING
    level = 0
    buffer: list[str] = []

    for line in markdown.split("\n"):
        match = _HEADING_RE.match(line)
        if not match:
            buffer.append(line)
            continue

        pending = _build_section(heading, level, buffer)
        # An intro with nothing in it is dropped, not emitted
        if pending.content or heading != INTRO_HEADING:
            sections.append(pending)

        heading = match.group(2).strip()
        level = len(match.group(1))
        buffer = []

    # A trailing heading is kept even with nothing after it
    if buffer or heading != INTRO_HEADING:
        sections.append(_build_section(heading, level, buffer))

    return sections
