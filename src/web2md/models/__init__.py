from __future__ import annotations

from web2md.models.document import INTRO_HEADING, FetchMethod, PageDocument, Section
from web2md.models.tools import (
    ContentInput,
    ContentOutput,
    OutlineOutput,
    SearchInput,
    SearchMatch,
    SearchOutput,
    SectionInput,
    SectionNotFoundOutput,
    SectionOutput,
)

__all__ = [
    # document
    "INTRO_HEADING",
    "FetchMethod",
    "Section",
    "PageDocument",
    # tools
    "SectionInput",
    "SectionOutput",
    "SectionNotFoundOutput",
    "ContentInput",
    "ContentOutput",
    "OutlineOutput",
    "SearchInput",
    "SearchMatch",
    "SearchOutput",
]
