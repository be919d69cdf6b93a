from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

INTRO_HEADING = "_intro"  # Sentinel heading of the synthetic lead-in section


class FetchMethod(StrEnum):
    RENDERED = "rendered"
    DIRECT = "direct"
    RENDERED_FALLBACK_TO_DIRECT = "rendered-fallback-to-direct"


class Section(BaseModel):
    """Heading-delimited span of a page's markdown."""

    model_config = ConfigDict(frozen=True)

    heading: str
    level: int  # 0 for the synthetic intro, otherwise 1-6
    content: str  # Trimmed body, heading line excluded
    tokens: int


class PageDocument(BaseModel):
    """Cached, structured representation of one fetched page.

    Built once per fetch and never mutated; a refetch replaces it whole.
    """

    model_config = ConfigDict(frozen=True)

    url: str  # Canonical URL (cache key input)
    title: str
    byline: str | None = None
    markdown: str
    sections: tuple[Section, ...] = ()
    total_tokens: int
    fetch_method: FetchMethod
    fetched_at: datetime
