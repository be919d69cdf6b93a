from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class SectionInput(BaseModel):
    headings: list[str] = Field(min_length=1)

    @field_validator("headings", mode="before")
    @classmethod
    def coerce_single_heading(cls, v: object) -> object:
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("headings")
    @classmethod
    def reject_blank_queries(cls, v: list[str]) -> list[str]:
        if any(not query.strip() for query in v):
            raise ValueError("heading queries must not be empty")
        return v


class ContentInput(BaseModel):
    max_tokens: int = Field(default=4000, ge=1)


class SearchInput(BaseModel):
    query: str

    @field_validator("query")
    @classmethod
    def query_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("query must not be empty")
        return v


class OutlineOutput(BaseModel):
    title: str
    url: str
    total_tokens: int
    section_count: int
    outline: str  # Indented bullet list, one line per section
    cached: bool


class SectionOutput(BaseModel):
    title: str
    url: str
    sections_returned: int
    tokens: int
    content: str
    cached: bool


class SectionNotFoundOutput(BaseModel):
    error: str
    available_sections: list[str]


class ContentOutput(BaseModel):
    title: str
    url: str
    total_tokens: int
    returned_tokens: int
    truncated: bool
    content: str
    cached: bool


class SearchMatch(BaseModel):
    heading: str
    excerpt: str


class SearchOutput(BaseModel):
    title: str
    url: str
    query: str
    match_count: int
    matches: list[SearchMatch]
    cached: bool
