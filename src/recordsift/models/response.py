"""Search response models — What the engine returns to its caller."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class PaginationInfo(BaseModel):
    """Where to continue when more matching records exist."""

    has_next: bool = Field(default=True)
    next_offset: int = Field(description="Offset to pass for the next batch")
    total_pages: int = Field(description="Pages of ``limit`` records needed to cover every match")


class PatternInfo(BaseModel):
    """Summary of the pattern matching applied to a search."""

    patterns_used: bool = False
    wildcard_fields: list[str] = Field(default_factory=list)
    regex_fields: list[str] = Field(default_factory=list)
    complexity_score: int = Field(default=0, description="Sum of wildcard and regex metacharacters used")


class SearchCriteria(BaseModel):
    """Echo of the normalized criteria the search ran with."""

    types: list[str]
    filters: dict[str, Any] = Field(default_factory=dict)
    operators: dict[str, str] = Field(default_factory=dict)
    output: str | list[str] = "full"
    detail: str = "standard"
    limit: int = 50
    offset: int = 0


class SearchResponse(BaseModel):
    """Complete search response.

    ``data`` holds bare identifiers for ``ids-only`` output and record dicts
    for every other output mode.
    """

    data: list[Any] = Field(default_factory=list, description="Shaped records or identifiers")
    total_records: int = Field(default=0, description="Records matching every filter, before offset/limit")
    returned_records: int = Field(default=0, description="Records in ``data``")
    has_more: bool = Field(default=False, description="More matching records exist beyond this batch")
    warnings: list[str] = Field(default_factory=list)
    hints: list[str] = Field(default_factory=list)
    message: str = Field(default="", description="Human-readable result summary")
    search_criteria: SearchCriteria | None = None
    pagination: PaginationInfo | None = None
    pattern_info: PatternInfo = Field(default_factory=PatternInfo)
    query_time_ms: int = Field(default=0, description="Total processing time in ms")
