"""Fetch result models — Pages, per-type fetch results, and their aggregate."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from recordsift.models.collection import CollectionType
from recordsift.models.query import DetailLevel

Record = dict[str, Any]
Cursor = str | int


class PageRequest(BaseModel):
    """Parameters for one call to a collection source's paged list operation."""

    limit: int = Field(default=100, ge=1, description="Page size hint")
    cursor: Cursor | None = Field(default=None, description="Cursor or offset from the previous page (None = first)")
    filters: dict[str, Any] = Field(
        default_factory=dict,
        description="Server-side filter params, keyed by upstream query parameter name",
    )
    detail: DetailLevel = DetailLevel.STANDARD
    include_sub_data: bool = False
    include_custom_fields: bool = False


class Page(BaseModel):
    """One normalized page: its records and the cursor for the next page, if any."""

    records: list[Record] = Field(default_factory=list)
    next_cursor: Cursor | None = None


class FetchState(str, Enum):
    """States of the per-type pagination loop."""

    FETCHING_PAGE = "fetching_page"
    DONE = "done"
    ABORTED_BY_CEILING = "aborted_by_ceiling"


class PerTypeResult(BaseModel):
    """Outcome of walking one collection type's pages.

    A type that legitimately holds no records finishes in ``DONE`` with an
    empty ``records`` list; a failed fetch never produces a ``PerTypeResult``.
    """

    collection_type: CollectionType
    records: list[Record] = Field(default_factory=list)
    total_records: int = 0
    has_more: bool = False
    warnings: list[str] = Field(default_factory=list)
    pages_fetched: int = 0
    state: FetchState = FetchState.DONE


class AggregatedResult(BaseModel):
    """Per-type results concatenated in request order, each record tagged with its type."""

    records: list[Record] = Field(default_factory=list)
    total_records: int = 0
    has_more: bool = False
    warnings: list[str] = Field(default_factory=list)
    per_type: list[PerTypeResult] = Field(default_factory=list)
