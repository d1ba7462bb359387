"""Pagination Fetcher — Walks one collection type's pages to completion.

The loop for a single type is a small state machine::

    FETCHING_PAGE ──(next cursor, under ceiling)──▶ FETCHING_PAGE
          │                                   │
          └──(no next cursor)──▶ DONE          └──(ceiling reached)──▶ ABORTED_BY_CEILING

Hitting the page ceiling is not an error: the result is flagged
``has_more`` and carries a warning.  Anything raised by the source
propagates to the caller untouched.
"""

from __future__ import annotations

import logging
from typing import Any

from recordsift.core.mappings import FieldMappingRegistry
from recordsift.core.patterns import effective_mode, is_literal, stringify
from recordsift.models.collection import CollectionType
from recordsift.models.query import EMPTY_FILTER_VALUE, NormalizedSearchRequest, SearchOperator
from recordsift.models.result import FetchState, Page, PageRequest, PerTypeResult
from recordsift.sources.base.registry import SourceRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 50
DEFAULT_PAGE_SIZE = 100

_RECORD_KEYS = ("records", "data")


def normalize_page(raw: Any) -> Page:
    """Normalize whatever a source returned into a :class:`Page`.

    Accepted shapes:
      - a :class:`Page` (returned as is)
      - a bare list of records (terminal page)
      - an envelope ``{"records"|"data": [...], "next": ...}`` or
        ``{"data": [...], "links": {"next": ...}}``
      - a single bare record (one-record terminal page)
      - ``None`` (empty terminal page)
    """
    if isinstance(raw, Page):
        return raw
    if raw is None:
        return Page()
    if isinstance(raw, list):
        return Page(records=[r for r in raw if isinstance(r, dict)])
    if isinstance(raw, dict):
        for key in _RECORD_KEYS:
            if isinstance(raw.get(key), list):
                return Page(records=[r for r in raw[key] if isinstance(r, dict)], next_cursor=_next_cursor(raw))
        return Page(records=[raw])
    raise TypeError(f"Unsupported page type: {type(raw).__name__}")


def _next_cursor(envelope: dict[str, Any]) -> Any:
    cursor = envelope.get("next")
    if cursor in (None, ""):
        links = envelope.get("links")
        cursor = links.get("next") if isinstance(links, dict) else None
    return cursor or None


def is_server_side(
    collection_type: CollectionType,
    field: str,
    request: NormalizedSearchRequest,
    registry: FieldMappingRegistry,
) -> bool:
    """Whether the upstream list operation can evaluate this filter exactly.

    A filter qualifies when the field is a server-side field of the type,
    the operator is ``equals``, the value is not the empty marker, and the
    value has no pattern syntax in the active pattern mode.
    """
    if field not in request.filters:
        return False
    if not registry.can_filter_server_side(collection_type, field):
        return False
    operator = request.operator_for(field)
    if operator != SearchOperator.EQUALS:
        return False
    value = request.filters[field]
    if value == EMPTY_FILTER_VALUE or isinstance(value, (list, dict)):
        return False
    return is_literal(stringify(value), effective_mode(operator, request.pattern_mode))


def server_side_filters(
    collection_type: CollectionType,
    request: NormalizedSearchRequest,
    registry: FieldMappingRegistry,
) -> dict[str, Any]:
    """Upstream query params for every filter the type can evaluate itself."""
    return {
        registry.server_param(collection_type, field): value
        for field, value in request.filters.items()
        if is_server_side(collection_type, field, request, registry)
    }


class PaginationFetcher:
    """Fetches every page of one collection type, up to a page ceiling.

    Args:
        registry: Field mappings, used to pick server-side filters.
        sources: Source registry that lists each collection type.
        max_pages: Page ceiling per type.
        page_size: Page size hint forwarded to sources.
    """

    def __init__(
        self,
        registry: FieldMappingRegistry,
        sources: SourceRegistry,
        max_pages: int = DEFAULT_MAX_PAGES,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.registry = registry
        self.sources = sources
        self.max_pages = max(1, max_pages)
        self.page_size = max(1, page_size)

    async def fetch(self, collection_type: CollectionType, request: NormalizedSearchRequest) -> PerTypeResult:
        """Walk the pages of ``collection_type``.

        Raises:
            SourceNotFoundError: If no source is registered for the type.
            Exception: Whatever the source raises while paging.
        """
        source = self.sources.get(collection_type)
        filters = server_side_filters(collection_type, request, self.registry)

        records: list[dict[str, Any]] = []
        warnings: list[str] = []
        cursor: Any = None
        pages = 0
        state = FetchState.FETCHING_PAGE

        while state == FetchState.FETCHING_PAGE:
            page = normalize_page(
                await source.fetch_page(
                    PageRequest(
                        limit=self.page_size,
                        cursor=cursor,
                        filters=filters,
                        detail=request.detail,
                        include_sub_data=request.include_sub_data,
                        include_custom_fields=request.include_custom_fields,
                    )
                )
            )
            pages += 1
            records.extend(page.records)
            logger.debug(
                "Fetched %s page %d: %d records (next=%s)",
                collection_type.value,
                pages,
                len(page.records),
                page.next_cursor is not None,
            )

            if page.next_cursor is None:
                state = FetchState.DONE
            elif pages >= self.max_pages:
                state = FetchState.ABORTED_BY_CEILING
            else:
                cursor = page.next_cursor

        has_more = state == FetchState.ABORTED_BY_CEILING
        if has_more:
            logger.warning(
                "Page ceiling of %d reached for %s after %d records",
                self.max_pages,
                collection_type.value,
                len(records),
            )
            warnings.append(
                f"Stopped fetching {collection_type.value} after {self.max_pages} pages; "
                "more records exist upstream. Narrow the filters to see them."
            )

        return PerTypeResult(
            collection_type=collection_type,
            records=records,
            total_records=len(records),
            has_more=has_more,
            warnings=warnings,
            pages_fetched=pages,
            state=state,
        )
