"""Memory source — Serves an in-process list of records page by page.

Useful for tests, demos, and fixtures loaded from YAML/JSON.  Cursors are
integer offsets; server-side filters are applied as case-insensitive
equality (list-valued fields match when they contain the value).

Usage::

    source = MemoryCollectionSource(
        [{"id": "f1", "name": "Dark mode"}, {"id": "f2", "name": "SSO"}],
        page_size=1,
        param_fields={"ownerEmail": "owner.email"},
    )
    page = await source.fetch_page(PageRequest())
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from recordsift.core.fieldpath import MISSING, resolve_path
from recordsift.models.result import Page, PageRequest, Record
from recordsift.sources.base.exceptions import SourceQueryError
from recordsift.sources.base.source import CollectionSource, SourceHealth

logger = logging.getLogger(__name__)


class MemoryCollectionSource(CollectionSource):
    """Collection source backed by a list of dicts.

    Args:
        records: Records in the order pages should return them.
        page_size: Fixed page size; when ``None`` the request's ``limit`` is used.
        param_fields: Upstream parameter name -> record field path, for
            filter params whose name differs from the field path.
    """

    def __init__(
        self,
        records: Sequence[Record] | None = None,
        *,
        page_size: int | None = None,
        param_fields: dict[str, str] | None = None,
    ) -> None:
        self._records = [dict(r) for r in records or []]
        self._page_size = page_size
        self._param_fields = param_fields or {}
        self.calls: int = 0

    @property
    def name(self) -> str:
        return "memory"

    async def fetch_page(self, request: PageRequest) -> Page:
        """Return the page starting at the integer offset in ``request.cursor``."""
        self.calls += 1
        try:
            offset = int(request.cursor or 0)
        except (TypeError, ValueError) as e:
            raise SourceQueryError(f"Invalid memory cursor: {request.cursor!r}") from e

        matching = [r for r in self._records if self._matches(r, request.filters)]
        size = self._page_size or request.limit
        chunk = matching[offset : offset + size]
        next_offset = offset + size

        logger.debug("Memory page at offset %d: %d of %d records", offset, len(chunk), len(matching))
        return Page(
            records=copy.deepcopy(chunk),
            next_cursor=next_offset if next_offset < len(matching) else None,
        )

    async def health_check(self) -> SourceHealth:
        return SourceHealth(
            status="healthy",
            last_check=datetime.now(UTC).isoformat(),
            message=f"{len(self._records)} records in memory",
        )

    def _matches(self, record: Record, filters: dict[str, Any]) -> bool:
        for param, expected in filters.items():
            actual = resolve_path(record, self._param_fields.get(param, param))
            if actual is MISSING:
                return False
            if isinstance(actual, list):
                if not any(_same(item, expected) for item in actual):
                    return False
            elif not _same(actual, expected):
                return False
        return True


def _same(actual: Any, expected: Any) -> bool:
    return str(actual).casefold() == str(expected).casefold()
