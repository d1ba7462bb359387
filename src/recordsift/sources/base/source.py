"""Base collection source — Abstract interface for paged list collaborators.

Every collection type is backed by a source that can return one page of
records at a time.  The source is responsible for:
  1. Reaching its backing system (HTTP, database, memory, ...)
  2. Applying the server-side filter params it is given
  3. Returning one page per call, with a cursor when more pages exist
  4. Reporting health status

A page may be returned as a :class:`Page`, a bare list of records
(terminal), an envelope dict (``{"data": [...], "links": {"next": ...}}``
or ``{"records": [...], "next": ...}``), or a single record dict
(a one-record terminal page).  The fetcher normalizes all of these.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from recordsift.models.result import Page, PageRequest


class SourceHealth(BaseModel):
    """Health status of a collection source."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    message: str | None = Field(default=None, description="Additional health message")


class CollectionSource(ABC):
    """Abstract base class for collection sources.

    All sources must implement:
      - fetch_page(): Return one page of records
      - health_check(): Report source health

    Sources hold no per-search state; the cursor travels in the
    :class:`PageRequest`, so one source instance can serve concurrent searches.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Source kind (e.g., 'http', 'memory')."""

    async def initialize(self) -> None:
        """Open connections; called once before the source is used."""

    async def shutdown(self) -> None:
        """Release connections; called once on application shutdown."""

    @abstractmethod
    async def fetch_page(self, request: PageRequest) -> Page | list[Any] | dict[str, Any]:
        """Fetch one page.

        Args:
            request: Page size, cursor (``None`` for the first page), and
                server-side filter params keyed by upstream parameter name.

        Returns:
            One page in any of the supported shapes.

        Raises:
            SourceError: If the backing system cannot be reached or rejects the query.
        """

    @abstractmethod
    async def health_check(self) -> SourceHealth:
        """Check the health of the backing system."""
