"""Multi-Type Orchestrator — Runs one fetch loop per requested type.

Loops run concurrently as independent tasks and are joined before the
results are merged.  Each record is copied and tagged with
:data:`~recordsift.models.collection.ORIGIN_FIELD`, so the caller's
records and the sources' records are never mutated.

A single failing loop cancels its siblings and fails the whole search
with :class:`~recordsift.core.exceptions.CollectionFetchError`; partial
results are never returned.
"""

from __future__ import annotations

import asyncio
import logging

from recordsift.core.exceptions import CollectionFetchError
from recordsift.core.fetcher import PaginationFetcher
from recordsift.models.collection import ORIGIN_FIELD, CollectionType
from recordsift.models.query import NormalizedSearchRequest
from recordsift.models.result import AggregatedResult, PerTypeResult
from recordsift.sources.base.exceptions import SourceNotFoundError

logger = logging.getLogger(__name__)


class MultiTypeOrchestrator:
    """Fans a request out over its collection types and merges the results."""

    def __init__(self, fetcher: PaginationFetcher) -> None:
        self.fetcher = fetcher

    async def run(self, request: NormalizedSearchRequest) -> AggregatedResult:
        """Fetch every requested type and aggregate in request order.

        Raises:
            CollectionFetchError: If any type's fetch loop fails.
        """
        tasks = [asyncio.ensure_future(self._fetch_one(t, request)) for t in request.types]
        try:
            results: list[PerTypeResult] = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return self._merge(results)

    async def _fetch_one(self, collection_type: CollectionType, request: NormalizedSearchRequest) -> PerTypeResult:
        try:
            return await self.fetcher.fetch(collection_type, request)
        except asyncio.CancelledError:
            raise
        except SourceNotFoundError as e:
            logger.error("No source for %s: %s", collection_type.value, e)
            raise CollectionFetchError(collection_type.value, str(e)) from e
        except Exception as e:
            logger.error("Fetch loop for %s failed: %s", collection_type.value, e, exc_info=True)
            raise CollectionFetchError(collection_type.value, str(e) or type(e).__name__) from e

    @staticmethod
    def _merge(results: list[PerTypeResult]) -> AggregatedResult:
        records: list[dict] = []
        warnings: dict[str, None] = {}
        total = 0
        has_more = False

        for result in results:
            records.extend({**record, ORIGIN_FIELD: result.collection_type.value} for record in result.records)
            total += result.total_records
            has_more = has_more or result.has_more
            for warning in result.warnings:
                warnings.setdefault(warning, None)

        logger.info(
            "Aggregated %d records from %d types (has_more=%s)",
            len(records),
            len(results),
            has_more,
        )
        return AggregatedResult(
            records=records,
            total_records=total,
            has_more=has_more,
            warnings=list(warnings),
            per_type=results,
        )
