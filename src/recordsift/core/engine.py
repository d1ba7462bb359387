"""RecordSift Engine — Runs a search request through the full pipeline.

The engine manages the request lifecycle:
  1. Validation: normalize and check the request against the field mappings
  2. Pattern compilation: compile every filter value once, rejecting
     over-complex patterns before anything is fetched
  3. Fetching: walk every requested type's pages concurrently
  4. Filtering: apply the filters the upstream could not evaluate
  5. Slicing: apply ``offset`` / ``limit`` to the matching records
  6. Shaping: project records into the requested output form
  7. Response assembly: message, hints, pagination, and pattern info

Nothing is cached; every structure is created per request.
"""

from __future__ import annotations

import logging
import math
import time
from typing import TYPE_CHECKING

from recordsift.core.fetcher import PaginationFetcher
from recordsift.core.filters import filter_records
from recordsift.core.mappings import FieldMappingRegistry
from recordsift.core.messaging import SearchContext, SearchMessageGenerator
from recordsift.core.orchestrator import MultiTypeOrchestrator
from recordsift.core.patterns import Pattern, compile_request_patterns, complexity_score, is_literal
from recordsift.core.shaper import OutputShaper
from recordsift.core.validator import SearchValidator
from recordsift.models.query import NormalizedSearchRequest, OutputMode, PatternMode, SearchRequest
from recordsift.models.response import PaginationInfo, PatternInfo, SearchCriteria, SearchResponse
from recordsift.sources.base.registry import SourceRegistry

if TYPE_CHECKING:
    from recordsift.config.settings import Settings

logger = logging.getLogger(__name__)


class SearchEngine:
    """Multi-collection search over paged list sources.

    Pipeline:
      SearchRequest → [Validator] → NormalizedSearchRequest
                    → [Patterns] → compiled patterns
                    → [Orchestrator ⇉ Fetcher per type] → aggregated records
                    → [Filters] → matching records
                    → slice → [Shaper] → [Messages] → SearchResponse

    Attributes:
        settings: Application configuration.
        mappings: Field mapping registry.
        sources: Registry of collection sources.
    """

    def __init__(
        self,
        settings: Settings,
        mappings: FieldMappingRegistry | None = None,
        sources: SourceRegistry | None = None,
    ) -> None:
        self.settings = settings
        self.mappings = mappings or FieldMappingRegistry()
        self.sources = sources if sources is not None else SourceRegistry()
        self.validator = SearchValidator(self.mappings)
        self.fetcher = PaginationFetcher(
            self.mappings,
            self.sources,
            max_pages=settings.search.max_pages,
            page_size=settings.search.page_size,
        )
        self.orchestrator = MultiTypeOrchestrator(self.fetcher)
        self.shaper = OutputShaper(self.mappings)
        self.messages = SearchMessageGenerator(self.mappings)

    async def initialize(self) -> None:
        """Initialize every registered source."""
        await self.sources.initialize_all()
        logger.info(
            "RecordSift engine initialized with sources for: %s",
            ", ".join(t.value for t in self.sources.registered_types) or "(none)",
        )

    async def shutdown(self) -> None:
        """Gracefully shut down all sources."""
        await self.sources.shutdown_all()
        logger.info("RecordSift engine shut down")

    async def search(self, request: SearchRequest) -> SearchResponse:
        """Execute a search.

        Args:
            request: The incoming search request.

        Returns:
            The shaped records plus counts, warnings, hints and a message.

        Raises:
            SearchValidationError: If the request is invalid or a pattern is
                too complex; nothing has been fetched at that point.
            CollectionFetchError: If fetching any requested type fails.
        """
        start_time = time.monotonic()

        # ── Stage 1: Validate ──
        normalized = self.validator.validate(request)
        logger.info(
            "Stage 1: Validated search over %s with %d filters",
            [t.value for t in normalized.types],
            len(normalized.filters),
        )

        # ── Stage 2: Compile patterns ──
        patterns, pattern_warnings = compile_request_patterns(normalized)

        # ── Stage 3: Fetch ──
        aggregated = await self.orchestrator.run(normalized)
        logger.info("Stage 3: Fetched %d records", len(aggregated.records))

        # ── Stage 4: Filter ──
        matching = filter_records(aggregated.records, normalized, patterns, self.mappings)
        logger.info("Stage 4: %d of %d records match the filters", len(matching), len(aggregated.records))

        # ── Stage 5: Slice ──
        end = normalized.offset + normalized.limit
        page = matching[normalized.offset : end]
        has_more = aggregated.has_more or end < len(matching)

        # ── Stage 6: Shape ──
        data = self.shaper.project_many(page, normalized.types, normalized.output, normalized.detail)

        warnings = _dedupe([*normalized.warnings, *pattern_warnings, *aggregated.warnings])
        query_time_ms = int((time.monotonic() - start_time) * 1000)

        context = SearchContext(
            types=normalized.types,
            filters=normalized.filters,
            operators=normalized.operators,
            output=normalized.output,
            total_records=len(matching),
            returned_records=len(data),
            offset=normalized.offset,
            has_more=has_more,
            warnings=warnings,
            query_time_ms=query_time_ms,
        )

        logger.info(
            "Search complete: %d matching, %d returned (has_more=%s) in %d ms",
            len(matching),
            len(data),
            has_more,
            query_time_ms,
        )

        return SearchResponse(
            data=data,
            total_records=len(matching),
            returned_records=len(data),
            has_more=has_more,
            warnings=warnings,
            hints=self.messages.generate_hints(context),
            message=self.messages.generate_message(context),
            search_criteria=_criteria(normalized),
            pagination=_pagination(normalized, len(matching), len(data)) if has_more else None,
            pattern_info=_pattern_info(patterns),
            query_time_ms=query_time_ms,
        )


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _criteria(request: NormalizedSearchRequest) -> SearchCriteria:
    output = request.output.value if isinstance(request.output, OutputMode) else list(request.output)
    return SearchCriteria(
        types=[t.value for t in request.types],
        filters=request.filters,
        operators={field: op.value for field, op in request.operators.items()},
        output=output,
        detail=request.detail.value,
        limit=request.limit,
        offset=request.offset,
    )


def _pagination(request: NormalizedSearchRequest, total: int, returned: int) -> PaginationInfo:
    return PaginationInfo(
        has_next=True,
        next_offset=request.offset + returned,
        total_pages=max(1, math.ceil(total / request.limit)),
    )


def _pattern_info(patterns: dict[str, Pattern]) -> PatternInfo:
    wildcard = [f for f, p in patterns.items() if p.mode == PatternMode.WILDCARD and not is_literal(p.source, p.mode)]
    regex = [f for f, p in patterns.items() if p.mode == PatternMode.REGEX]
    return PatternInfo(
        patterns_used=bool(wildcard or regex),
        wildcard_fields=wildcard,
        regex_fields=regex,
        complexity_score=sum(complexity_score(p.source, p.mode) for p in patterns.values()),
    )
