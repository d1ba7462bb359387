"""Client-Side Filter Engine — Applies every filter the upstream could not.

All filters are combined with logical AND.  For a single-type search,
filters the source already evaluated exactly are skipped; for multi-type
searches every filter is re-evaluated on every record.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from recordsift.core.fetcher import is_server_side
from recordsift.core.fieldpath import MISSING, is_empty_value, resolve_path
from recordsift.core.mappings import FieldMappingRegistry
from recordsift.core.patterns import Pattern
from recordsift.models.query import EMPTY_FILTER_VALUE, NormalizedSearchRequest, SearchOperator
from recordsift.models.result import Record

logger = logging.getLogger(__name__)

Predicate = Callable[[Record], bool]


def parse_date(value: Any) -> datetime | None:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _empty_predicate(field: str) -> Predicate:
    return lambda record: is_empty_value(resolve_path(record, field))


def _date_predicate(field: str, bound: datetime | None, after: bool) -> Predicate:
    def predicate(record: Record) -> bool:
        if bound is None:
            return False
        value = resolve_path(record, field)
        candidates = value if isinstance(value, list) else [value]
        for candidate in candidates:
            if candidate is MISSING:
                continue
            parsed = parse_date(candidate)
            if parsed is not None and (parsed > bound if after else parsed < bound):
                return True
        return False

    return predicate


def _pattern_predicate(field: str, pattern: Pattern) -> Predicate:
    return lambda record: pattern.test(resolve_path(record, field))


def build_predicates(
    request: NormalizedSearchRequest,
    patterns: dict[str, Pattern],
    registry: FieldMappingRegistry,
) -> dict[str, Predicate]:
    """One predicate per filter field that still needs client-side evaluation."""
    predicates: dict[str, Predicate] = {}
    single_type = None if request.is_multi_type else request.types[0]

    for field, value in request.filters.items():
        if single_type is not None and is_server_side(single_type, field, request, registry):
            logger.debug("Filter %s satisfied upstream for %s", field, single_type.value)
            continue

        operator = request.operator_for(field)
        if operator == SearchOperator.IS_EMPTY or value == EMPTY_FILTER_VALUE:
            predicates[field] = _empty_predicate(field)
        elif operator in (SearchOperator.BEFORE, SearchOperator.AFTER):
            predicates[field] = _date_predicate(field, parse_date(value), operator == SearchOperator.AFTER)
        else:
            predicates[field] = _pattern_predicate(field, patterns[field])

    return predicates


def filter_records(
    records: list[Record],
    request: NormalizedSearchRequest,
    patterns: dict[str, Pattern],
    registry: FieldMappingRegistry,
) -> list[Record]:
    """Keep the records that satisfy every remaining filter, preserving order.

    Args:
        records: Aggregated records.
        request: The validated request.
        patterns: Compiled patterns keyed by filter field.
        registry: Field mappings, used to detect server-side filters.
    """
    predicates = build_predicates(request, patterns, registry)
    if not predicates:
        return list(records)

    checks = list(predicates.values())
    kept = [record for record in records if all(check(record) for check in checks)]
    logger.debug("Client-side filters %s kept %d of %d records", list(predicates), len(kept), len(records))
    return kept
