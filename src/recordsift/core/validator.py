"""Search Validator — Normalizes a raw search request against the field registry.

Rules are applied in order; the first hard failure raises a
:class:`SearchValidationError` tagged with the offending field, while softer
problems accumulate as warnings on the normalized request.
"""

from __future__ import annotations

import difflib
import logging
from typing import Any

from recordsift.core.exceptions import SearchValidationError
from recordsift.core.mappings import FieldMappingRegistry
from recordsift.models.collection import ORIGIN_FIELD, CollectionType
from recordsift.models.query import (
    EMPTY_FILTER_VALUE,
    DetailLevel,
    NormalizedSearchRequest,
    OutputMode,
    SearchOperator,
    SearchRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MIN_LIMIT = 1
MAX_LIMIT = 100

VALID_OPERATORS = [op.value for op in SearchOperator]

_OPERATOR_WARNINGS: dict[SearchOperator, str] = {
    SearchOperator.IS_EMPTY: 'Using "isEmpty" operator for field "{field}" - filter value will be ignored',
    SearchOperator.REGEX: 'Using "regex" operator for field "{field}" - value is matched as a regular expression',
    SearchOperator.WILDCARD: (
        'Using "wildcard" operator for field "{field}" - "*" matches any characters, "?" matches one character'
    ),
}


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return min(max(limit, MIN_LIMIT), MAX_LIMIT)


def floor_offset(offset: int | None) -> int:
    return max(offset or 0, 0)


class SearchValidator:
    """Validates and normalizes :class:`SearchRequest` objects.

    Args:
        registry: Field mapping registry used for searchability checks.
    """

    def __init__(self, registry: FieldMappingRegistry | None = None) -> None:
        self.registry = registry or FieldMappingRegistry()

    def validate(self, request: SearchRequest) -> NormalizedSearchRequest:
        """Validate ``request`` and apply defaults.

        Raises:
            SearchValidationError: On an unknown type, an unsearchable filter
                field, an unknown operator, or an unavailable output field.
        """
        warnings: list[str] = []

        types = self._validate_types(request.types)

        output: OutputMode | list[str]
        if request.output is None:
            output = OutputMode.FULL
        elif isinstance(request.output, list):
            output = list(request.output)
        else:
            output = self._parse_output_mode(request.output)
        detail = request.detail or DetailLevel.STANDARD

        filters = self._validate_filters(types, request.filters, warnings, request)
        operators = self._validate_operators(filters, request.operators, warnings)

        if isinstance(output, list):
            self._validate_output_fields(types, output, warnings)

        if output != OutputMode.FULL and detail != DetailLevel.STANDARD:
            warnings.append(
                f'output parameter overrides detail level "{detail.value}" - '
                "exact fields and order determined by output specification"
            )

        return NormalizedSearchRequest(
            types=types,
            filters=filters,
            operators=operators,
            output=output,
            limit=clamp_limit(request.limit),
            offset=floor_offset(request.offset),
            detail=detail,
            include_sub_data=request.include_sub_data,
            include_custom_fields=request.include_custom_fields,
            pattern_mode=request.pattern_mode,
            case_sensitive=request.case_sensitive,
            warnings=list(dict.fromkeys(warnings)),
        )

    # ── Rules ────────────────────────────────────────────────────────────

    def _validate_types(self, raw: str | list[str]) -> list[CollectionType]:
        names = raw if isinstance(raw, list) else [raw]
        if not names:
            raise SearchValidationError("At least one collection type is required", field="types")

        types: list[CollectionType] = []
        for name in names:
            parsed = CollectionType.parse(name)
            if parsed is None or parsed not in self.registry:
                raise SearchValidationError(
                    f"Unsupported collection type: {name}. "
                    f"Supported types: {', '.join(t.value for t in self.registry.types)}",
                    field="types",
                )
            if parsed not in types:
                types.append(parsed)
        return types

    @staticmethod
    def _parse_output_mode(raw: str) -> OutputMode:
        try:
            return OutputMode(raw)
        except ValueError:
            raise SearchValidationError(
                f"Invalid output mode: {raw}. Use one of {', '.join(m.value for m in OutputMode)} "
                "or a list of field paths",
                field="output",
            ) from None

    def _validate_filters(
        self,
        types: list[CollectionType],
        filters: dict[str, Any],
        warnings: list[str],
        request: SearchRequest,
    ) -> dict[str, Any]:
        normalized: dict[str, Any] = {}
        errors: list[str] = []

        for field, value in filters.items():
            applicable = self.registry.searchable_in(types, field)
            if not applicable:
                message = f'Field "{field}" is not searchable in any of the specified collection types'
                if request.suggest_alternatives and request.max_suggestions:
                    suggestions = self.suggest_fields(field, types, request.max_suggestions)
                    if suggestions:
                        message += f" (did you mean: {', '.join(suggestions)}?)"
                errors.append(message)
                continue

            if len(applicable) < len(types):
                warnings.append(f'Field "{field}" is only searchable in: {", ".join(t.value for t in applicable)}')

            if value is None or value == EMPTY_FILTER_VALUE:
                warnings.append(f'Searching for empty/missing values in field "{field}"')
                normalized[field] = EMPTY_FILTER_VALUE
            else:
                normalized[field] = value

        if errors:
            raise SearchValidationError(f"Invalid filters: {'; '.join(errors)}", field="filters")
        return normalized

    @staticmethod
    def _validate_operators(
        filters: dict[str, Any],
        operators: dict[str, str],
        warnings: list[str],
    ) -> dict[str, SearchOperator]:
        validated: dict[str, SearchOperator] = {}
        errors: list[str] = []

        for field, raw in operators.items():
            try:
                operator = SearchOperator(raw)
            except ValueError:
                errors.append(
                    f'Invalid operator "{raw}" for field "{field}". Valid operators: {", ".join(VALID_OPERATORS)}'
                )
                continue

            if field not in filters:
                errors.append(f'Operator "{raw}" declared for field "{field}" which has no filter value')
                continue

            if operator in _OPERATOR_WARNINGS:
                warnings.append(_OPERATOR_WARNINGS[operator].format(field=field))
            validated[field] = operator

        if errors:
            raise SearchValidationError(f"Invalid operators: {'; '.join(errors)}", field="operators")
        return validated

    def _validate_output_fields(
        self,
        types: list[CollectionType],
        fields: list[str],
        warnings: list[str],
    ) -> None:
        errors: list[str] = []
        for field in fields:
            if field == ORIGIN_FIELD:
                continue
            available = self.registry.searchable_in(types, field)
            if not available:
                errors.append(f'Output field "{field}" is not available in any of the specified collection types')
            elif len(available) < len(types):
                warnings.append(f'Output field "{field}" is only available in: {", ".join(t.value for t in available)}')

        if errors:
            raise SearchValidationError(f"Invalid output fields: {'; '.join(errors)}", field="output")

    # ── Suggestions ──────────────────────────────────────────────────────

    def suggest_fields(self, field: str, types: list[CollectionType], limit: int = 3) -> list[str]:
        """Close matches for a mistyped field among the searchable fields of ``types``."""
        candidates = self.registry.fields_for(types)
        return difflib.get_close_matches(field, candidates, n=limit, cutoff=0.6)
