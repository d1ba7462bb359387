"""Message/Hint Generator — Human-readable summaries for search responses.

Both entry points are pure: they read a :class:`SearchContext` and return
text, with no I/O and no state carried between calls.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from recordsift.core.mappings import FieldMappingRegistry
from recordsift.models.collection import CollectionType
from recordsift.models.query import EMPTY_FILTER_VALUE, OutputMode, SearchOperator

MAX_NO_RESULT_HINTS = 3
LARGE_FULL_OUTPUT = 20
SLOW_QUERY_MS = 5000
COMPLEX_FILTER_COUNT = 5
RESTRICTIVE_FILTER_COUNT = 3

# Rough size of one record in response units (~4 characters each), full output.
_UNITS_PER_RECORD: dict[CollectionType, int] = {
    CollectionType.FEATURES: 300,
    CollectionType.NOTES: 400,
    CollectionType.COMPANIES: 200,
    CollectionType.USERS: 150,
    CollectionType.RELEASES: 250,
}
_DEFAULT_UNITS = 200
_METADATA_UNITS = 200
LARGE_RESPONSE_UNITS = 50_000
SIGNIFICANT_RESPONSE_UNITS = 20_000


class SearchContext(BaseModel):
    """Everything the generator needs to describe one search."""

    types: list[CollectionType]
    filters: dict[str, Any] = Field(default_factory=dict)
    operators: dict[str, SearchOperator] = Field(default_factory=dict)
    output: OutputMode | list[str] = OutputMode.FULL
    total_records: int = 0
    returned_records: int = 0
    offset: int = 0
    has_more: bool = False
    warnings: list[str] = Field(default_factory=list)
    query_time_ms: int = 0

    @property
    def is_multi_type(self) -> bool:
        return len(self.types) > 1

    @property
    def type_label(self) -> str:
        return ", ".join(t.value for t in self.types)

    @property
    def next_offset(self) -> int:
        return self.offset + self.returned_records


class SearchMessageGenerator:
    """Builds the ``message`` and ``hints`` of a search response."""

    def __init__(self, registry: FieldMappingRegistry | None = None) -> None:
        self.registry = registry or FieldMappingRegistry()

    # ── Message ──────────────────────────────────────────────────────────

    def generate_message(self, context: SearchContext) -> str:
        parts = [self._summary(context)]
        if context.filters:
            parts.append(self._filter_description(context))
        if context.warnings:
            parts.append(self._warnings(context))
        if context.has_more:
            parts.append(f"Use offset={context.next_offset} to get the next batch")
        return ". ".join(parts)

    @staticmethod
    def _summary(context: SearchContext) -> str:
        label = context.type_label
        if context.total_records == 0:
            return f"No {label} found matching the search criteria"

        found = (
            f"Found {context.total_records} items across {label}"
            if context.is_multi_type
            else f"Found {context.total_records} {label}"
        )
        if context.returned_records == context.total_records:
            return found
        return f"{found}, returning {context.returned_records} from offset {context.offset}"

    def _filter_description(self, context: SearchContext) -> str:
        descriptions = [
            self.describe_filter(field, value, context.operators.get(field, SearchOperator.EQUALS), context)
            for field, value in context.filters.items()
        ]
        return "Filtered by: " + ", ".join(descriptions)

    def describe_filter(self, field: str, value: Any, operator: SearchOperator, context: SearchContext) -> str:
        """Describe one filter, e.g. ``status = "Done"`` or ``missing title``."""
        name = self._display_name(field, context)

        if operator == SearchOperator.IS_EMPTY or value in (None, EMPTY_FILTER_VALUE):
            return f"missing {name}"
        if isinstance(value, bool):
            return f"{name} = {'true' if value else 'false'}"
        if isinstance(value, list):
            if len(value) == 1:
                return f'{name} = "{value[0]}"'
            return f"{name} in [{', '.join(str(v) for v in value)}]"

        if operator == SearchOperator.CONTAINS:
            return f'{name} contains "{value}"'
        if operator == SearchOperator.STARTS_WITH:
            return f'{name} starts with "{value}"'
        if operator == SearchOperator.ENDS_WITH:
            return f'{name} ends with "{value}"'
        if operator in (SearchOperator.BEFORE, SearchOperator.AFTER):
            return f"{name} {operator.value} {value}"
        if operator == SearchOperator.EQUALS:
            return f'{name} = "{value}"'
        return f'{name} {operator.value} "{value}"'

    @staticmethod
    def _warnings(context: SearchContext) -> str:
        notes = [w[:1].upper() + w[1:] for w in context.warnings]
        if len(notes) == 1:
            return f"Note: {notes[0]}"
        return "Notes: " + "; ".join(notes)

    def _display_name(self, field: str, context: SearchContext) -> str:
        if context.is_multi_type:
            return field
        return self.registry.display_name(context.types[0], field)

    # ── Hints ────────────────────────────────────────────────────────────

    def generate_hints(self, context: SearchContext) -> list[str]:
        hints: list[str] = []

        if context.returned_records > LARGE_FULL_OUTPUT and context.output == OutputMode.FULL:
            hints.append(
                "Consider using the output parameter to select only needed fields "
                '(e.g. output: ["id", "name"])'
            )

        units = self.estimate_units(context)
        if units > LARGE_RESPONSE_UNITS:
            hints.append(
                f"Large response (~{round(units / 1000)}k units); use output field selection "
                "or pagination to reduce size"
            )
        elif units > SIGNIFICANT_RESPONSE_UNITS:
            hints.append(f"Response size is significant (~{round(units / 1000)}k units); consider field selection")

        if context.query_time_ms > SLOW_QUERY_MS:
            hints.append(
                f"Query took {context.query_time_ms}ms; consider adding more specific filters or using pagination"
            )

        if context.total_records == 0:
            hints.extend(self._no_result_hints(context))

        if len(context.filters) > COMPLEX_FILTER_COUNT:
            hints.append("Complex filter combination detected; if results are unexpected, try simplifying filters")

        return hints

    def _no_result_hints(self, context: SearchContext) -> list[str]:
        suggestions: list[str] = []

        for field, value in context.filters.items():
            if value in (None, EMPTY_FILTER_VALUE):
                suggestions.append(
                    f'Remove the "{self._display_name(field, context)}" filter to see all {context.type_label}'
                )

        if len(context.filters) > RESTRICTIVE_FILTER_COUNT:
            suggestions.append("Try removing some filters to broaden the search scope")

        if not context.is_multi_type:
            suggestions.extend(self._type_suggestions(context.types[0], context.filters))

        if not suggestions:
            suggestions.append(
                f"Try broader search criteria or check that {context.type_label} exist in your workspace"
            )
        return suggestions[:MAX_NO_RESULT_HINTS]

    @staticmethod
    def _type_suggestions(collection_type: CollectionType, filters: dict[str, Any]) -> list[str]:
        suggestions: list[str] = []
        if collection_type == CollectionType.FEATURES:
            suggestions.append('Try searching without the "archived" filter to include archived features')
            if filters.get("status.name"):
                suggestions.append(f'Check that the status "{filters["status.name"]}" exists in your workspace')
        elif collection_type == CollectionType.NOTES:
            if filters.get("company.domain"):
                suggestions.append("Try searching by company name instead of domain")
        elif collection_type == CollectionType.USERS:
            suggestions.append("Try searching without role filters to see all users")
        elif collection_type == CollectionType.RELEASES:
            if filters.get("state"):
                suggestions.append("Try searching without the state filter")
        return suggestions

    @staticmethod
    def estimate_units(context: SearchContext) -> int:
        """Estimate response size in units of roughly four characters."""
        if context.is_multi_type:
            per_record = _DEFAULT_UNITS
        else:
            per_record = _UNITS_PER_RECORD.get(context.types[0], _DEFAULT_UNITS)

        if context.output == OutputMode.IDS_ONLY:
            per_record = 10
        elif context.output == OutputMode.SUMMARY:
            per_record = int(per_record * 0.3)
        elif isinstance(context.output, list):
            per_record = min(per_record, len(context.output) * 15)

        return context.returned_records * per_record + _METADATA_UNITS
