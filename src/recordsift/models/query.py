"""Search request models — Raw caller input and its validated, defaulted form."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from recordsift.models.collection import CollectionType

# Canonical value every empty filter value (None, "") collapses to.
EMPTY_FILTER_VALUE = ""


class SearchOperator(str, Enum):
    """Match operator applied to one filter field."""

    EQUALS = "equals"
    CONTAINS = "contains"
    IS_EMPTY = "isEmpty"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    BEFORE = "before"
    AFTER = "after"
    REGEX = "regex"
    WILDCARD = "wildcard"


class PatternMode(str, Enum):
    """How filter values are compiled into match patterns."""

    EXACT = "exact"
    WILDCARD = "wildcard"
    REGEX = "regex"


class OutputMode(str, Enum):
    """Preset output shapes."""

    IDS_ONLY = "ids-only"
    SUMMARY = "summary"
    FULL = "full"


class DetailLevel(str, Enum):
    """Coarse verbosity preset forwarded to collection sources."""

    BASIC = "basic"
    STANDARD = "standard"
    FULL = "full"


class SearchRequest(BaseModel):
    """A raw search request.

    ``types``, ``operators`` and the ``output`` field list are deliberately
    loose here: the :class:`~recordsift.core.validator.SearchValidator` checks
    them against the field mapping registry and reports failures tagged with
    the offending field name.
    """

    types: str | list[str] = Field(description="Collection type or ordered list of collection types to search")
    filters: dict[str, Any] = Field(default_factory=dict, description="Field filters keyed by dot path")
    operators: dict[str, str] = Field(default_factory=dict, description="Match operator per filter field")
    output: str | list[str] | None = Field(
        default=None,
        description="'ids-only', 'summary', 'full', or an explicit list of dot-path fields",
    )
    limit: int | None = Field(default=None, description="Maximum records to return (clamped to 1-100)")
    offset: int | None = Field(default=None, description="Number of matching records to skip")
    detail: DetailLevel | None = Field(default=None, description="Detail level when no output is given")
    include_sub_data: bool = Field(default=False, description="Ask sources for nested relationship data")
    include_custom_fields: bool = Field(default=False, description="Ask sources for custom field values")
    pattern_mode: PatternMode = Field(default=PatternMode.WILDCARD, description="Pattern compilation mode")
    case_sensitive: bool = Field(default=False, description="Case-sensitive pattern matching")
    suggest_alternatives: bool = Field(
        default=True,
        description="Include close field-name matches in validation errors",
    )
    max_suggestions: int = Field(default=3, ge=0, le=10, description="Maximum field-name suggestions")

    @field_validator("output", mode="before")
    @classmethod
    def _parse_output(cls, v: Any) -> Any:
        """Decode a JSON-encoded field list such as ``'["id", "name"]'``."""
        if isinstance(v, str) and v.startswith("[") and v.endswith("]"):
            try:
                parsed = json.loads(v)
            except json.JSONDecodeError:
                return v
            if isinstance(parsed, list):
                return [str(f) for f in parsed]
        return v


class NormalizedSearchRequest(BaseModel):
    """A validated search request with every default applied."""

    types: list[CollectionType] = Field(min_length=1, description="Requested types in caller order")
    filters: dict[str, Any] = Field(default_factory=dict, description="Normalized filter values")
    operators: dict[str, SearchOperator] = Field(default_factory=dict, description="Validated operators")
    output: OutputMode | list[str] = Field(default=OutputMode.FULL, description="Resolved output spec")
    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    detail: DetailLevel = Field(default=DetailLevel.STANDARD)
    include_sub_data: bool = False
    include_custom_fields: bool = False
    pattern_mode: PatternMode = PatternMode.WILDCARD
    case_sensitive: bool = False
    warnings: list[str] = Field(default_factory=list, description="Advisory validation warnings")

    @property
    def is_multi_type(self) -> bool:
        return len(self.types) > 1

    def operator_for(self, field: str) -> SearchOperator:
        """Operator declared for ``field``; ``equals`` when none was given."""
        return self.operators.get(field, SearchOperator.EQUALS)
