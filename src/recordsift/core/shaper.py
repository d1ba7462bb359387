"""Output Shaper — Projects records into the requested output form."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from recordsift.core.fieldpath import MISSING, assign_path, resolve_path
from recordsift.core.mappings import FieldMappingRegistry
from recordsift.models.collection import ORIGIN_FIELD, CollectionType
from recordsift.models.query import DetailLevel, OutputMode
from recordsift.models.result import Record

OutputSpec = OutputMode | Sequence[str]


def select_fields(record: Record, fields: Sequence[str]) -> Record:
    """Nested projection of ``fields``; absent fields are omitted."""
    out: Record = {}
    for field in fields:
        value = resolve_path(record, field)
        if value is not MISSING:
            assign_path(out, field, value)
    if ORIGIN_FIELD in record and ORIGIN_FIELD not in out:
        out[ORIGIN_FIELD] = record[ORIGIN_FIELD]
    return out


class OutputShaper:
    """Applies an output spec to filtered, sliced records."""

    def __init__(self, registry: FieldMappingRegistry | None = None) -> None:
        self.registry = registry or FieldMappingRegistry()

    def project(
        self,
        records: list[Record],
        collection_type: CollectionType,
        output: OutputSpec,
        detail: DetailLevel = DetailLevel.STANDARD,
    ) -> list[Any]:
        """Shape records that all belong to ``collection_type``.

        ``ids-only`` yields bare ids and so drops the origin marker;
        ``summary`` and explicit field lists keep it.  ``detail`` only affects
        ``full`` output: the ``basic`` level narrows it to the summary fields.
        """
        if output == OutputMode.FULL:
            if detail == DetailLevel.BASIC:
                return self.project(records, collection_type, OutputMode.SUMMARY)
            return list(records)
        if output == OutputMode.IDS_ONLY:
            return [record.get("id") for record in records]
        if output == OutputMode.SUMMARY:
            fields = self.registry.summary_fields(collection_type)
            return [select_fields(record, fields) for record in records]
        return [select_fields(record, list(output)) for record in records]

    def project_many(
        self,
        records: list[Record],
        types: Sequence[CollectionType],
        output: OutputSpec,
        detail: DetailLevel = DetailLevel.STANDARD,
    ) -> list[Any]:
        """Shape records of mixed types, using each record's origin marker."""
        per_type = output == OutputMode.SUMMARY or (output == OutputMode.FULL and detail == DetailLevel.BASIC)
        if not per_type:
            return self.project(records, types[0], output)

        shaped: list[Any] = []
        for record in records:
            collection_type = CollectionType.parse(record.get(ORIGIN_FIELD, "")) or types[0]
            shaped.extend(self.project([record], collection_type, output, detail))
        return shaped
