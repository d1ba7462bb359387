"""Field Mapping Registry — Static per-type search metadata.

For each :class:`CollectionType` the registry records which fields can be
searched, which of those the upstream list operation can filter on itself,
how those filter fields are named as upstream query parameters, and which
fields make up the curated ``summary`` output.

The paged list operation for a type is resolved through
:class:`~recordsift.sources.base.registry.SourceRegistry`, keyed by the same
``CollectionType``; ``endpoint`` is the default path used when a source is
built from configuration.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field

from recordsift.core.fieldpath import path_in
from recordsift.models.collection import CollectionType


class FieldMapping(BaseModel):
    """Search metadata for one collection type."""

    model_config = {"frozen": True}

    searchable_fields: tuple[str, ...] = Field(description="Dot paths that may be filtered on or projected")
    server_side_fields: frozenset[str] = Field(
        default=frozenset(),
        description="Subset of searchable fields the upstream list operation can filter on",
    )
    filter_param_aliases: dict[str, str] = Field(
        default_factory=dict,
        description="Filter field -> upstream query parameter name (identity when absent)",
    )
    summary_fields: tuple[str, ...] = Field(description="Curated fields for summary output")
    display_names: dict[str, str] = Field(default_factory=dict, description="Human-readable field names")
    endpoint: str = Field(description="Default upstream list path")


_TIMEFRAME = ("timeframe.startDate", "timeframe.endDate", "timeframe.granularity")
_AUDIT = ("createdAt", "updatedAt")

FIELD_MAPPINGS: dict[CollectionType, FieldMapping] = {
    CollectionType.FEATURES: FieldMapping(
        searchable_fields=(
            "id", "name", "description", "type", "archived",
            "status.id", "status.name", "owner.email",
            "parent.id", "parent.feature.id", "parent.component.id", "parent.product.id",
            *_TIMEFRAME, *_AUDIT, "links.html",
        ),
        server_side_fields=frozenset({"archived", "owner.email", "status.id", "status.name"}),
        summary_fields=("id", "name", "status.name", "owner.email"),
        display_names={"status.name": "status", "owner.email": "owner email", "archived": "archived state"},
        endpoint="/features",
    ),
    CollectionType.NOTES: FieldMapping(
        searchable_fields=(
            "id", "title", "content", "state", "tags", "displayUrl", "externalDisplayUrl",
            "company.id", "company.domain", "user.email", "owner.email", "source.origin",
            "followers", *_AUDIT,
        ),
        server_side_fields=frozenset({"company.id", "owner.email", "tags"}),
        filter_param_aliases={"company.id": "companyId", "owner.email": "ownerEmail", "tags": "anyTag"},
        summary_fields=("id", "title", "state", "company.id"),
        display_names={"company.domain": "company domain", "owner.email": "owner email"},
        endpoint="/notes",
    ),
    CollectionType.COMPANIES: FieldMapping(
        searchable_fields=("id", "name", "domain", "description", "sourceOrigin", "sourceRecordId", *_AUDIT),
        summary_fields=("id", "name", "domain"),
        endpoint="/companies",
    ),
    CollectionType.USERS: FieldMapping(
        searchable_fields=("id", "name", "email", "role", "externalId", "company.id", *_AUDIT),
        summary_fields=("id", "name", "email", "role"),
        display_names={"company.id": "company"},
        endpoint="/users",
    ),
    CollectionType.PRODUCTS: FieldMapping(
        searchable_fields=("id", "name", "description", "owner.email", "links.html", *_AUDIT),
        summary_fields=("id", "name", "owner.email"),
        endpoint="/products",
    ),
    CollectionType.COMPONENTS: FieldMapping(
        searchable_fields=(
            "id", "name", "description", "owner.email",
            "parent.product.id", "parent.component.id", "links.html", *_AUDIT,
        ),
        summary_fields=("id", "name", "parent.product.id", "owner.email"),
        endpoint="/components",
    ),
    CollectionType.RELEASES: FieldMapping(
        searchable_fields=("id", "name", "description", "state", "archived", "releaseGroup.id", *_TIMEFRAME),
        server_side_fields=frozenset({"releaseGroup.id"}),
        filter_param_aliases={"releaseGroup.id": "releaseGroup.id"},
        summary_fields=("id", "name", "state", "releaseGroup.id"),
        display_names={"releaseGroup.id": "release group"},
        endpoint="/releases",
    ),
    CollectionType.RELEASE_GROUPS: FieldMapping(
        searchable_fields=("id", "name", "description", "isDefault", "archived"),
        summary_fields=("id", "name", "isDefault"),
        endpoint="/release-groups",
    ),
    CollectionType.OBJECTIVES: FieldMapping(
        searchable_fields=(
            "id", "name", "description", "state", "level", "owner.email", "parent.id", *_TIMEFRAME, *_AUDIT,
        ),
        server_side_fields=frozenset({"state", "owner.email"}),
        filter_param_aliases={"owner.email": "owner.email"},
        summary_fields=("id", "name", "state", "owner.email"),
        endpoint="/objectives",
    ),
    CollectionType.INITIATIVES: FieldMapping(
        searchable_fields=("id", "name", "description", "state", "owner.email", *_TIMEFRAME, *_AUDIT),
        server_side_fields=frozenset({"state", "owner.email"}),
        summary_fields=("id", "name", "state", "owner.email"),
        endpoint="/initiatives",
    ),
    CollectionType.KEY_RESULTS: FieldMapping(
        searchable_fields=(
            "id", "name", "description", "objective.id", "owner.email",
            "startValue", "currentValue", "targetValue", *_TIMEFRAME,
        ),
        server_side_fields=frozenset({"objective.id"}),
        filter_param_aliases={"objective.id": "parent.id"},
        summary_fields=("id", "name", "currentValue", "objective.id"),
        endpoint="/key-results",
    ),
    CollectionType.CUSTOM_FIELDS: FieldMapping(
        searchable_fields=("id", "name", "type", "description"),
        server_side_fields=frozenset({"type"}),
        summary_fields=("id", "name", "type"),
        endpoint="/hierarchy-entities/custom-fields",
    ),
    CollectionType.WEBHOOKS: FieldMapping(
        searchable_fields=("id", "eventType", "notification.url", "notification.version", "links.self", "createdAt"),
        summary_fields=("id", "eventType", "notification.url"),
        display_names={"eventType": "event type", "notification.url": "notification URL"},
        endpoint="/webhooks",
    ),
    CollectionType.PLUGIN_INTEGRATIONS: FieldMapping(
        searchable_fields=("id", "name", "type", "integrationStatus", "initialState.label", "action.url", "createdAt"),
        summary_fields=("id", "name", "integrationStatus"),
        endpoint="/plugin-integrations",
    ),
    CollectionType.JIRA_INTEGRATIONS: FieldMapping(
        searchable_fields=("id", "name", "connection.projectKey", "connection.issueTypeId", "links.self", "createdAt"),
        summary_fields=("id", "name", "connection.projectKey"),
        endpoint="/jira-integrations",
    ),
}


class FieldMappingRegistry:
    """Read-only lookups over :data:`FIELD_MAPPINGS`."""

    def __init__(self, mappings: dict[CollectionType, FieldMapping] | None = None) -> None:
        self._mappings = mappings if mappings is not None else FIELD_MAPPINGS

    def __contains__(self, collection_type: object) -> bool:
        return collection_type in self._mappings

    @property
    def types(self) -> list[CollectionType]:
        return list(self._mappings)

    def get(self, collection_type: CollectionType) -> FieldMapping:
        return self._mappings[collection_type]

    def is_searchable(self, collection_type: CollectionType, field: str) -> bool:
        mapping = self._mappings.get(collection_type)
        if mapping is None:
            return False
        return path_in(field, mapping.searchable_fields)

    def searchable_in(self, types: Iterable[CollectionType], field: str) -> list[CollectionType]:
        """The subset of ``types`` in which ``field`` is searchable, in the given order."""
        return [t for t in types if self.is_searchable(t, field)]

    def can_filter_server_side(self, collection_type: CollectionType, field: str) -> bool:
        mapping = self._mappings.get(collection_type)
        return mapping is not None and field in mapping.server_side_fields

    def server_param(self, collection_type: CollectionType, field: str) -> str:
        """Upstream query parameter name for a server-side filter field."""
        return self._mappings[collection_type].filter_param_aliases.get(field, field)

    def summary_fields(self, collection_type: CollectionType) -> tuple[str, ...]:
        return self._mappings[collection_type].summary_fields

    def display_name(self, collection_type: CollectionType, field: str) -> str:
        """Human-readable field name, falling back to a de-camel-cased path."""
        mapping = self._mappings.get(collection_type)
        if mapping and field in mapping.display_names:
            return mapping.display_names[field]
        return _humanize(field)

    def fields_for(self, types: Iterable[CollectionType]) -> list[str]:
        """Union of searchable fields across ``types``, first-seen order."""
        seen: dict[str, None] = {}
        for t in types:
            for field in self._mappings[t].searchable_fields:
                seen.setdefault(field, None)
        return list(seen)


def _humanize(field: str) -> str:
    out: list[str] = []
    for ch in field:
        if ch.isupper():
            out.append(" " + ch.lower())
        elif ch == ".":
            out.append(" ")
        else:
            out.append(ch)
    return "".join(out).strip()
