"""Collection types — The closed set of remote record families RecordSift can search."""

from __future__ import annotations

from enum import Enum


class CollectionType(str, Enum):
    """A remote record family exposed through a paged list operation."""

    FEATURES = "features"
    NOTES = "notes"
    COMPANIES = "companies"
    USERS = "users"
    PRODUCTS = "products"
    COMPONENTS = "components"
    RELEASES = "releases"
    RELEASE_GROUPS = "release_groups"
    OBJECTIVES = "objectives"
    INITIATIVES = "initiatives"
    KEY_RESULTS = "key_results"
    CUSTOM_FIELDS = "custom_fields"
    WEBHOOKS = "webhooks"
    PLUGIN_INTEGRATIONS = "plugin_integrations"
    JIRA_INTEGRATIONS = "jira_integrations"

    @classmethod
    def values(cls) -> list[str]:
        """All valid type names, in declaration order."""
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: str | CollectionType) -> CollectionType | None:
        """Return the matching member, or ``None`` if ``value`` is not a known type."""
        try:
            return cls(value)
        except ValueError:
            return None


# Reserved key added to every aggregated record, naming the type it came from.
ORIGIN_FIELD = "_collection_type"
