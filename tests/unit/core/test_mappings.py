"""Tests for the field mapping registry."""

from __future__ import annotations

import pytest

from recordsift.core.mappings import FIELD_MAPPINGS, FieldMappingRegistry
from recordsift.models.collection import CollectionType


class TestFieldMappings:
    def test_every_type_has_a_mapping(self) -> None:
        assert set(FIELD_MAPPINGS) == set(CollectionType)

    @pytest.mark.parametrize("collection_type", list(CollectionType))
    def test_every_listed_field_is_searchable(self, mappings: FieldMappingRegistry, collection_type) -> None:
        for field in FIELD_MAPPINGS[collection_type].searchable_fields:
            assert mappings.is_searchable(collection_type, field), field

    @pytest.mark.parametrize("collection_type", list(CollectionType))
    def test_server_side_and_summary_fields_are_searchable(self, mappings, collection_type) -> None:
        mapping = FIELD_MAPPINGS[collection_type]
        for field in (*mapping.server_side_fields, *mapping.summary_fields):
            assert mappings.is_searchable(collection_type, field), field

    def test_mappings_are_frozen(self) -> None:
        with pytest.raises(Exception):
            FIELD_MAPPINGS[CollectionType.FEATURES].endpoint = "/other"  # type: ignore[misc]


class TestFieldMappingRegistry:
    def test_prefix_rule(self, mappings: FieldMappingRegistry) -> None:
        assert mappings.is_searchable(CollectionType.FEATURES, "owner")
        assert mappings.is_searchable(CollectionType.FEATURES, "owner.name")
        assert not mappings.is_searchable(CollectionType.FEATURES, "priority")

    def test_searchable_in_keeps_order(self, mappings: FieldMappingRegistry) -> None:
        types = [CollectionType.NOTES, CollectionType.FEATURES, CollectionType.PRODUCTS]
        assert mappings.searchable_in(types, "name") == [CollectionType.FEATURES, CollectionType.PRODUCTS]

    def test_server_side(self, mappings: FieldMappingRegistry) -> None:
        assert mappings.can_filter_server_side(CollectionType.NOTES, "company.id")
        assert not mappings.can_filter_server_side(CollectionType.NOTES, "title")

    def test_server_param_alias(self, mappings: FieldMappingRegistry) -> None:
        assert mappings.server_param(CollectionType.NOTES, "company.id") == "companyId"
        assert mappings.server_param(CollectionType.FEATURES, "status.name") == "status.name"

    def test_display_name(self, mappings: FieldMappingRegistry) -> None:
        assert mappings.display_name(CollectionType.FEATURES, "status.name") == "status"
        assert mappings.display_name(CollectionType.FEATURES, "parent.feature.id") == "parent feature id"
        assert mappings.display_name(CollectionType.FEATURES, "createdAt") == "created at"

    def test_fields_for_is_a_union(self, mappings: FieldMappingRegistry) -> None:
        fields = mappings.fields_for([CollectionType.PRODUCTS, CollectionType.NOTES])
        assert fields[0] == "id"
        assert fields.count("id") == 1
        assert "title" in fields and "links.html" in fields

    def test_custom_mapping_set(self) -> None:
        registry = FieldMappingRegistry({CollectionType.FEATURES: FIELD_MAPPINGS[CollectionType.FEATURES]})
        assert CollectionType.FEATURES in registry
        assert CollectionType.NOTES not in registry
        assert not registry.is_searchable(CollectionType.NOTES, "id")
