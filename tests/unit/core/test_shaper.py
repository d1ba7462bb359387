"""Tests for output shaping."""

from __future__ import annotations

import pytest

from recordsift.core.shaper import OutputShaper, select_fields
from recordsift.models.collection import ORIGIN_FIELD, CollectionType
from recordsift.models.query import DetailLevel, OutputMode


@pytest.fixture
def shaper(mappings) -> OutputShaper:
    return OutputShaper(mappings)


def _tagged(records: list[dict], collection_type: str) -> list[dict]:
    return [{**r, ORIGIN_FIELD: collection_type} for r in records]


class TestProject:
    def test_full_is_unchanged(self, shaper, feature_records) -> None:
        assert shaper.project(feature_records, CollectionType.FEATURES, OutputMode.FULL) == feature_records

    def test_basic_detail_narrows_full_output(self, shaper, feature_records) -> None:
        shaped = shaper.project(feature_records[:1], CollectionType.FEATURES, OutputMode.FULL, DetailLevel.BASIC)
        assert shaped == [
            {"id": "feat-1", "name": "Dark mode", "status": {"name": "In progress"}, "owner": {"email": "ana@example.com"}}
        ]

    def test_detail_ignored_for_field_list(self, shaper, product_records) -> None:
        shaped = shaper.project(product_records[:1], CollectionType.PRODUCTS, ["id"], DetailLevel.BASIC)
        assert shaped == [{"id": "prod-1"}]

    def test_ids_only(self, shaper, feature_records) -> None:
        records = _tagged(feature_records, "features")
        assert shaper.project(records, CollectionType.FEATURES, OutputMode.IDS_ONLY) == [
            "feat-1", "feat-2", "feat-3", "feat-4",
        ]

    def test_summary_uses_curated_fields(self, shaper, feature_records) -> None:
        shaped = shaper.project(_tagged(feature_records[:1], "features"), CollectionType.FEATURES, OutputMode.SUMMARY)
        assert shaped == [
            {
                "id": "feat-1",
                "name": "Dark mode",
                "status": {"name": "In progress"},
                "owner": {"email": "ana@example.com"},
                ORIGIN_FIELD: "features",
            }
        ]

    def test_field_list_omits_absent_fields(self, shaper, product_records) -> None:
        shaped = shaper.project(product_records, CollectionType.PRODUCTS, ["id", "owner.email"])
        assert shaped == [
            {"id": "prod-1", "owner": {"email": "ana@example.com"}},
            {"id": "prod-2", "owner": {"email": "bo@example.com"}},
            {"id": "prod-3"},
        ]

    def test_field_list_keeps_origin(self, shaper, product_records) -> None:
        shaped = shaper.project(_tagged(product_records[:1], "products"), CollectionType.PRODUCTS, ["name"])
        assert shaped == [{"name": "Web app", ORIGIN_FIELD: "products"}]

    def test_parent_path_returns_subtree(self, shaper, feature_records) -> None:
        shaped = shaper.project(feature_records[:1], CollectionType.FEATURES, ["status"])
        assert shaped == [{"status": {"id": "st-1", "name": "In progress"}}]


class TestProjectMany:
    def test_summary_per_record_type(self, shaper, feature_records, product_records) -> None:
        records = _tagged(product_records[:1], "products") + _tagged(feature_records[:1], "features")
        shaped = shaper.project_many(
            records,
            [CollectionType.PRODUCTS, CollectionType.FEATURES],
            OutputMode.SUMMARY,
        )
        assert shaped[0] == {"id": "prod-1", "name": "Web app", "owner": {"email": "ana@example.com"}, ORIGIN_FIELD: "products"}
        assert "status" in shaped[1]
        assert shaped[1][ORIGIN_FIELD] == "features"

    def test_basic_detail_per_record_type(self, shaper, feature_records, product_records) -> None:
        records = _tagged(product_records[:1], "products") + _tagged(feature_records[:1], "features")
        shaped = shaper.project_many(
            records,
            [CollectionType.PRODUCTS, CollectionType.FEATURES],
            OutputMode.FULL,
            DetailLevel.BASIC,
        )
        assert "description" not in shaped[1]
        assert shaped[1]["status"] == {"name": "In progress"}
        assert shaped[0][ORIGIN_FIELD] == "products"

    def test_ids_only_mixed(self, shaper, feature_records, product_records) -> None:
        records = _tagged(product_records, "products") + _tagged(feature_records, "features")
        shaped = shaper.project_many(records, [CollectionType.PRODUCTS, CollectionType.FEATURES], OutputMode.IDS_ONLY)
        assert len(shaped) == 7
        assert all(isinstance(i, str) for i in shaped)


class TestSelectFields:
    def test_does_not_mutate_source(self, feature_records) -> None:
        original = dict(feature_records[0])
        select_fields(feature_records[0], ["status.name"])
        assert feature_records[0] == original
