"""Tests for response messages and hints."""

from __future__ import annotations

import pytest

from recordsift.core.messaging import SearchContext, SearchMessageGenerator
from recordsift.models.collection import CollectionType
from recordsift.models.query import OutputMode, SearchOperator


@pytest.fixture
def generator(mappings) -> SearchMessageGenerator:
    return SearchMessageGenerator(mappings)


def _context(**kwargs) -> SearchContext:
    kwargs.setdefault("types", [CollectionType.FEATURES])
    return SearchContext(**kwargs)


class TestMessage:
    def test_no_results(self, generator) -> None:
        assert generator.generate_message(_context()) == "No features found matching the search criteria"

    def test_all_returned(self, generator) -> None:
        message = generator.generate_message(_context(total_records=3, returned_records=3))
        assert message == "Found 3 features"

    def test_multi_type_partial(self, generator) -> None:
        message = generator.generate_message(
            _context(
                types=[CollectionType.PRODUCTS, CollectionType.FEATURES],
                total_records=6,
                returned_records=2,
                has_more=True,
            )
        )
        assert message.startswith("Found 6 items across products, features, returning 2 from offset 0")
        assert message.endswith("Use offset=2 to get the next batch")

    def test_filter_description_uses_display_names(self, generator) -> None:
        message = generator.generate_message(
            _context(
                total_records=1,
                returned_records=1,
                filters={"status.name": "Done", "name": "Dark", "archived": False},
                operators={"name": SearchOperator.STARTS_WITH},
            )
        )
        assert 'Filtered by: status = "Done", name starts with "Dark", archived state = false' in message

    def test_multi_type_uses_raw_field_names(self, generator) -> None:
        message = generator.generate_message(
            _context(
                types=[CollectionType.FEATURES, CollectionType.NOTES],
                total_records=1,
                returned_records=1,
                filters={"owner.email": ""},
            )
        )
        assert "Filtered by: missing owner.email" in message

    def test_warnings(self, generator) -> None:
        message = generator.generate_message(
            _context(total_records=1, returned_records=1, warnings=["first thing", "second thing"])
        )
        assert "Notes: First thing; Second thing" in message

    def test_pagination_hint_counts_offset(self, generator) -> None:
        message = generator.generate_message(
            _context(total_records=30, returned_records=10, offset=10, has_more=True)
        )
        assert "Use offset=20 to get the next batch" in message


class TestDescribeFilter:
    @pytest.mark.parametrize(
        ("value", "operator", "expected"),
        [
            ("x", SearchOperator.IS_EMPTY, "missing title"),
            ("dark", SearchOperator.CONTAINS, 'title contains "dark"'),
            ("mode", SearchOperator.ENDS_WITH, 'title ends with "mode"'),
            ("2024-01-01", SearchOperator.AFTER, "title after 2024-01-01"),
            ("d.*", SearchOperator.REGEX, 'title regex "d.*"'),
            (["a", "b"], SearchOperator.EQUALS, "title in [a, b]"),
            (["a"], SearchOperator.EQUALS, 'title = "a"'),
        ],
    )
    def test_descriptions(self, generator, value, operator, expected) -> None:
        context = _context(types=[CollectionType.NOTES])
        assert generator.describe_filter("title", value, operator, context) == expected


class TestHints:
    def test_large_full_output(self, generator) -> None:
        hints = generator.generate_hints(_context(total_records=30, returned_records=30))
        assert any("output parameter" in h for h in hints)

    def test_no_field_hint_for_summary(self, generator) -> None:
        hints = generator.generate_hints(_context(total_records=30, returned_records=30, output=OutputMode.SUMMARY))
        assert not any("output parameter" in h for h in hints)

    def test_large_response_estimate(self, generator) -> None:
        hints = generator.generate_hints(
            _context(types=[CollectionType.NOTES], total_records=200, returned_records=150)
        )
        assert any("Large response" in h for h in hints)

    def test_significant_response_estimate(self, generator) -> None:
        hints = generator.generate_hints(_context(total_records=100, returned_records=100))
        assert any("significant" in h for h in hints)

    def test_slow_query(self, generator) -> None:
        hints = generator.generate_hints(_context(total_records=1, returned_records=1, query_time_ms=6000))
        assert any("6000ms" in h for h in hints)

    def test_no_results_hints_are_capped(self, generator) -> None:
        filters = {"name": "", "description": "", "owner.email": "", "status.name": "Done"}
        hints = generator.generate_hints(_context(filters=filters))
        assert len(hints) == 3

    def test_no_results_generic_hint(self, generator) -> None:
        hints = generator.generate_hints(_context(types=[CollectionType.WEBHOOKS]))
        assert hints == ["Try broader search criteria or check that webhooks exist in your workspace"]

    def test_complex_filters(self, generator) -> None:
        filters = {f"f{i}": "x" for i in range(6)}
        hints = generator.generate_hints(_context(total_records=1, returned_records=1, filters=filters))
        assert any("Complex filter combination" in h for h in hints)

    def test_ids_only_estimate(self, generator) -> None:
        context = _context(total_records=100, returned_records=100, output=OutputMode.IDS_ONLY)
        assert generator.estimate_units(context) == 100 * 10 + 200
