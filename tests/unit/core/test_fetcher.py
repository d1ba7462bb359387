"""Tests for page normalization, server-side filter selection, and the page walk."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from recordsift.core.fetcher import PaginationFetcher, is_server_side, normalize_page, server_side_filters
from recordsift.core.mappings import FieldMappingRegistry
from recordsift.core.validator import SearchValidator
from recordsift.models.collection import CollectionType
from recordsift.models.query import SearchRequest
from recordsift.models.result import FetchState, Page, PageRequest
from recordsift.sources.base.exceptions import SourceNotFoundError, SourceQueryError
from recordsift.sources.base.registry import SourceRegistry
from recordsift.sources.memory.source import MemoryCollectionSource


def _normalized(**kwargs):
    return SearchValidator().validate(SearchRequest(**kwargs))


class TestNormalizePage:
    def test_page_passthrough(self) -> None:
        page = Page(records=[{"id": 1}], next_cursor=2)
        assert normalize_page(page) is page

    def test_bare_list_is_terminal(self) -> None:
        page = normalize_page([{"id": 1}, {"id": 2}])
        assert [r["id"] for r in page.records] == [1, 2]
        assert page.next_cursor is None

    def test_envelope_with_links_next(self) -> None:
        page = normalize_page({"data": [{"id": 1}], "links": {"next": "https://api.test/features?pageCursor=x"}})
        assert page.records == [{"id": 1}]
        assert page.next_cursor == "https://api.test/features?pageCursor=x"

    def test_envelope_with_next(self) -> None:
        page = normalize_page({"records": [{"id": 1}], "next": 10})
        assert page.next_cursor == 10

    def test_envelope_with_null_next(self) -> None:
        page = normalize_page({"data": [], "links": {"next": None}})
        assert page.records == []
        assert page.next_cursor is None

    def test_single_record(self) -> None:
        page = normalize_page({"id": "feat-1", "name": "Dark mode"})
        assert page.records == [{"id": "feat-1", "name": "Dark mode"}]
        assert page.next_cursor is None

    def test_none(self) -> None:
        assert normalize_page(None) == Page()

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError):
            normalize_page("not a page")


class TestServerSideFilters:
    def test_aliases_applied(self, mappings: FieldMappingRegistry) -> None:
        request = _normalized(types="notes", filters={"company.id": "c-1", "title": "x"})
        assert server_side_filters(CollectionType.NOTES, request, mappings) == {"companyId": "c-1"}

    def test_non_equals_operator_not_pushed(self, mappings: FieldMappingRegistry) -> None:
        request = _normalized(types="notes", filters={"company.id": "c-1"}, operators={"company.id": "contains"})
        assert server_side_filters(CollectionType.NOTES, request, mappings) == {}

    def test_wildcard_value_not_pushed(self, mappings: FieldMappingRegistry) -> None:
        request = _normalized(types="features", filters={"status.name": "In*"})
        assert not is_server_side(CollectionType.FEATURES, "status.name", request, mappings)

    def test_regex_mode_never_pushed(self, mappings: FieldMappingRegistry) -> None:
        request = _normalized(types="features", filters={"status.name": "Done"}, pattern_mode="regex")
        assert not is_server_side(CollectionType.FEATURES, "status.name", request, mappings)

    def test_exact_mode_pushes_literal_star(self, mappings: FieldMappingRegistry) -> None:
        request = _normalized(types="features", filters={"status.name": "In*"}, pattern_mode="exact")
        assert is_server_side(CollectionType.FEATURES, "status.name", request, mappings)

    def test_empty_value_not_pushed(self, mappings: FieldMappingRegistry) -> None:
        request = _normalized(types="notes", filters={"company.id": None})
        assert server_side_filters(CollectionType.NOTES, request, mappings) == {}

    def test_per_type_params(self, mappings: FieldMappingRegistry) -> None:
        request = _normalized(types=["features", "notes"], filters={"owner.email": "ana@example.com"})
        assert server_side_filters(CollectionType.FEATURES, request, mappings) == {"owner.email": "ana@example.com"}
        assert server_side_filters(CollectionType.NOTES, request, mappings) == {"ownerEmail": "ana@example.com"}


class TestPaginationFetcher:
    async def test_walks_every_page_in_order(self, mappings, sources) -> None:
        fetcher = PaginationFetcher(mappings, sources, max_pages=50, page_size=2)
        result = await fetcher.fetch(CollectionType.FEATURES, _normalized(types="features"))

        assert [r["id"] for r in result.records] == ["feat-1", "feat-2", "feat-3", "feat-4"]
        assert result.pages_fetched == 2
        assert result.state == FetchState.DONE
        assert result.has_more is False
        assert result.total_records == 4
        assert result.warnings == []

    async def test_ceiling_sets_has_more_and_warns(self, mappings, sources) -> None:
        fetcher = PaginationFetcher(mappings, sources, max_pages=1, page_size=2)
        result = await fetcher.fetch(CollectionType.FEATURES, _normalized(types="features"))

        assert [r["id"] for r in result.records] == ["feat-1", "feat-2"]
        assert result.state == FetchState.ABORTED_BY_CEILING
        assert result.has_more is True
        assert len(result.warnings) == 1
        assert "1 pages" in result.warnings[0]

    async def test_empty_collection_is_done(self, mappings) -> None:
        registry = SourceRegistry()
        registry.register(CollectionType.COMPANIES, MemoryCollectionSource([]))
        fetcher = PaginationFetcher(mappings, registry)
        result = await fetcher.fetch(CollectionType.COMPANIES, _normalized(types="companies"))

        assert result.records == []
        assert result.state == FetchState.DONE
        assert result.pages_fetched == 1

    async def test_sends_server_side_params_and_cursor(self, mappings) -> None:
        source = MemoryCollectionSource()
        source.fetch_page = AsyncMock(  # type: ignore[method-assign]
            side_effect=[
                {"data": [{"id": "n1"}], "links": {"next": "https://api.test/notes?pageCursor=abc"}},
                {"data": [{"id": "n2"}], "links": {"next": None}},
            ]
        )
        registry = SourceRegistry()
        registry.register(CollectionType.NOTES, source)
        fetcher = PaginationFetcher(mappings, registry, page_size=25)

        request = _normalized(types="notes", filters={"company.id": "c-1"}, include_sub_data=True)
        result = await fetcher.fetch(CollectionType.NOTES, request)

        assert [r["id"] for r in result.records] == ["n1", "n2"]
        first: PageRequest = source.fetch_page.await_args_list[0].args[0]
        second: PageRequest = source.fetch_page.await_args_list[1].args[0]
        assert first.cursor is None
        assert first.filters == {"companyId": "c-1"}
        assert first.limit == 25
        assert first.include_sub_data is True
        assert second.cursor == "https://api.test/notes?pageCursor=abc"

    async def test_source_errors_propagate(self, mappings) -> None:
        source = MemoryCollectionSource()
        source.fetch_page = AsyncMock(side_effect=SourceQueryError("boom"))  # type: ignore[method-assign]
        registry = SourceRegistry()
        registry.register(CollectionType.USERS, source)

        with pytest.raises(SourceQueryError):
            await PaginationFetcher(mappings, registry).fetch(CollectionType.USERS, _normalized(types="users"))

    async def test_unregistered_type(self, mappings) -> None:
        with pytest.raises(SourceNotFoundError):
            await PaginationFetcher(mappings, SourceRegistry()).fetch(
                CollectionType.USERS, _normalized(types="users")
            )
