"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from recordsift.config.settings import Settings
from recordsift.core.mappings import FieldMappingRegistry
from recordsift.models.collection import CollectionType
from recordsift.sources.base.registry import SourceRegistry
from recordsift.sources.memory.source import MemoryCollectionSource


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        search={"max_pages": 50, "page_size": 2},
    )


@pytest.fixture
def mappings() -> FieldMappingRegistry:
    return FieldMappingRegistry()


# ── Record fixtures ──


@pytest.fixture
def feature_records() -> list[dict]:
    return [
        {
            "id": "feat-1",
            "name": "Dark mode",
            "description": "Theme toggle",
            "archived": False,
            "status": {"id": "st-1", "name": "In progress"},
            "owner": {"email": "ana@example.com"},
            "timeframe": {"startDate": "2024-01-10", "endDate": "2024-03-01"},
        },
        {
            "id": "feat-2",
            "name": "SSO login",
            "description": "SAML support",
            "archived": False,
            "status": {"id": "st-2", "name": "Done"},
            "owner": {"email": "bo@example.com"},
            "timeframe": {"startDate": "2023-06-01", "endDate": "2023-09-30"},
        },
        {
            "id": "feat-3",
            "name": "Darker charts",
            "description": None,
            "archived": True,
            "status": {"id": "st-1", "name": "In progress"},
            "owner": {"email": "ana@example.com"},
        },
        {
            "id": "feat-4",
            "name": "Export to CSV",
            "description": "",
            "archived": False,
            "status": {"id": "st-3", "name": "New idea"},
            "owner": None,
        },
    ]


@pytest.fixture
def product_records() -> list[dict]:
    return [
        {"id": "prod-1", "name": "Web app", "owner": {"email": "ana@example.com"}},
        {"id": "prod-2", "name": "Mobile app", "owner": {"email": "bo@example.com"}},
        {"id": "prod-3", "name": "Public API"},
    ]


@pytest.fixture
def note_records() -> list[dict]:
    return [
        {"id": "note-1", "title": "Customer wants dark mode", "tags": ["ui", "theme"], "company": {"id": "c-1"}},
        {"id": "note-2", "title": "", "tags": [], "company": {"id": "c-2"}},
        {"id": "note-3", "tags": ["billing"]},
        {"id": "note-4", "title": None, "tags": ["ui"], "company": {"id": "c-1"}},
        {"id": "note-5", "title": "SSO request", "tags": ["auth"], "company": {"id": "c-3"}},
    ]


@pytest.fixture
def sources(
    feature_records: list[dict],
    product_records: list[dict],
    note_records: list[dict],
) -> SourceRegistry:
    """Memory sources for features, products and notes, two records per page."""
    registry = SourceRegistry()
    registry.register(CollectionType.FEATURES, MemoryCollectionSource(feature_records, page_size=2))
    registry.register(CollectionType.PRODUCTS, MemoryCollectionSource(product_records, page_size=2))
    registry.register(
        CollectionType.NOTES,
        MemoryCollectionSource(
            note_records,
            page_size=2,
            param_fields={"companyId": "company.id", "ownerEmail": "owner.email", "anyTag": "tags"},
        ),
    )
    return registry
