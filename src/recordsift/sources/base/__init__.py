"""Base source interface — Abstract classes for paged list collaborators."""

from recordsift.sources.base.registry import SourceRegistry
from recordsift.sources.base.source import CollectionSource, SourceHealth

__all__ = ["CollectionSource", "SourceHealth", "SourceRegistry"]
