"""Source Registry — Maps each collection type to the source that lists it.

The registry replaces per-type branching: the engine looks up the source
for a :class:`CollectionType` and calls its ``fetch_page``.
"""

from __future__ import annotations

import logging

from recordsift.models.collection import CollectionType
from recordsift.sources.base.exceptions import SourceNotFoundError
from recordsift.sources.base.source import CollectionSource, SourceHealth

logger = logging.getLogger(__name__)


class SourceRegistry:
    """Registry of collection sources keyed by collection type.

    Example:
        >>> registry = SourceRegistry()
        >>> registry.register(CollectionType.FEATURES, HttpCollectionSource(base_url=..., path="/features"))
        >>> await registry.initialize_all()
        >>> source = registry.get(CollectionType.FEATURES)
    """

    def __init__(self) -> None:
        self._sources: dict[CollectionType, CollectionSource] = {}

    def register(self, collection_type: CollectionType, source: CollectionSource) -> None:
        """Register the source for a collection type.

        Args:
            collection_type: The collection type served by ``source``.
            source: The source instance.
        """
        if collection_type in self._sources:
            logger.warning("Overwriting existing source registration: %s", collection_type.value)
        self._sources[collection_type] = source
        logger.info("Registered %s source for %s", source.name, collection_type.value)

    def get(self, collection_type: CollectionType) -> CollectionSource:
        """Get the source for a collection type.

        Raises:
            SourceNotFoundError: If no source is registered for the type.
        """
        try:
            return self._sources[collection_type]
        except KeyError:
            raise SourceNotFoundError(
                f"No source registered for collection type '{collection_type.value}'. "
                f"Registered types: {[t.value for t in self._sources]}"
            ) from None

    def has(self, collection_type: CollectionType) -> bool:
        return collection_type in self._sources

    async def initialize_all(self) -> None:
        """Initialize every registered source; a shared instance is initialized once."""
        seen: set[int] = set()
        for collection_type, source in self._sources.items():
            if id(source) in seen:
                continue
            seen.add(id(source))
            await source.initialize()
            logger.info("Initialized source for %s", collection_type.value)

    async def health_check_all(self) -> dict[str, SourceHealth]:
        """Run health checks on all registered sources.

        Returns:
            Mapping of collection type name to health status.
        """
        results: dict[str, SourceHealth] = {}
        for collection_type, source in self._sources.items():
            try:
                results[collection_type.value] = await source.health_check()
            except Exception as e:
                results[collection_type.value] = SourceHealth(status="unhealthy", message=str(e))
        return results

    async def shutdown_all(self) -> None:
        """Gracefully shut down all registered sources."""
        seen: set[int] = set()
        for collection_type, source in self._sources.items():
            if id(source) in seen:
                continue
            seen.add(id(source))
            try:
                await source.shutdown()
                logger.info("Shut down source for %s", collection_type.value)
            except Exception:
                logger.warning("Error shutting down source for %s", collection_type.value, exc_info=True)
        self._sources.clear()

    @property
    def registered_types(self) -> list[CollectionType]:
        """All collection types with a registered source."""
        return list(self._sources)
