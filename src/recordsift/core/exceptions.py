"""Engine-level exceptions."""

from __future__ import annotations

from typing import Any


class RecordSiftError(Exception):
    """Base exception for search engine errors."""

    def to_dict(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "message": str(self)}


class SearchValidationError(RecordSiftError):
    """Raised when a search request fails validation.

    Attributes:
        field: Name of the offending request field (``types``, ``filters``,
            ``operators``, ``output``) or filter field path.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "field": self.field}


class CollectionFetchError(RecordSiftError):
    """Raised when walking one collection type's pages fails.

    Fails the whole search; results from other types are discarded.
    """

    def __init__(self, collection_type: str, message: str) -> None:
        super().__init__(f"Fetch failed for '{collection_type}': {message}")
        self.collection_type = collection_type

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "collection_type": self.collection_type}
