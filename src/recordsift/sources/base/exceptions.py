"""Source-specific exceptions."""


class SourceError(Exception):
    """Base exception for collection source errors."""


class SourceConnectionError(SourceError):
    """Raised when the source cannot reach its backing system."""


class SourceQueryError(SourceError):
    """Raised when the backing system rejects or fails a page request."""


class SourceConfigurationError(SourceError):
    """Raised when source configuration is invalid."""


class SourceNotFoundError(SourceError):
    """Raised when no source is registered for a collection type."""
