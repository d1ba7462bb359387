"""RecordSift — Unified search across paginated record collections."""

__version__ = "0.1.0"
