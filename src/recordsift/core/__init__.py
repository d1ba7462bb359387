"""Search engine core — validation, fetching, filtering, and shaping."""

from recordsift.core.engine import SearchEngine

__all__ = ["SearchEngine"]
