"""HTTP API exposing the search engine."""
