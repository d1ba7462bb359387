"""In-memory collection source."""
