"""HTTP collection source."""
