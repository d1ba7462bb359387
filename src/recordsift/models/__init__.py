"""Data models shared by the engine, sources, and API."""
