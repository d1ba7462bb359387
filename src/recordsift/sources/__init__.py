"""Collection source layer — Pluggable paged list collaborators.

Built-in sources:
  - http: JSON list APIs with ``links.next`` cursor pagination (httpx)
  - memory: in-process record lists with offset cursors

Implement ``CollectionSource`` to connect your own backing system.
"""
