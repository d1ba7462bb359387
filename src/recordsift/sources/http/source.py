"""HTTP source — Paged list collaborator for JSON REST APIs.

Talks to list endpoints that answer with an envelope such as::

    {"data": [...], "links": {"next": "https://api.example.com/features?pageCursor=abc"}}

The first request carries the server-side filter params, the detail level
and the nested-data and custom-field flags; later requests follow
``links.next`` as given (absolute or relative URL).  A non-URL cursor is
sent back as ``cursor_param`` alongside the original params.  Network
timeouts are enforced here via ``httpx``; the engine never retries.

Usage::

    source = HttpCollectionSource(
        base_url="https://api.example.com",
        path="/features",
        api_key="your-token",
        headers={"X-Version": "1"},
    )
    await source.initialize()
    page = await source.fetch_page(PageRequest())
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

import httpx

from recordsift.models.result import PageRequest
from recordsift.sources.base.exceptions import SourceConnectionError, SourceQueryError
from recordsift.sources.base.source import CollectionSource, SourceHealth

logger = logging.getLogger(__name__)


class HttpCollectionSource(CollectionSource):
    """Collection source for a JSON list endpoint.

    Args:
        base_url: API root, e.g. ``"https://api.example.com"``.
        path: List endpoint path, e.g. ``"/features"``.
        api_key: Bearer token for the ``Authorization`` header.
        timeout: HTTP request timeout in seconds.
        headers: Extra headers sent with every request.
        params: Extra query params sent with the first page request.
        page_size_param: Query param carrying the page size; omitted when ``None``.
        cursor_param: Query param carrying a non-URL cursor.
        detail_param: Query param carrying the detail level; omitted when ``None``.
        sub_data_param: Query param set to ``true`` when nested data is requested.
        custom_fields_param: Query param set to ``true`` when custom field values are requested.
        **kwargs: Extra keyword arguments stored for future use.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        path: str = "/",
        api_key: str | None = None,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        page_size_param: str | None = None,
        cursor_param: str = "pageCursor",
        detail_param: str | None = "detail",
        sub_data_param: str | None = "includeSubData",
        custom_fields_param: str | None = "includeCustomFields",
        **kwargs: Any,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._path = path if path.startswith("/") else f"/{path}"
        self._api_key = api_key
        self._timeout = timeout
        self._headers = headers or {}
        self._params = params or {}
        self._page_size_param = page_size_param
        self._cursor_param = cursor_param
        self._detail_param = detail_param
        self._sub_data_param = sub_data_param
        self._custom_fields_param = custom_fields_param
        self._extra_kwargs = kwargs
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "http"

    async def initialize(self) -> None:
        """Create the ``httpx.AsyncClient``."""
        headers: dict[str, str] = {"Accept": "application/json", **self._headers}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            headers=headers,
        )
        logger.info("HTTP source ready at %s%s", self._base_url, self._path)

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Paging ───────────────────────────────────────────────────────────

    async def fetch_page(self, request: PageRequest) -> Any:
        """Fetch one page and return the decoded JSON body unchanged."""
        if not self._client:
            raise SourceConnectionError("HTTP source not initialized.")

        url, params = self._build_request(request)

        try:
            resp = await self._client.get(url, params=params)
            if resp.status_code == 404:
                raise SourceQueryError(f"List endpoint not found: {url}")
            resp.raise_for_status()
            return resp.json()
        except SourceQueryError:
            raise
        except httpx.HTTPError as e:
            raise SourceQueryError(f"Page request to {url} failed: {e}") from e
        except ValueError as e:
            raise SourceQueryError(f"Page from {url} is not valid JSON: {e}") from e

    def _build_request(self, request: PageRequest) -> tuple[str, dict[str, Any] | None]:
        """Resolve the URL and query params for one page request."""
        cursor = request.cursor
        if isinstance(cursor, str) and (cursor.startswith(("http://", "https://")) or cursor.startswith("/")):
            # The next link already encodes every param.
            return cursor, None

        params: dict[str, Any] = {**self._params, **{k: _param_value(v) for k, v in request.filters.items()}}
        if self._page_size_param:
            params[self._page_size_param] = request.limit
        if self._detail_param:
            params[self._detail_param] = request.detail.value
        if self._sub_data_param and request.include_sub_data:
            params[self._sub_data_param] = "true"
        if self._custom_fields_param and request.include_custom_fields:
            params[self._custom_fields_param] = "true"
        if cursor is not None:
            params[self._cursor_param] = cursor
        return self._path, params

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> SourceHealth:
        """Probe the list endpoint."""
        if not self._client:
            return SourceHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            resp = await self._client.get(self._path, params=self._params or None)
            latency_ms = int((time.monotonic() - start) * 1000)

            if resp.status_code == 200:
                return SourceHealth(
                    status="healthy",
                    latency_ms=latency_ms,
                    last_check=datetime.now(UTC).isoformat(),
                    message=f"{self._base_url}{self._path}",
                )
            return SourceHealth(
                status="degraded",
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"List endpoint returned HTTP {resp.status_code}",
            )
        except Exception as e:
            return SourceHealth(status="unhealthy", message=str(e))


def _param_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value
