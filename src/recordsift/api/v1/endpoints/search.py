"""Search endpoint — Filtered search across one or more collection types."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from recordsift.api.deps import get_engine
from recordsift.core.engine import SearchEngine
from recordsift.core.exceptions import CollectionFetchError, SearchValidationError
from recordsift.models.query import SearchRequest
from recordsift.models.response import SearchResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/search",
    response_model=SearchResponse,
    summary="Search Collections",
    description=(
        "Search one or more collection types with field filters, match operators, "
        "and pattern matching. Results are merged in the requested type order, "
        "filtered, sliced by `offset`/`limit`, and shaped per `output`."
    ),
    responses={
        422: {"description": "Validation error; `detail` holds `{field, message}`"},
        502: {"description": "Fetching a collection type from its source failed"},
    },
)
async def search(
    request: SearchRequest,
    engine: SearchEngine = Depends(get_engine),
) -> SearchResponse:
    """Execute a search.

    Args:
        request: The search request.
        engine: The search engine instance (injected).
    """
    try:
        return await engine.search(request)
    except SearchValidationError as e:
        raise HTTPException(status_code=422, detail={"field": e.field, "message": str(e)}) from e
    except CollectionFetchError as e:
        logger.error("Search failed: %s", e)
        raise HTTPException(
            status_code=502,
            detail={"collection_type": e.collection_type, "message": str(e)},
        ) from e
