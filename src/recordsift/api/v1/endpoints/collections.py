"""Collections endpoint — Searchable types and their fields."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from recordsift.api.deps import get_engine
from recordsift.core.engine import SearchEngine

router = APIRouter()


class CollectionInfo(BaseModel):
    """Search metadata for one collection type."""

    type: str = Field(description="Collection type name")
    searchable_fields: list[str] = Field(description="Fields usable in filters and output")
    server_side_fields: list[str] = Field(description="Fields the upstream can filter on itself")
    summary_fields: list[str] = Field(description="Fields returned for summary output")
    source_registered: bool = Field(description="Whether a source serves this type")


class CollectionsResponse(BaseModel):
    collections: list[CollectionInfo]


@router.get(
    "/collections",
    response_model=CollectionsResponse,
    summary="List Collection Types",
    description="Every supported collection type with its searchable, server-side and summary fields.",
)
async def list_collections(
    engine: SearchEngine = Depends(get_engine),
) -> CollectionsResponse:
    collections = []
    for collection_type in engine.mappings.types:
        mapping = engine.mappings.get(collection_type)
        collections.append(
            CollectionInfo(
                type=collection_type.value,
                searchable_fields=list(mapping.searchable_fields),
                server_side_fields=sorted(mapping.server_side_fields),
                summary_fields=list(mapping.summary_fields),
                source_registered=engine.sources.has(collection_type),
            )
        )
    return CollectionsResponse(collections=collections)
