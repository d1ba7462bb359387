"""Health check endpoints — System and source health monitoring."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from recordsift import __version__
from recordsift.api.deps import get_engine
from recordsift.core.engine import SearchEngine
from recordsift.sources.base.source import SourceHealth

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Response models ──────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    """System health check response."""

    status: str = Field(description="Health status (e.g. 'healthy')")
    version: str = Field(description="RecordSift server version")
    service: str = Field(description="Service name ('recordsift')")
    registered_types: list[str] = Field(description="Collection types with a registered source")


class SourceHealthResponse(BaseModel):
    """Per-type source health check response."""

    sources: dict[str, SourceHealth] = Field(description="Map of collection type to its source health")


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="System Health Check",
    description="Returns overall system health, server version, and the collection types that have a source.",
)
async def health_check(
    engine: SearchEngine = Depends(get_engine),
) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        service="recordsift",
        registered_types=[t.value for t in engine.sources.registered_types],
    )


@router.get(
    "/health/sources",
    response_model=SourceHealthResponse,
    summary="Source Health Check",
    description="Run health checks on every registered collection source.",
)
async def source_health(
    engine: SearchEngine = Depends(get_engine),
) -> SourceHealthResponse:
    """Check health of all collection sources."""
    return SourceHealthResponse(sources=await engine.sources.health_check_all())
