"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recordsift import __version__
from recordsift.api.deps import set_engine
from recordsift.api.v1.router import router as v1_router
from recordsift.config.settings import Settings, SourceConfig
from recordsift.core.engine import SearchEngine
from recordsift.core.mappings import FIELD_MAPPINGS
from recordsift.models.collection import CollectionType
from recordsift.sources.base.exceptions import SourceConfigurationError
from recordsift.sources.base.registry import SourceRegistry
from recordsift.sources.base.source import CollectionSource
from recordsift.sources.http.source import HttpCollectionSource
from recordsift.sources.memory.source import MemoryCollectionSource

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "RECORDSIFT_CONFIG"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        logger.info("Starting RecordSift v%s", __version__)

        engine = SearchEngine(settings, sources=build_source_registry(settings))
        await engine.initialize()
        set_engine(engine)

        app.state.settings = settings
        app.state.engine = engine

        logger.info("RecordSift is ready to serve requests on port %d", settings.server.port)
        yield

        logger.info("Shutting down RecordSift...")
        await engine.shutdown()
        set_engine(None)
        logger.info("RecordSift shutdown complete")

    app = FastAPI(
        title="RecordSift",
        description="Filtered search across paged record collections, merged into one response.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix="/v1")

    return app


def load_settings() -> Settings:
    """Load settings for an app created without explicit settings.

    Uses the YAML file named by ``RECORDSIFT_CONFIG`` (set by ``recordsift
    serve --config`` for reload and multi-worker runs), else
    ``recordsift-config.yaml`` in the working directory, else env vars only.
    """
    config = os.environ.get(CONFIG_ENV_VAR)
    yaml_path = Path(config) if config else Path("recordsift-config.yaml")
    if config or yaml_path.exists():
        logger.info("Loading configuration from %s", yaml_path)
        return Settings.from_yaml(yaml_path)
    return Settings()


# ── Source registration ──


def build_source_registry(settings: Settings) -> SourceRegistry:
    """Build a source registry from ``settings.upstream`` and ``settings.sources``.

    Every collection type gets an HTTP source when ``upstream.base_url`` is
    set; entries under ``sources`` override or disable individual types.

    Raises:
        SourceConfigurationError: If ``sources`` names an unknown collection type.
    """
    registry = SourceRegistry()

    for name in settings.sources:
        if CollectionType.parse(name) is None:
            raise SourceConfigurationError(
                f"Unknown collection type '{name}' in sources. Supported types: {', '.join(CollectionType.values())}"
            )

    for collection_type in CollectionType:
        cfg = settings.sources.get(collection_type.value)
        if cfg is not None and not cfg.enabled:
            logger.info("Source for '%s' is disabled, skipping", collection_type.value)
            continue

        source = _build_source(collection_type, cfg or SourceConfig(), settings)
        if source is not None:
            registry.register(collection_type, source)

    return registry


def _build_source(collection_type: CollectionType, cfg: SourceConfig, settings: Settings) -> CollectionSource | None:
    if cfg.kind == "memory":
        return MemoryCollectionSource(
            cfg.records,
            page_size=cfg.extra.get("page_size"),
            param_fields=_param_fields(collection_type),
        )

    base_url = cfg.base_url or settings.upstream.base_url
    if not base_url:
        return None

    kwargs: dict[str, object] = {
        "headers": settings.upstream.headers,
        **cfg.extra,
    }
    return HttpCollectionSource(
        base_url=base_url,
        path=cfg.path or FIELD_MAPPINGS[collection_type].endpoint,
        api_key=cfg.api_key or settings.upstream.api_key,
        timeout=cfg.timeout or settings.upstream.timeout,
        **kwargs,
    )


def _param_fields(collection_type: CollectionType) -> dict[str, str]:
    """Upstream param name -> field path, so memory sources accept aliased params."""
    aliases = FIELD_MAPPINGS[collection_type].filter_param_aliases
    return {param: field for field, param in aliases.items()}
