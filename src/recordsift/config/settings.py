"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (when loaded through ``Settings.from_yaml``)
  2. Environment variables (RECORDSIFT_ prefix) and ``.env``
  3. Default values
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=1, description="Number of worker processes")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")


class SearchSettings(BaseModel):
    """Search behavior configuration."""

    max_pages: int = Field(default=50, ge=1, description="Page ceiling per collection type")
    page_size: int = Field(default=100, ge=1, description="Page size hint sent to sources")


class UpstreamSettings(BaseModel):
    """Defaults shared by every HTTP collection source.

    When ``base_url`` is set, an HTTP source is registered for every
    collection type that is not disabled under ``sources``.
    """

    base_url: str = Field(default="", description="API root; empty disables automatic registration")
    api_key: str | None = Field(default=None, description="Bearer token")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    headers: dict[str, str] = Field(default_factory=dict, description="Extra headers for every request")

    @field_validator("headers", mode="before")
    @classmethod
    def _parse_headers(cls, v: Any) -> Any:
        """Parse headers from a JSON string (env var) or mapping."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError(f"headers must be a JSON object: {e}") from e
            return parsed
        return v


class SourceConfig(BaseModel):
    """Configuration for the source of a single collection type."""

    enabled: bool = Field(default=True, description="Whether this collection type is served")
    kind: Literal["http", "memory"] = Field(default="http", description="Source implementation")
    base_url: str | None = Field(default=None, description="API root; falls back to upstream.base_url")
    path: str | None = Field(default=None, description="List endpoint path; falls back to the type's default")
    api_key: str | None = Field(default=None, description="Bearer token; falls back to upstream.api_key")
    timeout: float | None = Field(default=None, description="Request timeout; falls back to upstream.timeout")
    records: list[dict[str, Any]] = Field(default_factory=list, description="Records served by a memory source")
    extra: dict[str, Any] = Field(default_factory=dict, description="Source-specific options")


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the RECORDSIFT_ prefix.
    Nested settings use double underscores: RECORDSIFT_SERVER__PORT=9090

    Example:
        RECORDSIFT_UPSTREAM__BASE_URL=https://api.productboard.com
        RECORDSIFT_UPSTREAM__API_KEY=pb-...
        RECORDSIFT_SEARCH__MAX_PAGES=20
    """

    model_config = {
        "env_prefix": "RECORDSIFT_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    # Application metadata
    app_name: str = Field(default="RecordSift", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")

    # Component settings
    server: ServerSettings = Field(default_factory=ServerSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    sources: dict[str, SourceConfig] = Field(
        default_factory=dict,
        description="Per collection type source overrides, keyed by type name",
    )
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file override the built-in defaults.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
