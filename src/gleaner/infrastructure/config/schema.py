"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from .defaults import DEFAULT_CONFIG

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
CacheBackendName = Literal["memory", "diskcache", "redis"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class CacheConfig(BaseModel):
    """Cache configuration (YAML section: cache.*)."""

    backend: CacheBackendName = Field(
        default="memory",
        description="Durable tier: 'memory' (none), 'diskcache' (SQLite) or 'redis'.",
    )
    directory: Path = Field(
        default=Path("./.gleaner-cache"),
        validation_alias=AliasChoices("dir", "directory"),
        description="Diskcache directory (only when backend=diskcache).",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (only when backend=redis).",
    )
    ttl_seconds: int = Field(default=86400, gt=0, description="Default entry TTL (seconds).")
    max_items: int = Field(default=1000, ge=1, description="LRU bound on cached records.")
    sweep_interval_seconds: float = Field(
        default=3600,
        ge=0,
        description="Expired-entry sweep period (seconds). 0 = no background sweep.",
    )
    max_concurrent: int = Field(default=10, ge=1, description="Max parallel diskcache ops.")

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_dir(cls, v: Any) -> Path:
        return _normalize_path(v)


class ExtractionConfig(BaseModel):
    """Orchestrator defaults (YAML section: extraction.*); per-call options override them."""

    timeout_ms: int = Field(default=15_000, gt=0, description="Per-fetch timeout.")
    enable_retry: bool = Field(default=True, description="Retry a failed item once.")
    enable_cache: bool = Field(default=True, description="Serve and store cached records.")
    max_concurrency: int = Field(default=4, ge=1, description="Batch wave size.")
    retry_delay_ms: int = Field(default=1000, ge=0, description="Pause before the retry.")
    batch_delay_ms: int = Field(default=500, ge=0, description="Pause between batch waves.")
    min_content_length: int = Field(
        default=100,
        ge=0,
        description="Bodies shorter than this are treated as failed fetches.",
    )
    max_batch_size: int = Field(default=20, ge=1, description="Upper bound on items per batch request.")


class RankingConfig(BaseModel):
    """Link ranking weights (YAML section: ranking.*)."""

    code_exact_weight: float = 40.0
    code_partial_weight: float = 25.0
    similarity_weight: float = 30.0
    provenance_bonus: float = 15.0
    high_confidence: list[str] = Field(
        default_factory=lambda: ["javbus_moviebox", "javdb_video", "javlibrary_video", "javgg_video"],
        description="Provenance tags that earn the provenance bonus.",
    )
    generic_max_anchors: int = Field(
        default=50,
        ge=1,
        description="Anchors the generic adapter examines per strategy.",
    )


class NormalizerConfig(BaseModel):
    """List caps applied by the record normalizer (YAML section: normalizer.*)."""

    max_screenshots: int = Field(default=20, ge=0)
    max_download_links: int = Field(default=15, ge=0)
    max_magnet_links: int = Field(default=15, ge=0)


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/cache/extraction/ranking/normalizer).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="gleaner", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Client-level HTTP timeout in seconds.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether the HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default=DEFAULT_CONFIG["http"]["user_agent"],
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        cache = self.cache.model_dump()
        cache["dir"] = str(cache.pop("directory"))
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": cache,
            "extraction": self.extraction.model_dump(),
            "ranking": self.ranking.model_dump(),
            "normalizer": self.normalizer.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read GLEANER_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - GLEANER_HTTP_TIMEOUT_SECONDS
    - GLEANER_LOG_LEVEL
    - GLEANER_CACHE_BACKEND
    - GLEANER_EXTRACTION_MAX_CONCURRENCY
    """

    model_config = SettingsConfigDict(
        env_prefix="GLEANER_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_backend: Optional[CacheBackendName] = None
    cache_dir: Optional[Path] = None
    cache_redis_url: Optional[str] = None
    cache_ttl_seconds: Optional[int] = None
    cache_max_items: Optional[int] = None

    extraction_timeout_ms: Optional[int] = None
    extraction_enable_retry: Optional[bool] = None
    extraction_enable_cache: Optional[bool] = None
    extraction_max_concurrency: Optional[int] = None

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
