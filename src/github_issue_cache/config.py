"""Configuration settings for GitHub Issue Cache."""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PUBLIC_GITHUB_DOMAIN = "github.com"
SEARCH_POOLS = frozenset({"search", "code_search"})


class RateLimitConfig(BaseModel):
    """Configuration for rate limit monitoring.

    Thresholds are absolute request counts per quota bucket. The search
    bucket is an order of magnitude smaller than core, so its thresholds
    are tracked separately.
    """

    core_warning_threshold: int = Field(
        default=200,
        ge=0,
        description="Remaining core requests below which status is WARNING",
    )
    core_critical_threshold: int = Field(
        default=50,
        ge=0,
        description="Remaining core requests below which status is CRITICAL",
    )
    search_warning_threshold: int = Field(
        default=10,
        ge=0,
        description="Remaining search requests below which status is WARNING",
    )
    search_critical_threshold: int = Field(
        default=3,
        ge=0,
        description="Remaining search requests below which status is CRITICAL",
    )

    # Behavior
    track_from_headers: bool = Field(
        default=True,
        description="Passively track limits from response headers",
    )

    def thresholds_for(self, pool: str) -> tuple[int, int]:
        """Get (warning, critical) thresholds for a quota bucket name."""
        if pool in SEARCH_POOLS:
            return self.search_warning_threshold, self.search_critical_threshold
        return self.core_warning_threshold, self.core_critical_threshold


class RetryConfig(BaseModel):
    """Configuration for outbound request retries and timeouts.

    Only server-class failures are retried. Rate limit failures are
    surfaced immediately so callers can fall back to cached data.
    """

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after the first attempt for 5xx/transport failures",
    )
    backoff_base: float = Field(
        default=2.0,
        ge=1.0,
        description="Exponential backoff base (delay = base ** attempt seconds)",
    )
    connect_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Connect timeout per request",
    )
    read_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Read timeout per request",
    )
    page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Items per page for paginated list endpoints",
    )


class SyncConfig(BaseModel):
    """Configuration for issue sync behavior."""

    staleness_minutes: int = Field(
        default=5,
        ge=0,
        description="Age of synced_at after which a repository is stale",
    )

    @property
    def staleness(self) -> timedelta:
        """Get the staleness window as a timedelta."""
        return timedelta(minutes=self.staleness_minutes)


class SearchConfig(BaseModel):
    """Configuration for issue search."""

    per_page: int = Field(
        default=30,
        ge=1,
        le=100,
        description="Default page size for search results",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # Database
    # --------------------------------------------------------------------------
    database_url: str = Field(
        default="sqlite+aiosqlite:///./github_issues.db",
        description="Async SQLite database connection string",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    default_domain: str = Field(
        default=PUBLIC_GITHUB_DOMAIN,
        description="Domain used when a command does not name one",
    )
    github_token: str = Field(
        default="",
        description="GitHub personal access token for the default domain",
    )
    github_tokens: dict[str, str] = Field(
        default_factory=dict,
        description="Additional tokens keyed by domain (GitHub Enterprise hosts)",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    user_id: int = Field(
        default=1,
        ge=1,
        description="Local user that owns cached repositories",
    )

    # --------------------------------------------------------------------------
    # Rate Limiting & Retries
    # --------------------------------------------------------------------------
    rate_limit: RateLimitConfig = Field(
        default_factory=RateLimitConfig,
        description="Rate limit monitoring configuration",
    )
    retry: RetryConfig = Field(
        default_factory=RetryConfig,
        description="Retry and timeout configuration",
    )

    # --------------------------------------------------------------------------
    # Sync & Search
    # --------------------------------------------------------------------------
    sync: SyncConfig = Field(
        default_factory=SyncConfig,
        description="Issue sync configuration",
    )
    search: SearchConfig = Field(
        default_factory=SearchConfig,
        description="Issue search configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )

    def tokens_by_domain(self) -> dict[str, str]:
        """Merge the default-domain token with per-domain tokens."""
        tokens = {domain: token for domain, token in self.github_tokens.items() if token}
        if self.github_token:
            tokens.setdefault(self.default_domain, self.github_token)
        return tokens


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
