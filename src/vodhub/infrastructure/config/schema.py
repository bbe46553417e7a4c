"""Pydantic configuration models with validation."""

from __future__ import annotations

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

from vodhub.domain.entities.search import ProviderSite

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

DEFAULT_BLOCKLIST: list[str] = [
    "adult",
    "erotic",
    "porn",
    "xxx",
    "hentai",
    "18+",
]


class ProviderSiteConfig(BaseModel):
    """One provider entry from the ``providers`` YAML list."""

    key: str
    name: str
    api: str
    enabled: bool = True
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("key", "api")
    @classmethod
    def _validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("provider key and api must not be empty")
        return v.strip()

    def to_site(self) -> ProviderSite:
        return ProviderSite(
            key=self.key,
            name=self.name or self.key,
            api=self.api,
            enabled=self.enabled,
            headers=dict(self.headers),
        )


class SearchConfig(BaseModel):
    """Fan-out search behaviour (YAML section: search.*)."""

    provider_timeout_seconds: float = Field(
        default=20.0,
        description="Deadline for one ordinary provider call.",
    )
    builtin_timeout_seconds: float = Field(
        default=10.0,
        description="Deadline for the built-in short-form provider call.",
    )
    max_results_per_provider: int = Field(
        default=50,
        description="Results kept per provider before emission.",
    )
    content_filter_enabled: bool = Field(
        default=True,
        description="Drop results whose type_name contains a blocklisted word.",
    )
    blocklist: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BLOCKLIST),
        description="Content-classification keywords (case-insensitive).",
    )
    cache_time_seconds: int = Field(
        default=7200,
        description="Cache-Control max-age for non-empty JSON search responses.",
    )
    max_pages: int = Field(
        default=1,
        description="Pages fetched per provider when it reports pagecount > 1.",
    )

    @field_validator("provider_timeout_seconds", "builtin_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("search timeouts must be > 0")
        return v

    @field_validator("max_results_per_provider", "max_pages")
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v


class BuiltinProviderConfig(BaseModel):
    """Built-in short-form video provider (YAML section: builtin.*)."""

    enabled: bool = True
    key: str = "shortvideo"
    name: str = "Short Videos"
    base_url: str = "https://api.r2afosne.dpdns.org"
    limit: int = Field(default=20, description="Items requested per search.")


class ProbeConfig(BaseModel):
    """Source prober settings (YAML section: probe.*)."""

    timeout_seconds: float = Field(
        default=5.0,
        description="Bounded timeout for one candidate probe.",
    )
    max_sample_bytes: int = Field(
        default=1_048_576,
        description="Bytes read from the first segment to measure throughput.",
    )

    @field_validator("timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("probe.timeout_seconds must be > 0")
        return v


class PlaybackConfig(BaseModel):
    """Ad-segment relay settings (YAML section: playback.*)."""

    adblock_enabled: bool = Field(
        default=True,
        description="Default of the persisted 'block ads' preference.",
    )
    discontinuity_marker: str = Field(
        default="#EXT-X-DISCONTINUITY",
        description="Manifest token that marks ad boundaries.",
    )
    proxy_segments: bool = Field(
        default=False,
        description="Route media segments of relayed manifests via /proxy.",
    )


class ProxyConfig(BaseModel):
    """Media proxy settings (YAML section: proxy.*)."""

    user_agent: str = Field(
        default=BROWSER_USER_AGENT,
        description="Fallback User-Agent when the caller sends none.",
    )


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/search/builtin/...).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="vodhub", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP client (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Default timeout for outgoing HTTP requests.",
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
        default="vodhub/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for provider search requests.",
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

    providers: list[ProviderSiteConfig] = Field(default_factory=list)
    search: SearchConfig = Field(default_factory=SearchConfig)
    builtin: BuiltinProviderConfig = Field(default_factory=BuiltinProviderConfig)
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("providers")
    @classmethod
    def _validate_unique_keys(
        cls, v: list[ProviderSiteConfig]
    ) -> list[ProviderSiteConfig]:
        seen: set[str] = set()
        for site in v:
            if site.key in seen:
                raise ValueError(f"duplicate provider key: {site.key}")
            seen.add(site.key)
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def provider_sites(self) -> list[ProviderSite]:
        """Configured providers as domain objects (enabled and disabled)."""
        return [p.to_site() for p in self.providers]

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "providers": [p.model_dump() for p in self.providers],
            "search": self.search.model_dump(),
            "builtin": self.builtin.model_dump(),
            "probe": self.probe.model_dump(),
            "playback": self.playback.model_dump(),
            "proxy": self.proxy.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read VODHUB_* variables, converts
    them to a dict of set values and merges that into YAML/defaults
    before validating AppConfig.

    Supported env var examples (flat, explicit):
    - VODHUB_ENVIRONMENT
    - VODHUB_HTTP_TIMEOUT_SECONDS
    - VODHUB_LOG_LEVEL
    - VODHUB_CONTENT_FILTER_ENABLED
    - VODHUB_ADBLOCK_ENABLED
    """

    model_config = SettingsConfigDict(
        env_prefix="VODHUB_",
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

    content_filter_enabled: Optional[bool] = None
    provider_timeout_seconds: Optional[float] = None
    adblock_enabled: Optional[bool] = None
    proxy_user_agent: Optional[str] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
