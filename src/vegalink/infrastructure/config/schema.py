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

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


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


class HttpSettings(BaseModel):
    """Fetch settings threaded into every resolver call."""

    timeout_seconds: float = Field(
        default=15.0,
        description="Per-request timeout for hosting pages and APIs.",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="Browser-like User-Agent; most hosts block bot agents.",
    )
    follow_redirects: bool = Field(
        default=True,
        description="Whether fetches follow HTTP redirects.",
    )
    extra_headers: dict[str, str] = Field(
        default={
            "Accept": "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        },
        description="Headers sent with every fetch in addition to User-Agent.",
    )

    @field_validator("timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return v

    def default_headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, **self.extra_headers}


class AddonConfig(BaseModel):
    """Configuration for the Stremio addon and the provider fan-out.

    All values configurable via YAML (addon section) or ENV vars.
    """

    addon_id: str = Field(
        default="org.vega.stremio.addon",
        description="Stremio manifest id.",
    )
    addon_name: str = Field(
        default="Vega Providers",
        description="Display name in the Stremio addon list.",
    )
    enabled_providers: list[str] = Field(
        default_factory=list,
        description="Provider values enabled by default (empty = all registered).",
    )
    max_concurrent_providers: int = Field(
        default=8,
        description="Max parallel provider fan-out per request.",
    )
    provider_timeout_seconds: float = Field(
        default=30.0,
        description="Per-provider timeout in seconds.",
    )
    max_concurrent_resolvers: int = Field(
        default=10,
        description="Max parallel host resolver runs per provider.",
    )
    resolver_timeout_seconds: float = Field(
        default=20.0,
        description="Per-resolver timeout in seconds (covers the whole redirect chain).",
    )
    default_provider_label: str = Field(
        default="Vega",
        description="Label shown when a provider name cleans down to nothing.",
    )
    provider_dir: Path | None = Field(
        default=Path("./providers"),
        description="Directory with YAML link lists and Python provider files.",
    )
    subtitles_url: str | None = Field(
        default="https://opensubtitles-v3.strem.io",
        description="Base URL of a Stremio subtitles addon (None disables lookup).",
    )

    @field_validator("provider_dir", mode="before")
    @classmethod
    def _validate_provider_dir(cls, v: Any) -> Path | None:
        return None if v is None else _normalize_path(v)

    @field_validator("provider_timeout_seconds", "resolver_timeout_seconds")
    @classmethod
    def _validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/cache/addon).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="vegalink", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP fetch capability (YAML section: http.*)
    http: HttpSettings = Field(default_factory=HttpSettings)

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

    # TMDB API key (catalog-id resolution; optional)
    tmdb_api_key: str | None = Field(
        default=None,
        description="TMDB API key for IMDb -> TMDB id mapping.",
    )

    # Addon configuration (YAML section: addon.*)
    addon: AddonConfig = Field(default_factory=AddonConfig)

    # Cache (YAML section: cache.*)
    cache_dir: Path = Field(
        default=Path("./.cache/vegalink"),
        validation_alias=AliasChoices(
            "cache_dir",
            AliasPath("cache", "dir"),
        ),
        description="Cache directory (disk).",
    )
    cache_ttl_seconds: int = Field(
        default=86_400,
        validation_alias=AliasChoices(
            "cache_ttl_seconds",
            AliasPath("cache", "ttl_seconds"),
        ),
        description="Cache TTL in seconds.",
    )

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("cache_ttl_seconds")
    @classmethod
    def _validate_cache_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache_ttl_seconds must be >= 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read VEGALINK_* variables, converts
    them to a dict of set values and merges that over YAML/defaults before
    validating AppConfig.

    Supported env var examples (flat, explicit):
    - VEGALINK_HTTP_TIMEOUT_SECONDS
    - VEGALINK_LOG_LEVEL
    - VEGALINK_TMDB_API_KEY
    - VEGALINK_RESOLVER_TIMEOUT_SECONDS
    - VEGALINK_PROVIDER_DIR
    """

    model_config = SettingsConfigDict(
        env_prefix="VEGALINK_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_dir: Optional[Path] = None
    cache_ttl_seconds: Optional[int] = None

    tmdb_api_key: Optional[str] = None

    provider_timeout_seconds: Optional[float] = None
    resolver_timeout_seconds: Optional[float] = None
    provider_dir: Optional[Path] = None

    @field_validator("cache_dir", "provider_dir", mode="before")
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
