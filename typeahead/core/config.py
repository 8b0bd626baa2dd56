"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Invalid combinations are rejected at load time.
"""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from typeahead.core.constants import DEBOUNCE_MS, SEARCH_RESULT_LIMIT


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "typeahead"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request / middleware
    request_id_header: str = "X-Request-ID"

    # Collections API (reports, individuals, organizations)
    search_api_base_url: str = "http://localhost:4000/api"
    search_api_timeout_seconds: float = 10.0
    search_result_limit: int = SEARCH_RESULT_LIMIT  # per source, per round

    # Type-ahead behaviour
    search_debounce_ms: int = DEBOUNCE_MS
    default_locale: str = "en"
    search_rate_limit: str = "60/minute"

    # Analytics capture on result selection (never affects search results)
    analytics_enabled: bool = True

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_search_settings(self) -> "Settings":
        """Reject a blank API base URL, negative debounce, out-of-range limit."""
        if not self.search_api_base_url.strip():
            raise ValueError("SEARCH_API_BASE_URL must not be blank")
        if self.search_debounce_ms < 0:
            raise ValueError(
                f"SEARCH_DEBOUNCE_MS must be >= 0, got: {self.search_debounce_ms}"
            )
        if not 1 <= self.search_result_limit <= 50:
            raise ValueError(
                f"SEARCH_RESULT_LIMIT must be between 1 and 50, got: {self.search_result_limit}"
            )
        return self

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000.0

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached settings. Tests call get_settings.cache_clear() after changing env."""
    return Settings()
