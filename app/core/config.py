"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. The cache backend (BACKEND_URL, BACKEND_TOKEN) is
optional: leaving either unset runs the app with caching disabled.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Nothing here is required at startup. TTLs are validated to be
    positive in validate_cache_ttls.
    """

    # App
    app_name: str = "learnhub"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000"

    # Cache backend (hosted Redis). Both values are needed to activate caching.
    cache_enabled: bool = True
    backend_url: str = ""
    backend_token: SecretStr = SecretStr("")
    backend_socket_timeout: float = 5.0

    # Cache TTLs in seconds
    cache_default_ttl: int = 3600  # 1 hour
    cache_ttl_course: int = 3600
    cache_ttl_enrollment_structure: int = 900
    cache_ttl_admin_enrollments: int = 300
    cache_ttl_grandtest_questions: int = 1800

    # Admin cache routes: disabled (503) unless set.
    cache_admin_token: SecretStr | None = None

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
    def validate_cache_ttls(self) -> "Settings":
        """Reject zero or negative TTLs (the backend needs EX >= 1)."""
        for name in (
            "cache_default_ttl",
            "cache_ttl_course",
            "cache_ttl_enrollment_structure",
            "cache_ttl_admin_enrollments",
            "cache_ttl_grandtest_questions",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be a positive number of seconds")
        return self

    @property
    def cache_configured(self) -> bool:
        """True when both backend URL and token are set."""
        return bool(self.backend_url and self.backend_token.get_secret_value())


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
