from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Rate limiter settings loaded from environment variables.

    All settings can be configured via ``RATELIMIT_*`` environment variables
    or a .env file.
    """

    # Counter store driver: local | shared (legacy: memory | redis)
    driver: str = "local"

    # Quota: max_requests per identity per duration_ms window
    duration_ms: int = 60 * 60 * 1000  # 1 hour
    max_requests: int = 2500

    # Redis settings (shared driver only)
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = 5.0
    key_prefix: str = "limit"

    # Response headers
    header_remaining: str = "X-RateLimit-Remaining"
    header_reset: str = "X-RateLimit-Reset"
    header_total: str = "X-RateLimit-Limit"
    disable_headers: bool = False

    # Denial response
    status_code: int = 429
    error_message: Optional[str] = None
    throw: bool = False

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    @field_validator("max_requests")
    @classmethod
    def validate_max_requests(cls, v: int) -> int:
        """A zero quota is allowed and denies every request."""
        if v < 0:
            raise ValueError("max_requests must not be negative")
        return v

    @field_validator("duration_ms")
    @classmethod
    def validate_duration(cls, v: int) -> int:
        """Validate the window length is positive."""
        if v <= 0:
            raise ValueError("duration_ms must be positive")
        return v

    @field_validator("status_code")
    @classmethod
    def validate_status_code(cls, v: int) -> int:
        if not 400 <= v <= 599:
            raise ValueError("status_code must be a 4xx or 5xx code")
        return v

    @field_validator("redis_socket_timeout")
    @classmethod
    def validate_timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("redis_socket_timeout must be positive")
        return v

    model_config = SettingsConfigDict(
        env_prefix="RATELIMIT_",
        env_file=".env",
        extra="ignore",
    )


# Global settings instance
settings = Settings()
