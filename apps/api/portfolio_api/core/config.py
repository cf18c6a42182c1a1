from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=["../../.env", ".env"], extra="ignore")

    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"

    OPENAI_API_KEY: str | None = None

    # === Fit Assessment ===
    FIT_ASSESSMENT_MODEL: str = "gpt-4o-mini"
    FIT_ASSESSMENT_MAX_TOKENS: int = 4096
    FIT_ASSESSMENT_MAX_BODY_BYTES: int = 50 * 1024  # 50 KB

    # Shared secret for X-API-Key; unset disables the check (local dev only)
    API_KEY: str | None = None

    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # === Job Description URL Fetch ===
    JD_FETCH_USER_AGENT: str = "Mozilla/5.0 (compatible; FitAssessmentBot/1.0)"
    JD_DNS_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        description="Timeout for resolving a job posting hostname before the fetch deadline starts.",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the root log level name."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(_LOG_LEVELS))}")
        return level

    @field_validator("JD_DNS_TIMEOUT_SECONDS")
    @classmethod
    def validate_dns_timeout(cls, v: float) -> float:
        """Validate DNS lookup timeout (seconds)."""
        if v < 0.1:
            raise ValueError("JD_DNS_TIMEOUT_SECONDS must be >= 0.1 seconds")
        if v > 10.0:
            raise ValueError("JD_DNS_TIMEOUT_SECONDS must be <= 10 seconds (fetch deadline)")
        return v

    @field_validator("FIT_ASSESSMENT_MAX_TOKENS", "FIT_ASSESSMENT_MAX_BODY_BYTES")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be >= 1")
        return v


settings = Settings()
