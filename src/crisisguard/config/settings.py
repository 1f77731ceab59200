"""
CRISISGUARD Application Settings

Configuration management using Pydantic Settings.
All values are loaded from environment variables (CRISISGUARD_ prefix)
once at startup and passed explicitly into each component.

SAFETY-CRITICAL: Thresholds in this module decide when a human
responder is summoned. Changes require clinical review.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DetectionSettings(BaseSettings):
    """Text normalization and lexical analysis configuration."""

    model_config = SettingsConfigDict(env_prefix="CRISISGUARD_DETECTION_")

    context_window_chars: int = Field(
        default=150, ge=20, le=1000,
        description="Characters inspected either side of a lexical match",
    )
    match_confidence_threshold: float = Field(
        default=0.7, ge=0.0, le=1.0,
        description="Minimum calibrated confidence to keep a lexical match",
    )
    mixed_language_threshold: float = Field(
        default=0.3, ge=0.0, le=1.0,
        description="Secondary language score that flags mixed-language text",
    )
    fallback_confidence_factor: float = Field(
        default=0.6, ge=0.0, le=1.0,
        description="Confidence multiplier when no table exists for the language",
    )
    max_text_length: int = Field(default=10_000, ge=100, le=100_000)


class StatisticalSettings(BaseSettings):
    """Statistical scorer configuration."""

    model_config = SettingsConfigDict(env_prefix="CRISISGUARD_STATISTICAL_")

    scorer_backend: Literal["keyword", "transformers"] = Field(
        default="keyword",
        description="Scorer implementation behind the statistical analyzer",
    )
    timeout_seconds: float = Field(
        default=1.5, gt=0.0, le=10.0,
        description="Hard timeout for one statistical analysis",
    )
    model_name: str = Field(
        default="facebook/bart-large-mnli",
        description="HuggingFace model used by the transformers backend",
    )


class AggregationSettings(BaseSettings):
    """Risk fusion configuration."""

    model_config = SettingsConfigDict(env_prefix="CRISISGUARD_AGGREGATION_")

    severity_confidence_floor: float = Field(default=0.5, ge=0.0, le=1.0)
    degraded_confidence_penalty: float = Field(default=0.8, gt=0.0, le=1.0)
    escalation_risk_threshold: int = Field(default=70, ge=0, le=100)


class EscalationSettings(BaseSettings):
    """Escalation backend and retry configuration."""

    model_config = SettingsConfigDict(env_prefix="CRISISGUARD_ESCALATION_")

    backend_timeout_seconds: float = Field(default=3.0, gt=0.0, le=30.0)
    max_attempts: int = Field(
        default=2, ge=1, le=5,
        description="Total backend attempts (1 initial + retries)",
    )
    backoff_multiplier: float = Field(default=0.2, ge=0.0, le=10.0)
    backoff_min_seconds: float = Field(default=0.1, ge=0.0, le=10.0)
    backoff_max_seconds: float = Field(default=1.0, ge=0.0, le=30.0)
    default_country_code: str = Field(default="US", min_length=2, max_length=4)
    backend_url: Optional[str] = Field(
        default=None,
        description="Escalation service base URL; in-memory backend when unset",
    )
    backend_api_key: SecretStr = Field(default=SecretStr(""))

    @model_validator(mode="after")
    def validate_backoff_window(self) -> "EscalationSettings":
        """Ensure backoff bounds are ordered."""
        if self.backoff_min_seconds > self.backoff_max_seconds:
            raise ValueError("backoff_min_seconds must not exceed backoff_max_seconds")
        return self


class MonitoringSettings(BaseSettings):
    """Error tracking configuration."""

    model_config = SettingsConfigDict(env_prefix="CRISISGUARD_MONITORING_")

    sentry_dsn: SecretStr = Field(default=SecretStr(""), description="Sentry DSN")
    sentry_traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    resources_config_path: Optional[str] = Field(
        default=None,
        description="Optional JSON file overriding built-in crisis resources",
    )


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with the
    CRISISGUARD_ prefix. Nested groups use their own prefix, e.g.
    CRISISGUARD_STATISTICAL_TIMEOUT_SECONDS.

    Usage:
        settings = get_settings()
        timeout = settings.statistical.timeout_seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="CRISISGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    api_version: str = Field(default="v1", description="API version prefix")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # Nested settings
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    statistical: StatisticalSettings = Field(default_factory=StatisticalSettings)
    aggregation: AggregationSettings = Field(default_factory=AggregationSettings)
    escalation: EscalationSettings = Field(default_factory=EscalationSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, construct Settings directly and inject it.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
