"""
Configuration management for the Weekly Meal Planner service
Centralized settings with validation, read from the environment or .env
"""

from typing import List, Optional
from enum import Enum

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings with validation"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Weekly Meal Planner"
    app_version: str = "1.0.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)

    # Security
    cors_origins: str = "http://localhost:3000"
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST"])

    # Rate Limiting
    rate_limit_requests: int = Field(default=100, ge=1)
    rate_limit_window: int = Field(default=900, ge=1)  # seconds
    max_request_size: int = Field(default=10 * 1024 * 1024, ge=1024)  # 10MB

    # Completion provider
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1500, ge=1)
    ai_max_attempts: int = Field(default=3, ge=1, le=10)
    ai_backoff_base: float = Field(default=1.0, ge=0.0)  # seconds
    ai_request_timeout: float = Field(default=60.0, ge=1.0)

    # Slack delivery
    slack_webhook_url: Optional[str] = None
    slack_timeout: float = Field(default=10.0, ge=1.0)

    # Monitoring & Logging
    log_level: LogLevel = LogLevel.INFO
    enable_access_logs: bool = True
    enable_metrics: bool = True

    # Performance
    max_concurrent_requests: int = Field(default=100, ge=1)
    keep_alive_timeout: int = Field(default=5, ge=1)

    @field_validator("openai_api_key", "slack_webhook_url", mode="before")
    @classmethod
    def blank_as_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_debug(self):
        if self.environment == Environment.PRODUCTION and self.debug:
            raise ValueError("Debug mode not allowed in production")
        return self

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def ai_configured(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def slack_configured(self) -> bool:
        return bool(self.slack_webhook_url)

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings"""
    return settings


def validate_production_config(config: Settings) -> List[str]:
    """Validate configuration for production deployment"""
    issues = []

    if config.debug:
        issues.append("Debug mode should be disabled in production")

    if "*" in config.cors_origin_list:
        issues.append("CORS origins should not include wildcards in production")

    if config.log_level == LogLevel.DEBUG:
        issues.append("Log level should not be DEBUG in production")

    if not config.ai_configured:
        issues.append("OPENAI_API_KEY is not set; meal plans will come from the offline catalog only")

    return issues
