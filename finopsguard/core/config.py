"""Application Configuration using Pydantic Settings."""

import os
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_env_file() -> str:
    """
    Determine which .env file to load based on APP_ENV.

    Returns:
        Path to the .env file to load
    """
    app_env = os.getenv("APP_ENV", "development")
    base_dir = Path(__file__).parent.parent.parent  # repository root

    if app_env == "test":
        env_file = base_dir / ".env.test"
        if env_file.exists():
            return str(env_file)

    if app_env == "production":
        env_file = base_dir / ".env.production"
        if env_file.exists():
            return str(env_file)

    # Default to .env
    return str(base_dir / ".env")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=get_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "FinOpsGuard"
    APP_ENV: str = "development"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Mock AWS mode: every provider is replaced by deterministic fixtures
    MOCK_AWS: bool = False

    # Base credentials used to call STS (empty = botocore default chain)
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_SESSION_TOKEN: str = ""
    AWS_DEFAULT_REGION: str = "us-east-1"

    # STS and Cost Explorer are global services served from us-east-1
    STS_REGION: str = "us-east-1"
    COST_EXPLORER_REGION: str = "us-east-1"
    ASSUME_ROLE_DURATION_SECONDS: int = 3600

    # botocore client configuration
    AWS_CONNECT_TIMEOUT: int = 10
    AWS_READ_TIMEOUT: int = 30
    AWS_MAX_ATTEMPTS: int = 3  # standard retry mode, throttling/transient errors only

    # Scan pipeline
    SCAN_TIMEOUT_SECONDS: float = 120.0
    COST_WINDOW_DAYS: int = 30
    CPU_LOOKBACK_DAYS: int = 7
    RULES_PATH: str = ""  # empty = packaged default rules

    @field_validator(
        "AWS_CONNECT_TIMEOUT",
        "AWS_READ_TIMEOUT",
        "AWS_MAX_ATTEMPTS",
        "SCAN_TIMEOUT_SECONDS",
        "COST_WINDOW_DAYS",
        "CPU_LOOKBACK_DAYS",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Reject zero or negative timeouts and windows."""
        if v <= 0:
            raise ValueError("Value must be greater than zero")
        return v

    @field_validator("COST_WINDOW_DAYS")
    @classmethod
    def validate_cost_window(cls, v: int) -> int:
        """Cost Explorer queries are bounded to one year."""
        if v > 365:
            raise ValueError("COST_WINDOW_DAYS cannot exceed 365 days")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level '{v}'")
        return level

    @property
    def has_explicit_aws_credentials(self) -> bool:
        """True when both base access key and secret are configured."""
        return bool(self.AWS_ACCESS_KEY_ID.strip() and self.AWS_SECRET_ACCESS_KEY.strip())


# Create global settings instance
settings = Settings()
