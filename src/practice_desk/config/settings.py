"""Configuration settings for the practice desk client."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlatSettings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Practice API
    api_url: str = Field(
        default="http://localhost:5000", validation_alias="PRACTICE_API_URL"
    )
    api_prefix: str = Field(default="/api/v1", validation_alias="PRACTICE_API_PREFIX")
    username: str = Field(..., validation_alias="PRACTICE_USERNAME")
    password: SecretStr = Field(..., validation_alias="PRACTICE_PASSWORD")
    timeout: float = Field(default=30.0, validation_alias="PRACTICE_TIMEOUT")
    # Failed requests are not retried unless explicitly configured
    max_retries: int = Field(default=0, validation_alias="PRACTICE_MAX_RETRIES")

    # Compliance
    compliance_end_of_day: bool = Field(
        default=True,
        validation_alias="COMPLIANCE_END_OF_DAY",
        description="Serialize compliance end dates as 23:59:59.999 of the end day",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> FlatSettings:
    """Get cached settings instance."""
    return FlatSettings()
