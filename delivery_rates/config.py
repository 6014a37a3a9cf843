"""Configuration loading for the delivery rates system.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Rate calculation
    rate_policy: Literal["lenient", "strict"] = Field(
        default="lenient",
        description="Validation policy applied to delivery groups",
    )

    # Event store
    seed_events_path: str = Field(
        default="",
        description="JSON file with events to load into the store at startup",
    )

    # Report output
    currency_symbol: str = Field(
        default="R$",
        description="Currency symbol shown next to amounts",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["report", "cli"] = Field(
        default="report",
        description="Run mode",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose output",
    )

    @field_validator("currency_symbol")
    @classmethod
    def validate_currency_symbol(cls, v: str) -> str:
        """Ensure currency symbol is not blank."""
        if not v.strip():
            raise ValueError("currency_symbol must not be blank")
        return v.strip()


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
