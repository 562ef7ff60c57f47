"""
Configuration management using Pydantic.

All settings can be overridden with environment variables prefixed with
ORDERBOOKS_, e.g. ORDERBOOKS_LOG_LEVEL=DEBUG.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="ORDERBOOKS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_dir: Optional[str] = Field(
        default=None,
        description="Directory for log files (console only when unset)"
    )
    use_json_logs: bool = Field(
        default=False,
        description="Emit logs as JSON lines"
    )

    # Startup
    seed_demo_books: bool = Field(
        default=True,
        description="Create the demonstration books when the menu starts"
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    """
    Get the settings instance, read once from the environment.

    Returns:
        Settings instance
    """
    return Settings()
