"""Process settings.

Uses pydantic-settings for type-safe configuration from environment variables.
Profiling thresholds live in ``docprofiler.quality.config``; these settings only
cover how the process runs (logging, paging, where the default profile config is).
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden via environment variables.
    Prefix: DOCPROFILER_
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCPROFILER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Document sources
    batch_size: int = Field(
        default=500,
        ge=1,
        description="Number of documents fetched per source batch",
    )

    # Profile configuration used when the CLI gets no --config
    config_path: Path | None = Field(
        default=None,
        description="Path to a YAML profile configuration file",
    )

    # Logging
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="console")  # 'json' or 'console'


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
