"""
Configuration module for the Health Engine service.
Uses Pydantic BaseSettings for validation - the app fails fast on bad config.
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_TABLES_PATH = Path(__file__).parent / "engine.yaml"


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every field can be overridden with an environment variable of the
    same name (case-insensitive) or through a local .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Calendar Configuration
    health_engine_timezone: str = Field(
        default="UTC",
        description="IANA timezone that defines local midnight for day arithmetic",
    )

    # Engine Defaults
    health_engine_window_days: int = Field(default=21, description="Default data quality window in days")
    health_engine_dose_horizon_days: int = Field(default=30, description="Default dose generation horizon in days")
    health_engine_regeneration_buffer_days: int = Field(
        default=7, description="Days of future doses that must remain before regeneration"
    )
    health_engine_tables_path: Optional[str] = Field(
        default=None, description="Path to an engine tables YAML file (defaults to the bundled one)"
    )

    # API Configuration
    health_engine_host: str = Field(default="0.0.0.0", description="API host")
    health_engine_port: int = Field(default=8000, description="API port")
    health_engine_reload: bool = Field(default=False, description="Enable hot reload")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="json", description="\"json\" or \"text\"")

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Reject settings the engine cannot work with."""
        errors = []

        try:
            ZoneInfo(self.health_engine_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            errors.append(f"HEALTH_ENGINE_TIMEZONE '{self.health_engine_timezone}' is not a known timezone")

        for name in (
            "health_engine_window_days",
            "health_engine_dose_horizon_days",
            "health_engine_regeneration_buffer_days",
        ):
            if getattr(self, name) <= 0:
                errors.append(f"{name.upper()} must be a positive number of days")

        if self.log_format.lower() not in ("json", "text"):
            errors.append(f"LOG_FORMAT must be 'json' or 'text', got '{self.log_format}'")

        if self.health_engine_tables_path and not Path(self.health_engine_tables_path).is_file():
            errors.append(f"HEALTH_ENGINE_TABLES_PATH '{self.health_engine_tables_path}' does not exist")

        if errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            logger.critical(error_msg)
            raise ValueError(error_msg)

        return self

    @property
    def timezone(self) -> ZoneInfo:
        """The configured timezone as a ZoneInfo object."""
        return ZoneInfo(self.health_engine_timezone)

    @property
    def tables_path(self) -> Path:
        """Resolved path of the engine tables YAML file."""
        if self.health_engine_tables_path:
            return Path(self.health_engine_tables_path)
        return DEFAULT_TABLES_PATH


@lru_cache
def get_settings() -> Settings:
    return Settings()
