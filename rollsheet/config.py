"""Application configuration using pydantic-settings."""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from ROLLSHEET_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ROLLSHEET_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "WARNING"
    debug: bool = False  # Forces DEBUG logging

    # Rolling
    random_seed: int | None = None  # Seeds CLI rolls when --seed is not given

    # Display
    # Used when a roll template's display format is blank; {template} is the template name
    default_display_format: str = "{template}: {result}"
    # Stands in for an ad-hoc [formula] that failed to evaluate
    adhoc_error_placeholder: str = "ERR"

    # Sheet files
    sheet_encoding: str = "utf-8"

    @property
    def effective_log_level(self) -> int:
        """Numeric logging level, honouring the debug switch."""
        if self.debug:
            return logging.DEBUG
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.WARNING


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias
settings = get_settings()
