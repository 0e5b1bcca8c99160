"""
Configuration management for utilkit.
Loads environment variables and provides a typed, read-only settings object.
"""

import codecs
from typing import List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide settings loaded from environment variables (UTILKIT_*)."""

    model_config = SettingsConfigDict(
        env_prefix="UTILKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True
    )

    # Text
    encoding: str = "UTF-8"

    # Application
    app_env: Literal["development", "production"] = "development"
    log_level: str = "INFO"
    enable_debug_logging: bool = False
    log_dir: str = "logs"

    # Outbound HTTP
    fetch_timeout: float = 30.0
    fetch_allowed_status: List[int] = [200]

    # Request introspection
    trust_proxy: bool = False

    @field_validator("encoding")
    @classmethod
    def check_encoding(cls, value: str) -> str:
        """Reject codec names Python does not know about."""
        try:
            codecs.lookup(value)
        except LookupError:
            raise ValueError(f"Unknown text encoding: {value}") from None
        return value

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


# Global settings instance
settings = Settings()
