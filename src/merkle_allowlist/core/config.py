"""
Merkle Allowlist Generator - Configuration
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    # Application
    APP_NAME: str = "Merkle Allowlist Generator"
    VERSION: str = "1.0.0"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Artifacts
    INPUT_PATH: str = "whitelist.json"
    OUTPUT_PATH: str = "proofs.json"

    # Address decoding (None accepts any byte length)
    ADDRESS_BYTE_LENGTH: Optional[int] = Field(default=None, ge=1, le=64)

    # Re-verify every proof against the root before writing
    VERIFY_PROOFS: bool = True

    # Metrics
    METRICS_ENABLED: bool = False
    METRICS_TEXTFILE: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
