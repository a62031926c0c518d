# -*- coding: utf-8 -*-
"""
Normalization service configuration using Pydantic BaseSettings.
"""
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central service configuration loaded from environment variables.
    Pydantic's BaseSettings provides validation, type casting and reading
    from .env files.

    Transform selection is not configured here: it travels with each
    request as a mode profile.
    """

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8001

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # API Documentation (disable in production)
    DOCS_ENABLED: bool = True

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = False

    # Request tracking
    REQUEST_ID_HEADER: str = "X-Request-ID"

    # Compression
    GZIP_MIN_SIZE: int = 1000

    # ==========================================================================
    # Normalization Pipeline Configuration
    # ==========================================================================

    # Mode used when a request does not name one (plain, editorial, commerce, custom)
    DEFAULT_MODE: str = "plain"

    # Reject larger inputs at the API boundary (characters)
    MAX_INPUT_CHARS: int = 2_000_000

    # Pre-step: strip Office / Google Docs residue before sanitizing
    ENABLE_WORD_CLEANUP: bool = True

    # Keep images during Word cleanup (images are dropped by default)
    INCLUDE_IMAGES: bool = False

    # Normalize typographic dashes and spaces in link paths
    CLEAN_URLS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Global configuration instance
settings = Settings()
