"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Invoice Settlement Engine"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/invoice_settlement"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "console" if DEBUG else "json")

    # Tenancy
    # Used when a request does not carry an X-Tenant-ID header.
    DEFAULT_TENANT_ID: str = os.getenv("DEFAULT_TENANT_ID", "default")

    # Settlement
    # SELECT ... FOR UPDATE on the invoice row for the whole settlement.
    # The version check on write is applied either way.
    INVOICE_ROW_LOCKING: bool = (
        os.getenv("INVOICE_ROW_LOCKING", "true").lower() == "true"
    )
    TRANSITION_MAX_ATTEMPTS: int = max(
        1, int(os.getenv("TRANSITION_MAX_ATTEMPTS", "3"))
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
