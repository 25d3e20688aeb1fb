"""
Configuration settings for the application.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Supabase / PostgREST settings
    SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
    SUPABASE_KEY: str | None = os.getenv("SUPABASE_KEY")
    SUPABASE_TIMEOUT_SECONDS: float = float(
        os.getenv("SUPABASE_TIMEOUT_SECONDS", "10")
    )
    PRODUCTS_TABLE: str = os.getenv("PRODUCTS_TABLE", "products")
    CATEGORIES_TABLE: str = os.getenv("CATEGORIES_TABLE", "categories")

    # Listing defaults
    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
    MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # Auth (not wired yet, every request runs as this owner)
    DEFAULT_OWNER_ID: str = os.getenv(
        "DEFAULT_OWNER_ID",
        "00000000-0000-0000-0000-000000000001",
    )

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    @property
    def backend_configured(self) -> bool:
        """Return True when the Supabase gateway has a URL and key."""
        return bool(self.SUPABASE_URL and self.SUPABASE_KEY)

    def __init__(self):
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        logging.basicConfig(level=self.log_level)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            f"Config initialized with environment={self.ENVIRONMENT}, "
            f"debug={self.debug}, log_level={self.log_level}"
        )


# Create a global settings instance for import
settings = Settings()
