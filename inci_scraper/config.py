"""
Configuration management for the INCIDecoder scraper.
Handles environment variables and application settings.
"""
import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Firecrawl (content-fetching service)
    # Loaded from environment variables, NEVER hardcoded
    FIRECRAWL_API_KEY: Optional[str] = os.getenv("FIRECRAWL_API_KEY")
    FIRECRAWL_API_URL: str = os.getenv("FIRECRAWL_API_URL", "https://api.firecrawl.dev")

    # Source site
    SITE_BASE_URL: str = os.getenv("SITE_BASE_URL", "https://incidecoder.com")
    SITE_NAME: str = os.getenv("SITE_NAME", "INCIDecoder")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")  # json or console
    LOG_BUFFER_SIZE: int = int(os.getenv("LOG_BUFFER_SIZE", "500"))

    # Request settings
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "60"))
    PRODUCT_SETTLE_MS: int = int(os.getenv("PRODUCT_SETTLE_MS", "3000"))

    # Rate limiting (seconds). Product scraping is the most expensive call.
    PAGE_FETCH_DELAY: float = float(os.getenv("PAGE_FETCH_DELAY", "0.75"))
    BRAND_SCAN_DELAY: float = float(os.getenv("BRAND_SCAN_DELAY", "0.5"))
    PRODUCT_SCRAPE_DELAY: float = float(os.getenv("PRODUCT_SCRAPE_DELAY", "1.0"))
    PAUSE_POLL_INTERVAL: float = float(os.getenv("PAUSE_POLL_INTERVAL", "0.2"))

    # Auto-pagination safety bound (used when no end offset is given)
    AUTO_PAGINATE_MAX_PAGES: int = int(os.getenv("AUTO_PAGINATE_MAX_PAGES", "200"))

    # Export
    EXPORT_DIR: str = os.getenv("EXPORT_DIR", "exports")

    @classmethod
    def is_firecrawl_configured(cls) -> bool:
        """Check if the Firecrawl API key is configured."""
        return bool(cls.FIRECRAWL_API_KEY)

    @classmethod
    def get_missing_vars(cls) -> list:
        """Return list of missing required environment variables."""
        missing = []
        if not cls.FIRECRAWL_API_KEY:
            missing.append("FIRECRAWL_API_KEY")
        return missing


config = Config()
