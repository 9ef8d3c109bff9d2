"""
Exception types for the INCIDecoder scraper.

Absent fields are not errors: extractors return None and the field
falls back to its default value.
"""
from typing import Optional


class ScraperError(Exception):
    """Base class for scraper errors."""


class FetchError(ScraperError):
    """
    The content-fetching service was unreachable or rejected the request.

    Never retried automatically. ``status`` is the upstream HTTP status,
    or 0 for transport failures.
    """

    # Credentials or quota rejected: nothing later in the run can succeed
    FATAL_STATUSES = (401, 402, 403)

    def __init__(self, status: int, message: str, url: Optional[str] = None):
        self.status = status
        self.message = message
        self.url = url
        super().__init__(f"[{status}] {message}")

    @property
    def is_fatal(self) -> bool:
        return self.status in self.FATAL_STATUSES


class ConfigurationError(ScraperError):
    """A required setting (e.g. FIRECRAWL_API_KEY) is missing."""


class ScrapeInProgressError(ScraperError):
    """A run was requested while another one is still active."""
