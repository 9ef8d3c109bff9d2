"""Adapters package initialization."""
from inci_scraper.adapters.firecrawl_client import (
    FirecrawlClient,
    RenderedPage,
    ScrapeOptions,
    LISTING_OPTIONS,
    product_page_options,
)

__all__ = [
    "FirecrawlClient",
    "RenderedPage",
    "ScrapeOptions",
    "LISTING_OPTIONS",
    "product_page_options",
]
