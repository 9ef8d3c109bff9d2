"""Extractors package initialization."""
from inci_scraper.extractors.base import FallbackChain, PageContent
from inci_scraper.extractors.fields import extract_brand, extract_name, extract_description
from inci_scraper.extractors.ingredients import (
    extract_overview_names,
    parse_overview_section,
    join_overview,
)
from inci_scraper.extractors.skim_table import (
    extract_skin_through,
    split_irr_com,
    normalize_id_rating,
)
from inci_scraper.extractors.links import (
    extract_brand_links,
    extract_product_links,
    filter_product_urls,
)

__all__ = [
    "FallbackChain",
    "PageContent",
    "extract_brand",
    "extract_name",
    "extract_description",
    "extract_overview_names",
    "parse_overview_section",
    "join_overview",
    "extract_skin_through",
    "split_irr_com",
    "normalize_id_rating",
    "extract_brand_links",
    "extract_product_links",
    "filter_product_urls",
]
