"""
Scalar product fields: brand, name and description.
"""
import re
from typing import Optional

from inci_scraper.config import config
from inci_scraper.extractors.base import FallbackChain, PageContent, collapse_whitespace, find_by_id
from inci_scraper.utils.urls import path_segment_after, slug_to_title


UNKNOWN_BRAND = "Unknown"
UNKNOWN_PRODUCT = "Unknown Product"

# Suffixes the site appends to product page titles
TITLE_SUFFIXES = (
    " ingredients (Explained)",
    f" | {config.SITE_NAME}",
)

MARKDOWN_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*$", re.MULTILINE)

# Fixed section headings of a product page
SECTION_HEADINGS = {
    "ingredients overview",
    "skim through",
    "highlights",
    "key ingredients",
    "other ingredients",
    "ingredients explained",
}


# =========================================================================
# BRAND
# =========================================================================

def brand_from_title_element(page: PageContent) -> Optional[str]:
    """
    Primary: the labeled brand element wrapping a brand link, e.g.
    <span id="product-brand-title"><a href="/brands/de-latex">De Latex</a></span>
    """
    element = find_by_id(page, "product-brand-title")
    if element is None:
        return None
    link = element.find("a")
    if link is None:
        return None
    return collapse_whitespace(link.get_text()) or None


def brand_from_any_brand_link(page: PageContent) -> Optional[str]:
    """Fallback: text of the first link pointing at a /brands/ page."""
    if not page.html:
        return None
    for link in page.soup.find_all("a", href=True):
        if path_segment_after(link["href"], "brands"):
            text = collapse_whitespace(link.get_text())
            if text:
                return text
    return None


def brand_from_url(page: PageContent) -> Optional[str]:
    """
    Last resort: derive the brand from the URL slug.

    Uses the /brands/<slug> segment when the URL has one, otherwise the
    first hyphenated fragment of the /products/<slug> segment.
    """
    slug = path_segment_after(page.source_url, "brands")
    if slug:
        return slug_to_title(slug)
    slug = path_segment_after(page.source_url, "products")
    if slug:
        return slug_to_title(slug.split("-")[0])
    return None


BRAND_CHAIN: FallbackChain[str] = FallbackChain(
    "brand",
    [
        ("brand_title_element", brand_from_title_element),
        ("brand_link", brand_from_any_brand_link),
        ("url_slug", brand_from_url),
    ],
    default=UNKNOWN_BRAND,
)


# =========================================================================
# NAME
# =========================================================================

def strip_title_suffixes(title: str) -> str:
    for suffix in TITLE_SUFFIXES:
        title = title.replace(suffix, "")
    return title.strip()


def name_from_metadata(page: PageContent) -> Optional[str]:
    """Primary: page metadata title with the site's suffixes removed."""
    title = page.metadata.get("title") or page.metadata.get("ogTitle")
    if isinstance(title, list):
        title = title[0] if title else None
    if not isinstance(title, str):
        return None
    return strip_title_suffixes(title) or None


def name_from_title_element(page: PageContent) -> Optional[str]:
    """Fallback: the labeled product title element, prefixed with the brand."""
    element = find_by_id(page, "product-title")
    if element is None:
        return None
    title = collapse_whitespace(element.get_text())
    if not title:
        return None
    brand = BRAND_CHAIN.extract(page)
    if brand and brand != UNKNOWN_BRAND:
        return f"{brand} {title}"
    return title


def name_from_markdown_heading(page: PageContent) -> Optional[str]:
    """
    Fallback: the first level-1 markdown heading, else the first heading
    of any level. Section headings of the product page never count.
    """
    headings = []
    for marks, text in MARKDOWN_HEADING_RE.findall(page.markdown):
        text = text.strip()
        if text and text.lower() not in SECTION_HEADINGS:
            headings.append((len(marks), text))
    for level, text in headings:
        if level == 1:
            return text
    if headings:
        return headings[0][1]
    return None


NAME_CHAIN: FallbackChain[str] = FallbackChain(
    "name",
    [
        ("metadata_title", name_from_metadata),
        ("product_title_element", name_from_title_element),
        ("markdown_heading", name_from_markdown_heading),
    ],
    default=UNKNOWN_PRODUCT,
)


# =========================================================================
# DESCRIPTION
# =========================================================================

def description_from_details_element(page: PageContent) -> Optional[str]:
    """Primary: the labeled product details element, quotes stripped."""
    element = find_by_id(page, "product-details")
    if element is None:
        return None
    text = collapse_whitespace(element.get_text(" "))
    return text.strip("\"' ") or None


def description_from_emphasis(page: PageContent) -> Optional[str]:
    """Fallback: first emphasized span on the page."""
    if not page.html:
        return None
    em = page.soup.find("em")
    if em is None:
        return None
    return collapse_whitespace(em.get_text(" ")) or None


DESCRIPTION_CHAIN: FallbackChain[str] = FallbackChain(
    "description",
    [
        ("product_details_element", description_from_details_element),
        ("first_emphasis", description_from_emphasis),
    ],
    default="",
)


def extract_brand(page: PageContent) -> str:
    return BRAND_CHAIN.extract(page)


def extract_name(page: PageContent) -> str:
    return NAME_CHAIN.extract(page)


def extract_description(page: PageContent) -> str:
    return DESCRIPTION_CHAIN.extract(page)
