"""
Listing page link extraction: brand links from a brand index page and
product links from a brand page.

Priority:
1. HTML anchors (anchor text gives the display name)
2. The fetch service's link list (name derived from the URL slug)

Links carrying a query string and the bare index page are rejected;
duplicates are dropped by normalized URL, first occurrence wins.
"""
from typing import Callable, Iterable, List, Optional, Tuple, Type, TypeVar

from inci_scraper.config import config
from inci_scraper.extractors.base import FallbackChain, PageContent, collapse_whitespace
from inci_scraper.models.product import BrandRef, ProductRef
from inci_scraper.utils.urls import absolutize, normalize_url, path_segment_after, slug_to_title


RefT = TypeVar("RefT", BrandRef, ProductRef)


def _accept(url: str, marker: str) -> Optional[str]:
    """Return the slug when ``url`` is a /<marker>/<slug> page link."""
    if "?" in url:
        return None
    return path_segment_after(url, marker)


def _dedupe(candidates: Iterable[Tuple[str, str]], ref_type: Type[RefT]) -> List[RefT]:
    seen = set()
    refs = []
    for name, url in candidates:
        key = normalize_url(url)
        if key in seen:
            continue
        seen.add(key)
        refs.append(ref_type(name=name, url=key))
    return refs


def _from_anchors(marker: str, ref_type: Type[RefT]) -> Callable[[PageContent], Optional[List[RefT]]]:
    def strategy(page: PageContent) -> Optional[List[RefT]]:
        if not page.html:
            return None
        base_url = page.source_url or config.SITE_BASE_URL
        candidates = []
        for anchor in page.soup.find_all("a", href=True):
            url = absolutize(anchor["href"].strip(), base_url)
            slug = _accept(url, marker)
            if not slug:
                continue
            name = collapse_whitespace(anchor.get_text(" ")) or slug_to_title(slug)
            candidates.append((name, url))
        return _dedupe(candidates, ref_type)
    return strategy


def _from_link_list(marker: str, ref_type: Type[RefT]) -> Callable[[PageContent], Optional[List[RefT]]]:
    def strategy(page: PageContent) -> Optional[List[RefT]]:
        candidates = []
        for link in page.links:
            slug = _accept(link, marker)
            if slug:
                candidates.append((slug_to_title(slug), link))
        return _dedupe(candidates, ref_type)
    return strategy


BRAND_LINKS_CHAIN: FallbackChain[List[BrandRef]] = FallbackChain(
    "brand_links",
    [
        ("html_anchors", _from_anchors("brands", BrandRef)),
        ("link_list", _from_link_list("brands", BrandRef)),
    ],
    default=[],
)

PRODUCT_LINKS_CHAIN: FallbackChain[List[ProductRef]] = FallbackChain(
    "product_links",
    [
        ("html_anchors", _from_anchors("products", ProductRef)),
        ("link_list", _from_link_list("products", ProductRef)),
    ],
    default=[],
)


def extract_brand_links(page: PageContent) -> List[BrandRef]:
    return list(BRAND_LINKS_CHAIN.extract(page) or [])


def extract_product_links(page: PageContent) -> List[ProductRef]:
    return list(PRODUCT_LINKS_CHAIN.extract(page) or [])


def filter_product_urls(urls: Iterable[str]) -> List[str]:
    """Product page URLs from a site map, deduplicated in order."""
    candidates = []
    for url in urls:
        slug = _accept(url, "products")
        if slug:
            candidates.append((slug_to_title(slug), url))
    return [ref.url for ref in _dedupe(candidates, ProductRef)]
