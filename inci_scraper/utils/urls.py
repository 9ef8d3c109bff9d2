"""
URL helpers shared by the link extractors and the traversal controller.
"""
import re
from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse


def normalize_url(url: str) -> str:
    """
    Normalize a URL into its identity form.

    - lowercases scheme and host
    - drops the fragment
    - strips the trailing slash (except for the root path)

    The query string is kept; listing extractors reject query URLs anyway.
    """
    parsed = urlparse(url.strip())
    path = parsed.path
    if path != "/":
        path = path.rstrip("/")
    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        path,
        parsed.params,
        parsed.query,
        "",
    ))


def absolutize(href: str, base_url: str) -> str:
    """Resolve a possibly relative href against the site base URL."""
    if href.startswith("http://") or href.startswith("https://"):
        return href
    return urljoin(base_url, href)


def path_segment_after(url: str, marker: str) -> Optional[str]:
    """
    Return the path segment following ``/<marker>/``.

    >>> path_segment_after("https://incidecoder.com/brands/the-ordinary", "brands")
    'the-ordinary'
    """
    path = urlparse(url).path
    match = re.search(rf"/{re.escape(marker)}/([^/?#]+)", path)
    if match:
        return match.group(1)
    return None


def slug_to_title(slug: str) -> str:
    """Title-case a hyphenated slug: ``the-ordinary`` -> ``The Ordinary``."""
    words = [w for w in re.split(r"[-_]+", slug) if w]
    return " ".join(w[:1].upper() + w[1:] for w in words)


def brand_page_url(base_url: str, offset: int) -> str:
    """URL of one page of the paginated brand index."""
    return f"{base_url.rstrip('/')}/brands?offset={offset}"
