"""
Shared fixtures: captured INCIDecoder pages and a scripted fetch client.
"""
from typing import Callable, Dict, List, Optional

import pytest

from inci_scraper.adapters.firecrawl_client import RenderedPage
from inci_scraper.extractors.base import PageContent
from inci_scraper.layers.traversal import TraversalSettings
from inci_scraper.utils.urls import slug_to_title


SITE = "https://incidecoder.com"

PRODUCT_URL = f"{SITE}/products/the-ordinary-niacinamide-10-zinc-1"

PRODUCT_HTML = """
<html><body>
<div id="product-main">
  <span id="product-brand-title"><a href="/brands/the-ordinary">The Ordinary</a></span>
  <span id="product-title">Niacinamide 10% + Zinc 1%</span>
  <span id="product-details">"A high-strength vitamin and mineral blemish formula."</span>
  <p><em>Editorial note</em></p>
</div>
<table class="product-skim fs16 ingredtable">
  <tr><th>Ingredient name</th><th>what-it-does</th><th>irr., com.</th><th>ID-Rating</th></tr>
  <tr>
    <td><a href="/ingredients/water">Water</a></td>
    <td>solvent</td>
    <td></td>
    <td></td>
  </tr>
  <tr>
    <td><a href="/ingredients/niacinamide">Niacinamide</a></td>
    <td><a href="#">cell-communicating ingredient</a>, <br>skin brightening</td>
    <td>0, 0</td>
    <td>goodie</td>
  </tr>
  <tr>
    <td><a href="/ingredients/zinc-pca">Zinc PCA</a></td>
    <td>antimicrobial/antibacterial</td>
    <td>Superstar</td>
  </tr>
</table>
</body></html>
"""

PRODUCT_MARKDOWN = """# The Ordinary Niacinamide 10% + Zinc 1%

## Ingredients overview

[Water](https://incidecoder.com/ingredients/water), [Niacinamide](https://incidecoder.com/ingredients/niacinamide), [Zinc PCA](https://incidecoder.com/ingredients/zinc-pca), [Glycerin](https://incidecoder.com/ingredients/glycerin)

Read more on how to read an ingredient list >>

## Highlights

Key ingredients listed here.
"""

PRODUCT_METADATA = {
    "title": "The Ordinary Niacinamide 10% + Zinc 1% ingredients (Explained)",
    "sourceURL": PRODUCT_URL,
}


@pytest.fixture
def product_page() -> PageContent:
    return PageContent(PRODUCT_MARKDOWN, PRODUCT_HTML, dict(PRODUCT_METADATA), PRODUCT_URL)


def fast_settings(**overrides) -> TraversalSettings:
    """Settings without rate-limit delays."""
    values = dict(
        start_offset=0,
        end_offset=0,
        page_fetch_delay=0,
        brand_scan_delay=0,
        product_scrape_delay=0,
        pause_poll_interval=0.01,
        product_settle_ms=0,
        site_base_url=SITE,
    )
    values.update(overrides)
    return TraversalSettings(**values)


def brand_index_html(brand_slugs: List[str]) -> str:
    anchors = "".join(
        f'<li><a href="/brands/{slug}">{slug_to_title(slug)}</a></li>' for slug in brand_slugs
    )
    return f'<ul class="brands">{anchors}</ul><a href="/brands?offset=1">next</a>'


def brand_page_html(product_slugs: List[str]) -> str:
    anchors = "".join(
        f'<a class="klavika simpletextlistitem" href="/products/{slug}">{slug_to_title(slug)}</a>'
        for slug in product_slugs
    )
    return f"<div>{anchors}</div>"


def product_markdown(title: str) -> str:
    return f"# {title}\n\n## Ingredients overview\n\nWater, Glycerin\n\n## Highlights\n"


class FakeClient:
    """
    Scripted stand-in for FirecrawlClient.

    ``index`` maps offset -> brand slugs, ``brands`` maps brand slug ->
    product slugs, ``errors`` maps URL -> exception to raise.
    ``on_fetch(url, client)`` runs before each response is returned.
    """

    def __init__(
        self,
        index: Optional[Dict[int, List[str]]] = None,
        brands: Optional[Dict[str, List[str]]] = None,
        errors: Optional[Dict[str, Exception]] = None,
        on_fetch: Optional[Callable[[str, "FakeClient"], None]] = None,
    ):
        self.index = index or {}
        self.brands = brands or {}
        self.errors = errors or {}
        self.on_fetch = on_fetch
        self.calls: List[str] = []

    def calls_to(self, marker: str) -> List[str]:
        return [url for url in self.calls if marker in url]

    @property
    def index_calls(self) -> List[str]:
        return self.calls_to("/brands?offset=")

    @property
    def brand_calls(self) -> List[str]:
        return self.calls_to("/brands/")

    @property
    def product_calls(self) -> List[str]:
        return self.calls_to("/products/")

    async def fetch_rendered(self, url, options=None) -> RenderedPage:
        self.calls.append(url)
        if self.on_fetch:
            self.on_fetch(url, self)
        if url in self.errors:
            raise self.errors[url]

        if "/brands?offset=" in url:
            offset = int(url.rsplit("=", 1)[1])
            return RenderedPage(url=url, html=brand_index_html(self.index.get(offset, [])))
        if "/brands/" in url:
            slug = url.rsplit("/", 1)[1]
            return RenderedPage(url=url, html=brand_page_html(self.brands.get(slug, [])))
        if "/products/" in url:
            slug = url.rsplit("/", 1)[1]
            return RenderedPage(
                url=url,
                markdown=product_markdown(slug_to_title(slug)),
                metadata={"title": f"{slug_to_title(slug)} ingredients (Explained)"},
            )
        return RenderedPage(url=url)

    async def map_urls(self, site_url, search=None, limit=5000) -> List[str]:
        self.calls.append(site_url)
        return [
            f"{SITE}/products/a",
            f"{SITE}/products/a/",
            f"{SITE}/products/b?x=1",
            f"{SITE}/ingredients/water",
            f"{SITE}/products/c",
        ]
