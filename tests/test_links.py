"""
Tests for brand/product link discovery on listing pages.
"""
from inci_scraper.extractors.base import PageContent
from inci_scraper.extractors.links import (
    BRAND_LINKS_CHAIN,
    PRODUCT_LINKS_CHAIN,
    extract_brand_links,
    extract_product_links,
    filter_product_urls,
)

from tests.conftest import SITE, brand_index_html, brand_page_html


class TestBrandLinks:

    def test_anchors_with_display_names(self):
        page = PageContent(html=brand_index_html(["the-ordinary", "cosrx"]), source_url=f"{SITE}/brands?offset=0")
        refs = extract_brand_links(page)

        assert [r.name for r in refs] == ["The Ordinary", "Cosrx"]
        assert [r.url for r in refs] == [f"{SITE}/brands/the-ordinary", f"{SITE}/brands/cosrx"]

    def test_pagination_and_query_links_rejected(self):
        html = (
            '<a href="/brands">All</a>'
            '<a href="/brands?offset=2">next</a>'
            '<a href="/brands/cerave?sort=new">CeraVe sorted</a>'
            '<a href="/brands/cerave">CeraVe</a>'
        )
        refs = extract_brand_links(PageContent(html=html, source_url=f"{SITE}/brands?offset=1"))
        assert [(r.name, r.url) for r in refs] == [("CeraVe", f"{SITE}/brands/cerave")]

    def test_duplicates_dropped_first_wins(self):
        html = (
            '<a href="/brands/cerave">CeraVe</a>'
            '<a href="https://INCIDECODER.com/brands/cerave/">CeraVe again</a>'
            '<a href="/brands/cerave#top">CeraVe top</a>'
        )
        refs = extract_brand_links(PageContent(html=html, source_url=f"{SITE}/brands?offset=0"))
        assert len(refs) == 1
        assert refs[0].name == "CeraVe"

    def test_link_list_fallback(self):
        page = PageContent(
            html="<p>no anchors rendered</p>",
            links=[f"{SITE}/brands/la-roche-posay", f"{SITE}/brands?offset=3", f"{SITE}/about"],
        )
        refs, strategy = BRAND_LINKS_CHAIN.extract_with_source(page)
        assert strategy == "link_list"
        assert [(r.name, r.url) for r in refs] == [("La Roche Posay", f"{SITE}/brands/la-roche-posay")]

    def test_nothing_found(self):
        assert extract_brand_links(PageContent(html="<p>empty</p>")) == []


class TestProductLinks:

    def test_anchors_on_brand_page(self):
        page = PageContent(
            html=brand_page_html(["cosrx-snail-essence", "cosrx-aha-toner"]),
            source_url=f"{SITE}/brands/cosrx",
        )
        refs = extract_product_links(page)
        assert [r.url for r in refs] == [
            f"{SITE}/products/cosrx-snail-essence",
            f"{SITE}/products/cosrx-aha-toner",
        ]
        assert refs[0].name == "Cosrx Snail Essence"

    def test_brand_links_are_not_products(self):
        html = '<a href="/brands/cosrx">COSRX</a><a href="/products/cosrx-toner">Toner</a>'
        refs = extract_product_links(PageContent(html=html, source_url=f"{SITE}/brands/cosrx"))
        assert [r.name for r in refs] == ["Toner"]

    def test_link_list_fallback(self):
        page = PageContent(links=[f"{SITE}/products/cosrx-toner", f"{SITE}/products/cosrx-toner/"])
        refs, strategy = PRODUCT_LINKS_CHAIN.extract_with_source(page)
        assert strategy == "link_list"
        assert len(refs) == 1


class TestFilterProductUrls:

    def test_keeps_unique_product_pages_in_order(self):
        urls = [
            f"{SITE}/products/a",
            f"{SITE}/products/a/",
            f"{SITE}/products/b?x=1",
            f"{SITE}/ingredients/water",
            f"{SITE}/products/c",
        ]
        assert filter_product_urls(urls) == [f"{SITE}/products/a", f"{SITE}/products/c"]
