"""
Traversal Controller for the INCIDecoder scraper.
Drives the crawl: brand index pages -> brand pages -> product pages.

One worker, strictly sequential. Pause/abort are cooperative and checked
before every unit of work (page offset, brand, product); an in-flight
fetch is never interrupted.
"""
import asyncio
import itertools
import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional

from inci_scraper.adapters.firecrawl_client import (
    LISTING_OPTIONS,
    FirecrawlClient,
    product_page_options,
)
from inci_scraper.config import config
from inci_scraper.exceptions import FetchError
from inci_scraper.extractors.base import PageContent
from inci_scraper.extractors.links import extract_brand_links, extract_product_links
from inci_scraper.generators.record_normalizer import RecordNormalizer
from inci_scraper.layers.run_state import RunState
from inci_scraper.models.product import PageBrand, PageBucket, ProductRef, ScrapedProduct
from inci_scraper.models.run import LogType, RunPhase
from inci_scraper.utils.logger import LayerLogger, set_trace_id
from inci_scraper.utils.urls import brand_page_url


class ControlToken:
    """
    Pause/abort signals shared between a control surface and the worker.

    Setting a flag never blocks; the worker observes it at its next
    checkpoint.
    """

    def __init__(self):
        self._paused = threading.Event()
        self._aborted = threading.Event()

    @property
    def paused(self) -> bool:
        return self._paused.is_set()

    @property
    def aborted(self) -> bool:
        return self._aborted.is_set()

    def pause(self) -> None:
        self._paused.set()

    def resume(self) -> None:
        self._paused.clear()

    def toggle_pause(self) -> bool:
        """Flip the pause flag and return the new value."""
        if self.paused:
            self.resume()
        else:
            self.pause()
        return self.paused

    def abort(self) -> None:
        self._aborted.set()
        self._paused.clear()


@dataclass
class TraversalSettings:
    """
    Parameters of one run.

    ``end_offset=None`` selects auto-pagination: fetch index pages from
    ``start_offset`` until one has no brands.
    """
    start_offset: int = 0
    end_offset: Optional[int] = 0
    product_limit_per_page: Optional[int] = None
    page_fetch_delay: float = 0.75
    brand_scan_delay: float = 0.5
    product_scrape_delay: float = 1.0
    pause_poll_interval: float = 0.2
    auto_paginate_max_pages: int = 200
    product_settle_ms: int = 3000
    site_base_url: str = "https://incidecoder.com"

    @classmethod
    def from_config(
        cls,
        start_offset: int = 0,
        end_offset: Optional[int] = 0,
        product_limit_per_page: Optional[int] = None,
    ) -> "TraversalSettings":
        return cls(
            start_offset=start_offset,
            end_offset=end_offset,
            product_limit_per_page=product_limit_per_page,
            page_fetch_delay=config.PAGE_FETCH_DELAY,
            brand_scan_delay=config.BRAND_SCAN_DELAY,
            product_scrape_delay=config.PRODUCT_SCRAPE_DELAY,
            pause_poll_interval=config.PAUSE_POLL_INTERVAL,
            auto_paginate_max_pages=config.AUTO_PAGINATE_MAX_PAGES,
            product_settle_ms=config.PRODUCT_SETTLE_MS,
            site_base_url=config.SITE_BASE_URL,
        )

    @property
    def auto_paginate(self) -> bool:
        return self.end_offset is None

    def validate(self) -> None:
        """Raise ValueError for an unusable offset range or limit."""
        if self.start_offset < 0:
            raise ValueError("startOffset must be >= 0")
        if self.end_offset is not None and self.end_offset < self.start_offset:
            raise ValueError("endOffset must be >= startOffset")
        if self.product_limit_per_page is not None and self.product_limit_per_page <= 0:
            raise ValueError("productLimitPerPage must be > 0")

    def offsets(self) -> Iterable[int]:
        if self.auto_paginate:
            return itertools.islice(itertools.count(self.start_offset), self.auto_paginate_max_pages)
        return range(self.start_offset, self.end_offset + 1)

    def offset_total(self) -> int:
        """Number of planned offsets, 0 when auto-paginating (unknown)."""
        if self.auto_paginate:
            return 0
        return self.end_offset - self.start_offset + 1


def per_brand_cap(product_limit: Optional[int], brand_count: int) -> Optional[int]:
    """Share a per-page product limit evenly across a page's brands (at least 1 each)."""
    if not product_limit:
        return None
    return max(1, product_limit // max(brand_count, 1))


class TraversalController:
    """
    Multi-phase crawl over a range of brand index offsets.

    States: idle -> fetching_brand_pages -> discovering_products
    <-> scraping_products -> completed, or aborted from anywhere.

    Error policy:
    - A failed brand or product is logged and skipped
    - A brand index page rejected with 401/402/403 ends the run (aborted)
    - Any other brand index failure is logged and that offset skipped
    """

    def __init__(
        self,
        client: FirecrawlClient,
        settings: TraversalSettings,
        state: Optional[RunState] = None,
        token: Optional[ControlToken] = None,
        normalizer: Optional[RecordNormalizer] = None,
    ):
        self.client = client
        self.settings = settings
        self.state = state or RunState()
        self.token = token or ControlToken()
        self.normalizer = normalizer or RecordNormalizer()
        self.logger = LayerLogger("traversal")

    # =========================================================================
    # RUN
    # =========================================================================

    async def run(self) -> RunState:
        """Execute the whole crawl; the final phase is COMPLETED or ABORTED."""
        self.settings.validate()
        trace_id = set_trace_id()
        self.logger.log_action(
            "traversal",
            "started",
            trace_id=trace_id,
            start_offset=self.settings.start_offset,
            end_offset=self.settings.end_offset,
            product_limit_per_page=self.settings.product_limit_per_page,
        )
        self._log(LogType.INFO, self._describe_run())

        try:
            pages = await self._fetch_brand_pages()
            if self.token.aborted:
                return self._finish_aborted()

            for page in pages:
                if not await self._process_page(page):
                    return self._finish_aborted()

            if self.token.aborted:
                return self._finish_aborted()
            return self._finish_completed()

        except FetchError as e:
            self._log(
                LogType.ERROR,
                f"Scraping failed: brand index rejected the request ({e.status}: {e.message})",
            )
            return self._finish_aborted(log_warning=False)
        except Exception as e:
            self.logger.log_error(str(e), error_type=type(e).__name__)
            self._log(LogType.ERROR, f"Scraping failed: {e}")
            return self._finish_aborted(log_warning=False)

    async def scrape_product(self, url: str) -> ScrapedProduct:
        """Fetch one product page and build its record."""
        rendered = await self.client.fetch_rendered(
            url,
            product_page_options(self.settings.product_settle_ms),
        )
        return self.normalizer.build(PageContent.from_rendered(rendered))

    # =========================================================================
    # PHASE 1: BRAND INDEX PAGES
    # =========================================================================

    async def _fetch_brand_pages(self) -> List[PageBucket]:
        self.state.set_phase(RunPhase.FETCHING_BRAND_PAGES)
        total = self.settings.offset_total()
        pages: List[PageBucket] = []

        for index, offset in enumerate(self.settings.offsets()):
            if not await self._checkpoint():
                break

            self.state.set_progress(index + 1, total, f"Fetching brand page (offset {offset})")
            url = brand_page_url(self.settings.site_base_url, offset)

            try:
                rendered = await self.client.fetch_rendered(url, LISTING_OPTIONS)
            except FetchError as e:
                if e.is_fatal:
                    raise
                self._log(
                    LogType.ERROR,
                    f"Failed to fetch brand page at offset {offset}: {e.message}",
                    offset=offset,
                    status=e.status,
                )
                await self._sleep(self.settings.page_fetch_delay)
                continue

            brands = extract_brand_links(PageContent.from_rendered(rendered))

            if not brands:
                if self.settings.auto_paginate:
                    self._log(LogType.INFO, f"No brands at offset {offset}; reached the end of the brand index")
                    break
                self._log(LogType.WARNING, f"No brands found at offset {offset}, skipping", offset=offset)
            else:
                page = PageBucket(
                    offset=offset,
                    brands=[PageBrand(name=b.name, url=b.url) for b in brands],
                )
                self.state.add_page(page)
                pages.append(page)
                self._log(LogType.SUCCESS, f"Found {len(brands)} brands at offset {offset}", offset=offset)

            await self._sleep(self.settings.page_fetch_delay)

        return pages

    # =========================================================================
    # PHASE 2/3: BRANDS AND PRODUCTS
    # =========================================================================

    async def _process_page(self, page: PageBucket) -> bool:
        """Discover and scrape every brand on one page. False when aborted."""
        page.is_currently_processing = True
        self.state.publish_page(page)

        brand_count = len(page.brands)
        cap = per_brand_cap(self.settings.product_limit_per_page, brand_count)
        if cap is not None:
            self._log(
                LogType.INFO,
                f"Offset {page.offset}: limiting to {cap} products per brand across {brand_count} brands",
            )

        for index, brand in enumerate(page.brands):
            if not await self._checkpoint():
                page.is_currently_processing = False
                self.state.publish_page(page)
                return False

            self.state.set_phase(RunPhase.DISCOVERING_PRODUCTS)
            self.state.set_progress(
                index + 1,
                brand_count,
                f"Scanning brand: {brand.name} (offset {page.offset})",
            )
            self._log(LogType.INFO, f"Scanning {brand.name}...")

            refs = await self._discover_products(brand, cap)
            await self._sleep(self.settings.brand_scan_delay)

            scraped = await self._scrape_products(page, refs)
            if scraped is None:
                page.is_currently_processing = False
                self.state.publish_page(page)
                return False

            brand.is_scraped = True
            brand.product_count = scraped
            self.state.publish_page(page)

            # abort seen only after the brand's last product or delay
            if self.token.aborted:
                page.is_currently_processing = False
                self.state.publish_page(page)
                return False

        page.is_complete = True
        page.is_currently_processing = False
        self.state.publish_page(page)
        self._log(
            LogType.SUCCESS,
            f"Offset {page.offset} complete: {len(page.products)} products from {page.scraped_brand_count} brands",
            offset=page.offset,
        )
        return True

    async def _discover_products(self, brand: PageBrand, cap: Optional[int]) -> List[ProductRef]:
        try:
            rendered = await self.client.fetch_rendered(brand.url, LISTING_OPTIONS)
        except FetchError as e:
            self._log(LogType.WARNING, f"Failed to scan {brand.name}: {e.message}", url=brand.url)
            return []

        refs = extract_product_links(PageContent.from_rendered(rendered))
        selected = refs[:cap] if cap is not None else refs

        if refs:
            self._log(
                LogType.SUCCESS,
                f"Found {len(refs)} products from {brand.name}, scraping {len(selected)}",
            )
        else:
            self._log(LogType.WARNING, f"No products found for {brand.name}", url=brand.url)
        return selected

    async def _scrape_products(self, page: PageBucket, refs: List[ProductRef]) -> Optional[int]:
        """Scrape products in order; returns the success count, None when aborted."""
        self.state.set_phase(RunPhase.SCRAPING_PRODUCTS)
        scraped = 0

        for index, ref in enumerate(refs):
            if not await self._checkpoint():
                return None

            self.state.set_progress(index + 1, len(refs), f"Scraping: {ref.name}")

            try:
                product = await self.scrape_product(ref.url)
            except FetchError as e:
                self._log(LogType.ERROR, f"Failed to scrape {ref.name}: {e.message}", url=ref.url)
            except Exception as e:
                self._log(LogType.ERROR, f"Error scraping {ref.name}: {e}", url=ref.url)
            else:
                self.state.add_product(product, page)
                self.state.publish_page(page)
                scraped += 1
                self._log(LogType.SUCCESS, f"Scraped: {product.name} (Brand: {product.brand})")

            await self._sleep(self.settings.product_scrape_delay)

        return scraped

    # =========================================================================
    # CONTROL
    # =========================================================================

    async def _checkpoint(self) -> bool:
        """
        Abort check, then paused wait. Returns False when the run must stop.
        """
        if self.token.aborted:
            return False
        while self.token.paused and not self.token.aborted:
            await asyncio.sleep(self.settings.pause_poll_interval)
        return not self.token.aborted

    async def _sleep(self, seconds: float) -> None:
        """Rate-limit delay, cut short by abort."""
        remaining = seconds
        step = self.settings.pause_poll_interval or seconds
        while remaining > 0 and not self.token.aborted:
            await asyncio.sleep(min(step, remaining))
            remaining -= step

    def _finish_completed(self) -> RunState:
        self.state.set_phase(RunPhase.COMPLETED)
        progress = self.state.progress
        self.state.set_progress(progress.current, progress.total, "Completed")
        self._log(
            LogType.SUCCESS,
            f"Scraping completed! {len(self.state.products)} products from {len(self.state.pages)} pages",
        )
        self.logger.log_action("traversal", "completed", products=len(self.state.products))
        return self.state

    def _finish_aborted(self, log_warning: bool = True) -> RunState:
        self.state.set_phase(RunPhase.ABORTED)
        progress = self.state.progress
        self.state.set_progress(progress.current, progress.total, "Aborted")
        if log_warning:
            self._log(LogType.WARNING, "Scraping aborted")
        self.logger.log_action("traversal", "aborted", products=len(self.state.products))
        return self.state

    def _log(self, entry_type: LogType, message: str, **extra) -> None:
        self.state.log(entry_type, message, **extra)

    def _describe_run(self) -> str:
        s = self.settings
        if s.auto_paginate:
            scope = f"offsets {s.start_offset}+ (until an empty page)"
        else:
            scope = f"offsets {s.start_offset}-{s.end_offset}"
        limit = f", {s.product_limit_per_page} products per page" if s.product_limit_per_page else ""
        return f"Starting INCIDecoder scraper: {scope}{limit}"
