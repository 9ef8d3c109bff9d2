"""
Scraper Service - the control surface for scraping runs.

Owns at most one background run at a time and exposes the operations a
UI needs: start, pause/resume, reset, export, plus single-product scraping
and whole-site product URL mapping.
"""
import asyncio
from typing import Callable, List, Optional

from inci_scraper.adapters.firecrawl_client import FirecrawlClient
from inci_scraper.config import config
from inci_scraper.exceptions import ScrapeInProgressError
from inci_scraper.extractors.links import filter_product_urls
from inci_scraper.layers.export import ExportDocument, export_products
from inci_scraper.layers.run_state import ProgressSink, RunState
from inci_scraper.layers.traversal import ControlToken, TraversalController, TraversalSettings
from inci_scraper.models.product import ScrapedProduct
from inci_scraper.models.run import LogType
from inci_scraper.utils.logger import LayerLogger


class ScraperService:
    """
    Start/pause/reset/export operations over a single worker.

    ``client_factory`` builds the fetch client at start time so a missing
    API key fails before any request; ``settings_factory`` lets tests
    drop the rate-limit delays.
    """

    def __init__(
        self,
        client_factory: Callable[[], FirecrawlClient] = FirecrawlClient,
        settings_factory: Callable[..., TraversalSettings] = TraversalSettings.from_config,
        sink: Optional[ProgressSink] = None,
    ):
        self.client_factory = client_factory
        self.settings_factory = settings_factory
        self.sink = sink
        self.state = RunState(sink)
        self.token = ControlToken()
        self._task: Optional[asyncio.Task] = None
        self.logger = LayerLogger("scraper_service")

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_paused(self) -> bool:
        return self.is_running and self.token.paused

    def start_scraping(
        self,
        start_offset: int = 0,
        end_offset: Optional[int] = 0,
        product_limit_per_page: Optional[int] = None,
    ) -> asyncio.Task:
        """
        Launch a run in the background on the current event loop.

        Raises:
            ValueError: invalid offset range or limit
            ConfigurationError: fetch service credentials missing
            ScrapeInProgressError: a run is already active
        """
        if self.is_running:
            raise ScrapeInProgressError("A scraping run is already in progress")

        settings = self.settings_factory(
            start_offset=start_offset,
            end_offset=end_offset,
            product_limit_per_page=product_limit_per_page,
        )
        settings.validate()
        client = self.client_factory()

        self.token = ControlToken()
        self.state = RunState(self.sink)
        controller = TraversalController(client, settings, self.state, self.token)

        self.logger.log_decision(
            decision="start_run",
            reason="start requested",
            start_offset=start_offset,
            end_offset=end_offset,
            product_limit_per_page=product_limit_per_page,
        )
        self._task = asyncio.get_running_loop().create_task(controller.run())
        return self._task

    def pause_scraping(self) -> bool:
        """Toggle pause; returns the new paused value."""
        if not self.is_running:
            return False
        paused = self.token.toggle_pause()
        self.state.log(LogType.INFO, "Scraping paused" if paused else "Scraping resumed")
        return paused

    def reset_scraping(self) -> None:
        """
        Abort the active run (if any) and clear all accumulated state.

        The aborted worker stops at its next checkpoint, writing only to the
        discarded state; a new run can start once it has finished.
        """
        self.token.abort()
        self.logger.log_decision(decision="reset_run", reason="reset requested", was_running=self.is_running)
        self.state = RunState(self.sink)

    async def wait(self) -> Optional[RunState]:
        """Wait for the active run to finish (used by tests and the CLI)."""
        if self._task is None:
            return None
        return await self._task

    # -- exports -------------------------------------------------------------

    def export_all(self) -> ExportDocument:
        document = export_products(self.state.products)
        self.state.log(LogType.SUCCESS, f"Exported {document.count} products to JSON")
        return document

    def export_page(self, offset: int) -> ExportDocument:
        """Raises LookupError when no page bucket exists for ``offset``."""
        page = self.state.find_page(offset)
        if page is None:
            raise LookupError(f"No page loaded for offset {offset}")
        document = export_products(page.products, offset=offset)
        self.state.log(LogType.SUCCESS, f"Exported {document.count} products from offset {offset} to JSON")
        return document

    # -- one-off operations ------------------------------------------------

    async def scrape_single(self, url: str) -> ScrapedProduct:
        """Scrape one product page outside of a run."""
        controller = TraversalController(self.client_factory(), self.settings_factory())
        return await controller.scrape_product(url)

    async def map_products(self, limit: int = 5000) -> List[str]:
        """All product page URLs the fetch service knows for the site."""
        client = self.client_factory()
        links = await client.map_urls(config.SITE_BASE_URL, search="products", limit=limit)
        return filter_product_urls(links)
