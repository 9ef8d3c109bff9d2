"""
Firecrawl adapter for the INCIDecoder scraper.
Renders a page through the Firecrawl scrape API and returns its
markdown, HTML, links and metadata. One request per call, no retries,
no caching.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import httpx

from inci_scraper.config import config
from inci_scraper.exceptions import ConfigurationError, FetchError
from inci_scraper.utils.logger import LayerLogger


@dataclass(frozen=True)
class ScrapeOptions:
    """Options for one render-and-capture request."""
    formats: Tuple[str, ...] = ("markdown", "html")
    only_main_content: bool = True
    wait_for_ms: int = 0

    def to_payload(self, url: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "url": url,
            "formats": list(self.formats),
            "onlyMainContent": self.only_main_content,
        }
        if self.wait_for_ms:
            payload["waitFor"] = self.wait_for_ms
        return payload


# Listing pages only need their links
LISTING_OPTIONS = ScrapeOptions(formats=("html", "links"), only_main_content=True)


def product_page_options(settle_ms: Optional[int] = None) -> ScrapeOptions:
    """Full page capture with a settle delay for client-side rendering."""
    return ScrapeOptions(
        formats=("markdown", "html"),
        only_main_content=False,
        wait_for_ms=config.PRODUCT_SETTLE_MS if settle_ms is None else settle_ms,
    )


@dataclass
class RenderedPage:
    """Captured content of one rendered URL."""
    url: str
    markdown: str = ""
    html: str = ""
    links: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


class FirecrawlClient:
    """
    Client for the Firecrawl content-fetching service.

    Every failure (transport error, non-2xx status, ``success: false``,
    unreadable body) surfaces as FetchError. Deciding whether to skip or
    stop is left to the caller.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or config.FIRECRAWL_API_KEY
        if not self.api_key:
            raise ConfigurationError(
                "Firecrawl is not configured. Set FIRECRAWL_API_KEY."
            )
        self.base_url = (base_url or config.FIRECRAWL_API_URL).rstrip("/")
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self._transport = transport
        self.logger = LayerLogger("firecrawl_client")

    def _get_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def fetch_rendered(
        self,
        target_url: str,
        options: Optional[ScrapeOptions] = None,
    ) -> RenderedPage:
        """
        Render and capture a URL.

        Args:
            target_url: Page to render
            options: Output formats, main-content flag and settle delay

        Returns:
            RenderedPage with markdown, html, links and metadata

        Raises:
            FetchError: upstream rejected the request or was unreachable
        """
        options = options or ScrapeOptions()
        self.logger.log_action(
            "fetch_rendered",
            "started",
            url=target_url,
            formats=list(options.formats),
        )

        body = await self._post("/v1/scrape", options.to_payload(target_url), target_url)
        data = body.get("data") or {}

        page = RenderedPage(
            url=target_url,
            markdown=data.get("markdown") or "",
            html=data.get("html") or "",
            links=[link for link in (data.get("links") or []) if isinstance(link, str)],
            metadata=data.get("metadata") or {},
        )

        self.logger.log_action(
            "fetch_rendered",
            "completed",
            url=target_url,
            markdown_length=len(page.markdown),
            html_length=len(page.html),
            links_count=len(page.links),
        )
        return page

    async def map_urls(
        self,
        site_url: str,
        search: Optional[str] = None,
        limit: int = 5000,
    ) -> List[str]:
        """
        List URLs known on a site via the Firecrawl map API.

        Used for whole-site product URL discovery without crawling brands.
        """
        payload: Dict[str, Any] = {
            "url": site_url,
            "limit": limit,
            "includeSubdomains": False,
        }
        if search:
            payload["search"] = search

        self.logger.log_action("map_urls", "started", url=site_url, search=search, limit=limit)
        body = await self._post("/v1/map", payload, site_url)
        links = [link for link in (body.get("links") or []) if isinstance(link, str)]
        self.logger.log_action("map_urls", "completed", url=site_url, links_count=len(links))
        return links

    async def _post(self, path: str, payload: Dict[str, Any], target_url: str) -> Dict[str, Any]:
        """Issue one POST and return the decoded success body."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    f"{self.base_url}{path}",
                    json=payload,
                    headers=self._get_headers(),
                )
        except httpx.HTTPError as e:
            self.logger.log_error(
                f"Firecrawl request failed: {str(e)}",
                error_type="transport_error",
                url=target_url,
            )
            raise FetchError(0, f"Firecrawl unreachable: {str(e)}", url=target_url) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            message = self._error_message(body) or response.text[:200] or response.reason_phrase
            self.logger.log_error(
                f"Firecrawl API error: {message}",
                error_type="http_error",
                url=target_url,
                status_code=response.status_code,
            )
            raise FetchError(response.status_code, message, url=target_url)

        if not isinstance(body, dict):
            raise FetchError(response.status_code, "Unreadable response from Firecrawl", url=target_url)

        if body.get("success") is False:
            message = self._error_message(body) or "Firecrawl reported failure"
            self.logger.log_error(
                f"Firecrawl API error: {message}",
                error_type="upstream_failure",
                url=target_url,
                status_code=response.status_code,
            )
            raise FetchError(response.status_code, message, url=target_url)

        return body

    @staticmethod
    def _error_message(body: Any) -> Optional[str]:
        if isinstance(body, dict):
            error = body.get("error") or body.get("message")
            if error:
                return str(error)
        return None
