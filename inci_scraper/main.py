"""
INCIDecoder Scraper - FastAPI Application
Main entry point with REST API endpoints for controlling scraping runs.
"""
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import Field

from inci_scraper.config import config
from inci_scraper.exceptions import ConfigurationError, FetchError, ScrapeInProgressError
from inci_scraper.layers.export import ExportDocument, write_export
from inci_scraper.layers.scraper_service import ScraperService
from inci_scraper.models.product import CamelModel
from inci_scraper.utils.logger import get_logger, set_trace_id


# Initialize FastAPI app
app = FastAPI(
    title="INCIDecoder Scraper",
    description="Extracts product and ingredient data from INCIDecoder via Firecrawl",
    version="1.0.0",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

scraper_service = ScraperService()

logger = get_logger("main")


# Request/Response models
class StartRequest(CamelModel):
    """Request model for starting a run. endOffset=null auto-paginates."""
    start_offset: int = Field(default=0, ge=0)
    end_offset: Optional[int] = Field(default=0, ge=0)
    product_limit_per_page: Optional[int] = Field(default=None, gt=0)


class ScrapeProductRequest(CamelModel):
    """Request model for scraping one product page."""
    url: str


class MapProductsRequest(CamelModel):
    """Request model for mapping all product URLs."""
    limit: int = Field(default=5000, gt=0)


def _status_payload() -> dict:
    payload = scraper_service.state.summary()
    payload["isRunning"] = scraper_service.is_running
    payload["isPaused"] = scraper_service.is_paused
    return payload


def _download(document: ExportDocument, save: bool) -> Response:
    headers = {"Content-Disposition": f'attachment; filename="{document.filename}"'}
    if save:
        path = write_export(document, config.EXPORT_DIR)
        headers["X-Export-Path"] = str(path)
    return Response(content=document.content, media_type="application/json", headers=headers)


# API Routes
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "firecrawl_configured": config.is_firecrawl_configured(),
    }


@app.post("/api/scraper/start")
async def start_scraping(request: StartRequest):
    """
    Start a scraping run over brand index offsets.

    Runs in the background; poll /api/scraper/status for progress.
    """
    trace_id = set_trace_id()
    logger.info(
        "start_request",
        start_offset=request.start_offset,
        end_offset=request.end_offset,
        product_limit_per_page=request.product_limit_per_page,
        trace_id=trace_id,
    )

    try:
        scraper_service.start_scraping(
            start_offset=request.start_offset,
            end_offset=request.end_offset,
            product_limit_per_page=request.product_limit_per_page,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationError as e:
        logger.error("start_rejected", error=str(e), missing=config.get_missing_vars())
        raise HTTPException(status_code=503, detail=str(e))
    except ScrapeInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {"started": True, "trace_id": trace_id, **_status_payload()}


@app.post("/api/scraper/pause")
async def pause_scraping():
    """Toggle pause on the active run."""
    paused = scraper_service.pause_scraping()
    return {"isPaused": paused, "isRunning": scraper_service.is_running}


@app.post("/api/scraper/reset")
async def reset_scraping():
    """Abort the active run and clear all accumulated results."""
    scraper_service.reset_scraping()
    return _status_payload()


@app.get("/api/scraper/status")
async def get_status():
    """Current phase, progress snapshot and counters."""
    return _status_payload()


@app.get("/api/scraper/products")
async def get_products():
    """All products scraped in the current run."""
    return [product.to_dict() for product in scraper_service.state.products]


@app.get("/api/scraper/pages")
async def get_pages():
    """Page buckets of the current run."""
    return [page.to_dict() for page in scraper_service.state.pages]


@app.get("/api/scraper/logs")
async def get_logs():
    """Most recent run log entries, oldest first."""
    return [entry.to_dict() for entry in scraper_service.state.logs.snapshot()]


@app.get("/api/scraper/export")
async def export_all(save: bool = Query(False, description="Also write the file to EXPORT_DIR")):
    """Download every scraped product as JSON."""
    return _download(scraper_service.export_all(), save)


@app.get("/api/scraper/export/{offset}")
async def export_page(offset: int, save: bool = Query(False, description="Also write the file to EXPORT_DIR")):
    """Download the products of one page bucket as JSON."""
    try:
        document = scraper_service.export_page(offset)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _download(document, save)


@app.post("/api/scraper/scrape-product")
async def scrape_product(request: ScrapeProductRequest):
    """Scrape a single product page outside of a run."""
    trace_id = set_trace_id()
    logger.info("scrape_product_request", url=request.url, trace_id=trace_id)

    try:
        product = await scraper_service.scrape_single(request.url)
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except FetchError as e:
        logger.error("scrape_product_error", error=e.message, status=e.status, url=request.url)
        raise HTTPException(status_code=502, detail=e.message)

    return product.to_dict()


@app.post("/api/scraper/map-products")
async def map_products(request: MapProductsRequest):
    """List every product URL the fetch service can map on the site."""
    try:
        urls = await scraper_service.map_products(limit=request.limit)
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except FetchError as e:
        raise HTTPException(status_code=502, detail=e.message)

    return {"products": urls, "total": len(urls)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
