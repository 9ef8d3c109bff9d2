"""Layers package initialization."""
from inci_scraper.layers.run_state import ProgressSink, LogBuffer, RunState
from inci_scraper.layers.traversal import (
    ControlToken,
    TraversalSettings,
    TraversalController,
    per_brand_cap,
)
from inci_scraper.layers.export import ExportDocument, export_products, export_filename, write_export
from inci_scraper.layers.scraper_service import ScraperService

__all__ = [
    "ProgressSink",
    "LogBuffer",
    "RunState",
    "ControlToken",
    "TraversalSettings",
    "TraversalController",
    "per_brand_cap",
    "ExportDocument",
    "export_products",
    "export_filename",
    "write_export",
    "ScraperService",
]
