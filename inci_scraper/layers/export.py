"""
JSON export of scraped products.
"""
import json
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List, Optional

from inci_scraper.models.product import ScrapedProduct


EXPORT_PREFIX = "incidecoder-products"


@dataclass
class ExportDocument:
    """A serialized export ready to be downloaded or written."""
    filename: str
    content: str
    count: int


def export_filename(offset: Optional[int] = None, on: Optional[date] = None) -> str:
    """
    incidecoder-products-2026-10-19.json
    incidecoder-products-page-40-2026-10-19.json
    """
    day = (on or date.today()).isoformat()
    if offset is None:
        return f"{EXPORT_PREFIX}-{day}.json"
    return f"{EXPORT_PREFIX}-page-{offset}-{day}.json"


def serialize_products(products: List[ScrapedProduct]) -> str:
    return json.dumps(
        [product.to_dict() for product in products],
        indent=2,
        ensure_ascii=False,
    )


def export_products(
    products: List[ScrapedProduct],
    offset: Optional[int] = None,
    on: Optional[date] = None,
) -> ExportDocument:
    return ExportDocument(
        filename=export_filename(offset, on),
        content=serialize_products(products),
        count=len(products),
    )


def write_export(document: ExportDocument, directory: str) -> Path:
    """Write an export to ``directory`` (created if missing) and return its path."""
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / document.filename
    path.write_text(document.content, encoding="utf-8")
    return path
