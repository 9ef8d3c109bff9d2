"""Models package initialization."""
from inci_scraper.models.product import (
    NOT_RATED,
    ID_RATINGS,
    BrandRef,
    ProductRef,
    IngredientDetail,
    ScrapedProduct,
    PageBrand,
    PageBucket,
)
from inci_scraper.models.run import RunPhase, LogType, Progress, LogEntry

__all__ = [
    "NOT_RATED",
    "ID_RATINGS",
    "BrandRef",
    "ProductRef",
    "IngredientDetail",
    "ScrapedProduct",
    "PageBrand",
    "PageBucket",
    "RunPhase",
    "LogType",
    "Progress",
    "LogEntry",
]
