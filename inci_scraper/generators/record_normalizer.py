"""
Record Normalizer for the INCIDecoder scraper.
Merges field extractor outputs into one ScrapedProduct per product page.
"""
from typing import Any, Dict, List, Optional

from inci_scraper.extractors.base import PageContent
from inci_scraper.extractors.fields import extract_brand, extract_description, extract_name
from inci_scraper.extractors.ingredients import extract_overview_names, join_overview
from inci_scraper.extractors.skim_table import extract_skin_through
from inci_scraper.models.product import IngredientDetail, ScrapedProduct
from inci_scraper.utils.logger import LayerLogger


def name_key(name: str) -> str:
    """Case/whitespace-insensitive identity of an ingredient name."""
    return " ".join(name.lower().split())


def reconcile_ingredients(
    skin_through: List[IngredientDetail],
    overview_names: List[str],
) -> List[IngredientDetail]:
    """
    Make the detail table a superset of the overview list.

    Real rows keep their order; every overview name missing from the table
    is appended once, in overview order, as a placeholder row.
    """
    reconciled = list(skin_through)
    known = {name_key(item.name) for item in skin_through}
    for name in overview_names:
        key = name_key(name)
        if not key or key in known:
            continue
        reconciled.append(IngredientDetail.placeholder(name))
        known.add(key)
    return reconciled


class RecordNormalizer:
    """
    Builds the canonical product record.

    Principles:
    - Every field comes from its own fallback chain
    - Absent fields resolve to defaults, never to errors
    - Overview and detail table are always consistent after reconciliation
    """

    def __init__(self):
        self.logger = LayerLogger("record_normalizer")

    def build(self, page: PageContent) -> ScrapedProduct:
        """
        Build a ScrapedProduct from one captured product page.

        Args:
            page: Captured markdown/html/metadata of the product page

        Returns:
            Immutable ScrapedProduct
        """
        brand = extract_brand(page)
        name = extract_name(page)
        description = extract_description(page)
        overview_names = extract_overview_names(page)
        detail_rows = extract_skin_through(page)

        skin_through = reconcile_ingredients(detail_rows, overview_names)

        product = ScrapedProduct(
            name=name,
            url=page.source_url,
            brand=brand,
            description=description,
            ingredients_overview=join_overview(overview_names),
            ingredients_overview_count=len(overview_names),
            skin_through=skin_through,
        )

        self.logger.log_action(
            "record_normalization",
            "completed",
            url=page.source_url,
            overview_count=len(overview_names),
            detail_rows=len(detail_rows),
            placeholders_added=len(skin_through) - len(detail_rows),
        )
        return product

    def build_from_parts(
        self,
        markdown: str,
        html: str,
        metadata: Optional[Dict[str, Any]],
        source_url: str,
    ) -> ScrapedProduct:
        return self.build(PageContent(markdown, html, metadata, source_url))
