"""
Product and ingredient record models for the INCIDecoder scraper.

These models are the contract between the extractors, the record normalizer,
the traversal controller and anything observing a run. Field names are
snake_case in Python and camelCase on the wire (exports, API responses).
"""
from typing import List

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


NOT_RATED = "-"

# Categorical ingredient quality labels assigned by the source site
ID_RATINGS = ("Superstar", "Goodie", "Average", "Badie")


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict:
        """Wire representation (camelCase keys)."""
        return self.model_dump(by_alias=True, mode="json")


class BrandRef(CamelModel):
    """Link to one brand page, discovered on a brand index page."""
    model_config = ConfigDict(frozen=True)

    name: str
    url: str


class ProductRef(CamelModel):
    """Link to one product page, discovered on a brand page."""
    model_config = ConfigDict(frozen=True)

    name: str
    url: str


class IngredientDetail(CamelModel):
    """
    One row of the skim-through table.

    ``irritancy`` and ``comedogenicity`` hold a small integer as text or "-";
    ``id_rating`` holds one of ID_RATINGS or "-".
    """
    model_config = ConfigDict(frozen=True)

    name: str
    what_it_does: str = NOT_RATED
    irritancy: str = NOT_RATED
    comedogenicity: str = NOT_RATED
    id_rating: str = NOT_RATED

    @classmethod
    def placeholder(cls, name: str) -> "IngredientDetail":
        """Row for an ingredient seen in the overview but not detailed."""
        return cls(name=name)


class ScrapedProduct(CamelModel):
    """
    The terminal record for one product page.

    ``skin_through_ingredient_names`` and ``skin_through_count`` are derived
    from ``skin_through`` so they can never disagree with it.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    brand: str
    description: str = ""
    ingredients_overview: str = ""
    ingredients_overview_count: int = Field(default=0, ge=0)
    skin_through: List[IngredientDetail] = Field(default_factory=list)

    @computed_field(alias="skinThroughIngredientNames")
    @property
    def skin_through_ingredient_names(self) -> List[str]:
        return [item.name for item in self.skin_through]

    @computed_field(alias="skinThroughCount")
    @property
    def skin_through_count(self) -> int:
        return len(self.skin_through)


class PageBrand(CamelModel):
    """Per-brand status inside a page bucket."""

    name: str
    url: str
    is_scraped: bool = False
    product_count: int = 0


class PageBucket(CamelModel):
    """
    Aggregate of one brand index page (one offset).

    Mutated only by the traversal controller while the page is processed.
    """

    offset: int
    brands: List[PageBrand] = Field(default_factory=list)
    is_complete: bool = False
    is_currently_processing: bool = False
    products: List[ScrapedProduct] = Field(default_factory=list)

    @property
    def scraped_brand_count(self) -> int:
        return sum(1 for b in self.brands if b.is_scraped)
