"""Entity: Product read models."""

from datetime import datetime

from pydantic import Field

from src.catalog.entities._base import Entity
from src.catalog.entities.catalog.product_variant import ProductVariant


class ProductListRow(Entity):
    """A product joined with its category name, as served by listings."""

    id: int
    product_code: str
    product_name: str
    description: str
    category_name: str
    price: str | None = None
    image_url: str | None = None
    average_rating: float = 0
    created_at: datetime | None = None


class ProductDetail(ProductListRow):
    """A single product with its variants aggregated into a list.

    A product without variants carries an empty list.
    """

    variants: list[ProductVariant] = Field(default_factory=list)


class InsertResult(Entity):
    """Outcome of a single product insert."""

    inserted_id: int | None = Field(default=None, alias="insertedId")
    affected_rows: int = Field(default=0, alias="affectedRows")
