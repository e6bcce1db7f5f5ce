"""Entity: ProductVariant."""

from pydantic import Field

from src.catalog.entities._base import Entity


class ProductVariant(Entity):
    """A variant attached to a single product fetch."""

    variant_id: int = Field(description="Primary key of the variant row")
    weight: float | None = None
    image_url: str | None = None
