"""ProductVariant database table model."""

from sqlmodel import Field

from src.catalog.entities._base import EntityTable


class ProductVariantTable(EntityTable, table=True):
    """Database persistence model for product variants."""

    __tablename__ = "product_variants"

    product_id: int = Field(foreign_key="products.id", index=True)
    weight: float | None = None
    image_url: str | None = None
