"""Product database table model."""

from sqlmodel import Field

from src.catalog.entities._base import TimestampedTable


class ProductTable(TimestampedTable, table=True):
    """Database persistence model for products.

    Rows are created by the creation workflow and never updated or deleted
    by this service.
    """

    __tablename__ = "products"

    product_code: str = Field(max_length=4, index=True)
    name: str
    description: str
    category_id: int = Field(foreign_key="categories.id")
    price: str
    weight: str | None = None
    image_url: str | None = None
    average_rating: float = Field(default=0)
