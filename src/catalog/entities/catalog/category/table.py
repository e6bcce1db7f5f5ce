"""Category database table model."""

from sqlmodel import Field

from src.catalog.entities._base import EntityTable


class CategoryTable(EntityTable, table=True):
    """Database persistence model for categories."""

    __tablename__ = "categories"

    category_name: str = Field(index=True, unique=True)
