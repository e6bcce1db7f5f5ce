"""Entity: Category."""

from pydantic import Field

from src.catalog.entities._base import Entity


class Category(Entity):
    """Product category. Read-only from the catalog's point of view."""

    id: int
    category_name: str = Field(description="Display name, matched exactly by filters")
