"""Schema management for the catalog tables."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel


def register_tables() -> None:
    """Import the table models so they are registered on SQLModel.metadata."""
    from src.catalog.entities.catalog.category import CategoryTable  # noqa: F401
    from src.catalog.entities.catalog.product import ProductTable  # noqa: F401
    from src.catalog.entities.catalog.product_variant import ProductVariantTable  # noqa: F401


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all catalog tables that do not exist yet."""
        register_tables()
        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")
