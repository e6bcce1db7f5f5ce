"""Data-access layer for products."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger
from sqlalchemy import DateTime, insert, text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from src.catalog.core.errors import ErrorCode, UpstreamStoreError
from src.catalog.core.services.listing.query_builder import WhereClause
from src.catalog.entities.catalog.category import Category, CategoryTable
from src.catalog.entities.catalog.product.entity import (
    InsertResult,
    ProductDetail,
    ProductListRow,
)
from src.catalog.entities.catalog.product.table import ProductTable
from src.catalog.entities.catalog.product_variant import (
    ProductVariant,
    ProductVariantTable,
)

_FROM = "FROM products p JOIN categories c ON p.category_id = c.id"

_LIST_COLUMNS = """
    p.id,
    p.product_code,
    p.name AS product_name,
    p.description,
    c.category_name,
    p.price,
    p.image_url,
    p.average_rating,
    p.created_at
"""

INSERTABLE_FIELDS = frozenset(
    {"product_code", "name", "description", "category_id", "price", "weight", "image_url"}
)


class ProductRepository:
    """Count, page, fetch and insert products.

    Every SQLAlchemy failure is re-raised as :class:`UpstreamStoreError`;
    nothing here retries.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def count(self, where: WhereClause) -> int:
        statement = text(f"SELECT COUNT(1) AS total_rows {_FROM} {where.sql}")
        try:
            return int(self._session.exec(statement, params=where.params).scalar_one())
        except SQLAlchemyError as e:
            raise self._store_error("count", e) from e

    def fetch_page(self, where: WhereClause, limit: int, offset: int) -> list[ProductListRow]:
        """Return one listing window ordered by id ascending."""
        statement = text(
            f"SELECT {_LIST_COLUMNS} {_FROM} {where.sql} "
            "ORDER BY p.id LIMIT :limit OFFSET :offset"
        ).columns(created_at=DateTime)
        params = {**where.params, "limit": limit, "offset": offset}
        try:
            rows = self._session.exec(statement, params=params).mappings().all()
        except SQLAlchemyError as e:
            raise self._store_error("fetch_page", e) from e
        return [ProductListRow.model_validate(dict(row)) for row in rows]

    def fetch_by_id(self, product_id: int) -> ProductDetail | None:
        """Return a product with its variants, or None when it does not exist.

        The LEFT JOIN yields a single all-null variant for a product without
        variants; it is dropped so that "no variants" is an empty list.
        """
        statement = (
            select(ProductTable, CategoryTable.category_name, ProductVariantTable)
            .join(CategoryTable, ProductTable.category_id == CategoryTable.id)
            .outerjoin(ProductVariantTable, ProductVariantTable.product_id == ProductTable.id)
            .where(ProductTable.id == product_id)
            .order_by(ProductVariantTable.id)
        )
        try:
            rows = self._session.exec(statement).all()
        except SQLAlchemyError as e:
            raise self._store_error("fetch_by_id", e) from e

        if not rows:
            return None

        product, category_name, _ = rows[0]
        variants = [
            ProductVariant(
                variant_id=variant.id,
                weight=variant.weight,
                image_url=variant.image_url,
            )
            for _, _, variant in rows
            if variant is not None and variant.id is not None
        ]
        return ProductDetail(
            id=product.id,
            product_code=product.product_code,
            product_name=product.name,
            description=product.description,
            category_name=category_name,
            price=product.price,
            image_url=product.image_url,
            average_rating=product.average_rating,
            created_at=product.created_at,
            variants=variants,
        )

    def get_category_names(self) -> list[str]:
        statement = select(CategoryTable.category_name).order_by(CategoryTable.id)
        try:
            return list(self._session.exec(statement).all())
        except SQLAlchemyError as e:
            raise self._store_error("get_category_names", e) from e

    def find_category(self, category_name: str) -> Category | None:
        """Look up a category by its exact name."""
        statement = select(CategoryTable).where(CategoryTable.category_name == category_name)
        try:
            row = self._session.exec(statement).first()
        except SQLAlchemyError as e:
            raise self._store_error("find_category", e) from e
        return Category.model_validate(row) if row is not None else None

    def insert(self, payload: Mapping[str, Any]) -> InsertResult:
        """Insert one product row from a field-to-value mapping.

        ``category_id`` must reference an existing category; every listing
        and detail query joins on it.
        """
        unknown = set(payload) - INSERTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown product fields: {sorted(unknown)}")

        try:
            result = self._session.exec(insert(ProductTable).values(**payload))
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise self._store_error("insert", e, ErrorCode.STORE_WRITE_FAILED) from e

        inserted_key = result.inserted_primary_key
        return InsertResult(
            inserted_id=inserted_key[0] if inserted_key else None,
            affected_rows=result.rowcount,
        )

    @staticmethod
    def _store_error(
        operation: str,
        error: SQLAlchemyError,
        code: ErrorCode = ErrorCode.STORE_READ_FAILED,
    ) -> UpstreamStoreError:
        logger.bind(
            operation=operation,
            error_type=type(error).__name__,
        ).opt(exception=error).error("catalog.store_error")
        return UpstreamStoreError(operation, code)
