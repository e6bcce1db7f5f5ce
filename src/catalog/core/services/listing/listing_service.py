"""Compose filtering, counting and pagination into a listing result."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from src.catalog.core.services.listing.pagination import PER_PAGE, PaginationResolver
from src.catalog.core.services.listing.query_builder import build_where_clause, normalize_text
from src.catalog.entities.catalog.product.entity import ProductListRow

if TYPE_CHECKING:
    from src.catalog.entities.catalog.product.repository import ProductRepository


def parse_page(raw: str | int | None) -> int:
    """Parse the ``page`` query value; absent or non-integer values mean page 1."""
    if raw is None:
        return 1
    if isinstance(raw, int):
        return raw
    try:
        return int(raw.strip())
    except ValueError:
        return 1


class ListingFilter(BaseModel):
    """Per-request listing parameters."""

    keyword: str | None = None
    category: str | None = None
    page: int = 1

    @classmethod
    def from_query(
        cls,
        page: str | int | None = None,
        keyword: str | None = None,
        category_name: str | None = None,
    ) -> ListingFilter:
        return cls(
            keyword=normalize_text(keyword),
            category=category_name or None,
            page=parse_page(page),
        )


class ListingResult(BaseModel):
    """JSON shape of a listing response."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    redirect: str | None = None
    per_page: int = Field(default=PER_PAGE, alias="perPage")
    total_rows: int = Field(default=0, alias="totalRows")
    total_pages: int = Field(default=0, alias="totalPages")
    page: int = 0
    rows: list[ProductListRow] = Field(default_factory=list)
    keyword: str = ""
    category: str | None = None
    redirect_page: int | None = Field(default=None, exclude=True)

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=False)


class ListingService:
    """Resolve a :class:`ListingFilter` against the product store."""

    def __init__(
        self,
        repository: ProductRepository,
        resolver: PaginationResolver | None = None,
    ) -> None:
        self._repository = repository
        self._resolver = resolver or PaginationResolver()

    def get_list_data(self, listing_filter: ListingFilter) -> ListingResult:
        """Build the listing for one request.

        Store errors propagate to the caller unchanged.
        """
        output = ListingResult(
            per_page=self._resolver.per_page,
            keyword=listing_filter.keyword or "",
            category=listing_filter.category,
        )

        early = self._resolver.check_lower_bound(listing_filter.page)
        if early is not None:
            return self._redirect(output, early.redirect_to)

        where = build_where_clause(listing_filter.keyword, listing_filter.category)
        total_rows = self._repository.count(where)
        decision = self._resolver.resolve(listing_filter.page, total_rows)

        if decision.is_redirect:
            return self._redirect(output, decision.redirect_to)

        rows: list[ProductListRow] = []
        if decision.fetch_rows:
            rows = self._repository.fetch_page(where, self._resolver.per_page, decision.offset)

        return output.model_copy(
            update={
                "success": True,
                "total_rows": total_rows,
                "total_pages": decision.total_pages,
                "page": decision.page,
                "rows": rows,
            }
        )

    @staticmethod
    def _redirect(output: ListingResult, page: int | None) -> ListingResult:
        return output.model_copy(update={"redirect": f"?page={page}", "redirect_page": page})
