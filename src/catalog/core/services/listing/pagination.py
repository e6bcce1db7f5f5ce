"""Decide between serving a listing page and redirecting to a corrected one."""

from __future__ import annotations

import math
from dataclasses import dataclass

PER_PAGE = 12


@dataclass(frozen=True)
class PageDecision:
    """Result of resolving a requested page against the row count.

    Exactly one of ``redirect_to`` and ``offset`` is meaningful: a redirect
    never fetches rows, and an empty listing has neither.
    """

    page: int
    total_pages: int = 0
    redirect_to: int | None = None
    offset: int | None = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_to is not None

    @property
    def fetch_rows(self) -> bool:
        return self.offset is not None


class PaginationResolver:
    """Resolve a requested listing page with a fixed page size."""

    def __init__(self, per_page: int = PER_PAGE) -> None:
        if per_page < 1:
            raise ValueError("per_page must be positive")
        self.per_page = per_page

    def total_pages(self, total_rows: int) -> int:
        return math.ceil(total_rows / self.per_page)

    def check_lower_bound(self, page: int) -> PageDecision | None:
        """Redirect pages below 1 before anything is counted."""
        if page < 1:
            return PageDecision(page=page, redirect_to=1)
        return None

    def resolve(self, page: int, total_rows: int) -> PageDecision:
        lower = self.check_lower_bound(page)
        if lower is not None:
            return lower

        total_pages = self.total_pages(total_rows)

        # No rows: any page is served as an empty page, never redirected.
        if total_rows == 0:
            return PageDecision(page=page, total_pages=0)

        if page > total_pages:
            return PageDecision(page=page, total_pages=total_pages, redirect_to=total_pages)

        return PageDecision(
            page=page,
            total_pages=total_pages,
            offset=(page - 1) * self.per_page,
        )
