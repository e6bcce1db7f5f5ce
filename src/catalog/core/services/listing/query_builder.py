"""Translate listing parameters into a parameterized WHERE clause."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class WhereClause:
    """A WHERE clause template and the values bound to its placeholders.

    ``sql`` only ever contains named placeholders (``:keyword``); user input
    lives in ``params`` and is bound by the driver.
    """

    sql: str = "WHERE 1 = 1"
    params: dict[str, Any] = field(default_factory=dict)


def normalize_text(value: str | None) -> str | None:
    """Trim ``value`` and map the empty string to ``None``."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def build_where_clause(keyword: str | None = None, category: str | None = None) -> WhereClause:
    """Build the listing filter.

    ``keyword`` is matched as a substring of the product name, ``category``
    by exact equality against the category name.
    """
    conditions = ["1 = 1"]
    params: dict[str, Any] = {}

    keyword = normalize_text(keyword)
    if keyword:
        conditions.append("p.name LIKE :keyword")
        params["keyword"] = f"%{keyword}%"

    if category:
        conditions.append("c.category_name = :category")
        params["category"] = category

    return WhereClause(sql="WHERE " + " AND ".join(conditions), params=params)
