"""Entity package: Category."""

from .entity import Category
from .table import CategoryTable

__all__ = ["Category", "CategoryTable"]
