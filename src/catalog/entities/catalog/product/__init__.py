"""Entity package: Product.

- ProductListRow / ProductDetail: read models returned to the HTTP layer
- ProductTable: database persistence model
- ProductRepository: data access layer
"""

from .entity import InsertResult, ProductDetail, ProductListRow
from .repository import ProductRepository
from .table import ProductTable

__all__ = [
    "InsertResult",
    "ProductDetail",
    "ProductListRow",
    "ProductRepository",
    "ProductTable",
]
