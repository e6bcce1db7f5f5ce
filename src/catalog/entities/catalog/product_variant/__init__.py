"""Entity package: ProductVariant."""

from .entity import ProductVariant
from .table import ProductVariantTable

__all__ = ["ProductVariant", "ProductVariantTable"]
