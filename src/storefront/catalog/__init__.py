"""Catalog access: HTTP client, error mapping, and the product repository."""

from storefront.catalog.client import CatalogClient
from storefront.catalog.repository import (
    CatalogProductRepository,
    CatalogSource,
    ProductRepository,
)

__all__ = [
    "CatalogClient",
    "CatalogProductRepository",
    "CatalogSource",
    "ProductRepository",
]
