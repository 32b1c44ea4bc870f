"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off catalog subclasses as coverage expands.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from storefront.core.exceptions import NotFoundException
from storefront.models import Product


def product_payload(product_id: int = 1, **overrides: Any) -> dict[str, Any]:
    """Return a DummyJSON-shaped product object."""
    payload: dict[str, Any] = {
        "id": product_id,
        "title": f"Product {product_id}",
        "price": 25.0,
        "description": f"Description of product {product_id}",
        "category": "beauty",
        "thumbnail": f"https://cdn.example/{product_id}.png",
        "rating": 3.5,
        "stock": 10,
        "brand": "Acme",
    }
    payload.update(overrides)
    return payload


def make_product(product_id: int = 1, **overrides: Any) -> Product:
    """Return a validated Product."""
    return Product.model_validate(product_payload(product_id, **overrides))


def page(*products: dict[str, Any]) -> dict[str, Any]:
    """Wrap product payloads the way list endpoints do."""
    return {"products": list(products), "total": len(products), "skip": 0, "limit": 30}


@dataclass
class FakeCatalogSource:
    """CatalogSource double serving an in-memory product list.

    ``failures`` maps a method name to a scripted list of exceptions raised
    (one per call) before the method starts answering normally.
    """

    products: list[Product] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    failures: dict[str, list[BaseException]] = field(default_factory=dict)
    calls: dict[str, int] = field(default_factory=dict)
    delay_s: float = 0.0

    async def _enter(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        scripted = self.failures.get(name)
        if scripted:
            raise scripted.pop(0)

    async def fetch_products(self) -> list[Product]:
        await self._enter("fetch_products")
        return list(self.products)

    async def fetch_products_by_category(self, category: str) -> list[Product]:
        await self._enter("fetch_products_by_category")
        return [p for p in self.products if p.category == category]

    async def fetch_categories(self) -> list[str]:
        await self._enter("fetch_categories")
        return list(self.categories)

    async def fetch_product(self, product_id: int) -> Product:
        await self._enter("fetch_product")
        for product in self.products:
            if product.id == product_id:
                return product
        raise NotFoundException(
            "The requested resource was not found.",
            resource_type="Product",
            resource_id=product_id,
            code="NOT_FOUND",
        )

    async def search_products(self, query: str) -> list[Product]:
        await self._enter("search_products")
        needle = query.lower()
        return [
            p
            for p in self.products
            if needle in p.title.lower() or needle in p.category.lower()
        ]
