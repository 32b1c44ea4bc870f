"""Product repository: catalog access that returns Results.

The repository is the boundary where faults stop travelling as raises. Every
method returns a :data:`~storefront.core.result_primitives.Result`; callers
consume it with ``fold``/``match`` or the ``is_success``/``is_failure`` checks.
"""

from __future__ import annotations

from datetime import UTC, datetime
import logging
from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

from storefront import constants
from storefront.cache import ProductCache
from storefront.catalog.client import CatalogClient
from storefront.core import results
from storefront.core.exceptions import NotFoundException, RequiredFieldException
from storefront.core.result_primitives import Failure, Success
from storefront.models import Product, ProductRatings, estimate_rating_distribution
from storefront.retry import NO_RETRY, RetryPolicy, retry_result

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    import httpx

    from storefront.config import Config
    from storefront.core.result_primitives import Result

log = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class CatalogSource(Protocol):
    """Raw catalog access; implementations raise taxonomy exceptions."""

    async def fetch_products(self) -> list[Product]:
        """Fetch every product."""
        ...

    async def fetch_products_by_category(self, category: str) -> list[Product]:
        """Fetch the products of one category."""
        ...

    async def fetch_categories(self) -> list[str]:
        """Fetch category names."""
        ...

    async def fetch_product(self, product_id: int) -> Product:
        """Fetch one product or raise NotFoundException."""
        ...

    async def search_products(self, query: str) -> list[Product]:
        """Search products by text."""
        ...


@runtime_checkable
class ProductRepository(Protocol):
    """Contract for product data operations."""

    async def get_products(self) -> Result[list[Product]]:
        """Return every product."""
        ...

    async def get_product_by_id(self, product_id: int) -> Result[Product]:
        """Return one product, or a NotFoundException failure."""
        ...

    async def get_products_by_category(self, category: str) -> Result[list[Product]]:
        """Return the products in ``category`` ("All" means every product)."""
        ...

    async def get_categories(self) -> Result[list[str]]:
        """Return the category names."""
        ...

    async def search_products(self, query: str) -> Result[list[Product]]:
        """Return products matching ``query``; blank queries match nothing."""
        ...

    async def get_featured_products(self) -> Result[list[Product]]:
        """Return the top-rated products."""
        ...

    async def get_products_on_sale(self) -> Result[list[Product]]:
        """Return the discounted products."""
        ...

    async def get_related_products(
        self, product_id: int, *, limit: int = constants.RELATED_PRODUCTS_LIMIT
    ) -> Result[list[Product]]:
        """Return other products from the same category; unknown ids give []."""
        ...

    async def is_product_available(self, product_id: int) -> Result[bool]:
        """Return whether the product exists and is in stock."""
        ...

    async def get_product_ratings(self, product_id: int) -> Result[ProductRatings]:
        """Return the rating summary for one product."""
        ...


class CatalogProductRepository:
    """ProductRepository backed by a :class:`CatalogSource`.

    Args:
        source: Raw catalog access (normally a :class:`CatalogClient`).
        cache: Optional response cache; when set, list and product lookups are
            served from it and concurrent identical fetches share one request.
        retry_policy: Retry policy for transient network failures.
    """

    def __init__(
        self,
        source: CatalogSource,
        *,
        cache: ProductCache | None = None,
        retry_policy: RetryPolicy = NO_RETRY,
    ) -> None:
        """Wire the repository to its collaborators."""
        self._source = source
        self._cache = cache
        self._retry_policy = retry_policy

    @classmethod
    def from_config(
        cls, config: Config, *, http_client: httpx.AsyncClient | None = None
    ) -> CatalogProductRepository:
        """Build a repository (client, cache, retry) from configuration."""
        cache = (
            ProductCache(ttl_seconds=config.product_cache_ttl_s)
            if config.enable_product_cache
            else None
        )
        return cls(
            CatalogClient(config, http_client=http_client),
            cache=cache,
            retry_policy=config.retry,
        )

    # --- Plumbing ---

    async def _call(self, operation: Callable[[], Awaitable[T]]) -> Result[T]:
        return await retry_result(
            lambda: results.wrap_async(operation), policy=self._retry_policy
        )

    async def _cached(
        self, key: str, operation: Callable[[], Awaitable[T]]
    ) -> Result[T]:
        if self._cache is None:
            return await self._call(operation)
        return await self._cache.get_or_fetch(key, lambda: self._call(operation))

    def invalidate_cache(self) -> None:
        """Drop every cached catalog response."""
        if self._cache is not None:
            self._cache.clear()

    # --- Catalog ---

    async def get_products(self) -> Result[list[Product]]:
        """Fetch all products."""
        result = await self._cached(
            constants.PRODUCTS_CACHE_KEY, self._source.fetch_products
        )
        return result.tap(lambda products: log.debug("Loaded %d products", len(products)))

    async def get_product_by_id(self, product_id: int) -> Result[Product]:
        """Fetch one product; an unknown id yields NotFoundException."""
        checked = results.success(product_id).validate(
            lambda pid: isinstance(pid, int) and pid > 0,
            f"Product id must be a positive integer, got {product_id!r}",
        )
        return await checked.flat_map_async(
            lambda pid: self._cached(
                f"product:{pid}", lambda: self._source.fetch_product(pid)
            )
        )

    async def get_products_by_category(self, category: str) -> Result[list[Product]]:
        """Fetch the products of ``category`` (``"All"`` means every product)."""
        name = category.strip()
        if not name:
            return Failure(RequiredFieldException(["category"]))
        if name == constants.ALL_CATEGORIES:
            return await self.get_products()
        return await self._cached(
            f"category:{name}", lambda: self._source.fetch_products_by_category(name)
        )

    async def get_categories(self) -> Result[list[str]]:
        """Fetch all category names."""
        return await self._cached(
            constants.CATEGORIES_CACHE_KEY, self._source.fetch_categories
        )

    async def search_products(self, query: str) -> Result[list[Product]]:
        """Search products; a blank query matches nothing."""
        text = query.strip()
        if not text:
            return Success([])
        return await self._call(lambda: self._source.search_products(text))

    # --- Derived views ---

    async def get_featured_products(self) -> Result[list[Product]]:
        """Products rated at least 4.0, at most ten."""
        products = await self.get_products()
        return products.map(
            lambda items: [
                p for p in items if p.rating >= constants.FEATURED_MIN_RATING
            ][: constants.FEATURED_LIMIT]
        )

    async def get_products_on_sale(self) -> Result[list[Product]]:
        """Products priced above 50, at most eight."""
        products = await self.get_products()
        return products.map(
            lambda items: [p for p in items if p.price > constants.SALE_MIN_PRICE][
                : constants.SALE_LIMIT
            ]
        )

    async def get_related_products(
        self, product_id: int, *, limit: int = constants.RELATED_PRODUCTS_LIMIT
    ) -> Result[list[Product]]:
        """Other products from the same category as ``product_id``.

        An unknown ``product_id`` has no related products and yields ``[]``.
        """

        async def _siblings(target: Product) -> Result[list[Product]]:
            same_category = await self.get_products_by_category(target.category)
            return same_category.map(
                lambda items: [p for p in items if p.id != target.id][: max(0, limit)]
            )

        product = await self.get_product_by_id(product_id)
        if product.contains_error(NotFoundException):
            return Success([])
        return await product.flat_map_async(_siblings)

    async def is_product_available(self, product_id: int) -> Result[bool]:
        """True when the product exists and has stock; unknown ids are unavailable."""
        product = await self.get_product_by_id(product_id)
        return product.map(lambda p: p.is_in_stock).catch_error_of_type(
            NotFoundException, lambda _: Success(False)
        )

    async def get_product_ratings(self, product_id: int) -> Result[ProductRatings]:
        """Rating summary for a product."""
        product = await self.get_product_by_id(product_id)
        return product.map(_ratings_for)


def _ratings_for(product: Product) -> ProductRatings:
    return ProductRatings(
        product_id=product.id,
        average_rating=product.rating,
        rating_distribution=estimate_rating_distribution(product.rating),
        last_updated=datetime.now(UTC).isoformat(),
    )
