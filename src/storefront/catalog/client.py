"""Async HTTP client for the DummyJSON-style product catalog.

Every public method either returns parsed data or raises a taxonomy
exception; raw ``httpx``/JSON/pydantic faults never escape.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Self
from urllib.parse import quote

import httpx

from storefront import constants
from storefront._http import DEFAULT_HEADERS
from storefront.catalog._errors import wrap_catalog_error
from storefront.config import Config
from storefront.core.exceptions import DataException
from storefront.models import Product

if TYPE_CHECKING:
    from types import TracebackType

log = logging.getLogger(__name__)


class CatalogClient:
    """Thin async wrapper over the catalog endpoints.

    Pass ``http_client`` to reuse a configured ``httpx.AsyncClient`` (tests use
    one backed by ``httpx.MockTransport``); otherwise the client owns one.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create a client for ``config.base_url``."""
        self.config = config or Config()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=DEFAULT_HEADERS,
            timeout=httpx.Timeout(
                self.config.request_timeout_s, connect=self.config.connection_timeout_s
            ),
            follow_redirects=True,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    # --- Endpoints ---

    async def fetch_products(
        self, *, limit: int | None = None, skip: int | None = None
    ) -> list[Product]:
        """Fetch the product list."""
        params: dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if skip is not None:
            params["skip"] = skip
        payload = await self._get_json(constants.PRODUCTS_ENDPOINT, params=params)
        return _parse_product_page(payload)

    async def fetch_products_by_category(self, category: str) -> list[Product]:
        """Fetch the products of one category."""
        path = f"{constants.PRODUCTS_BY_CATEGORY_ENDPOINT}/{quote(category, safe='')}"
        payload = await self._get_json(path, resource_type="Category", resource_id=category)
        return _parse_product_page(payload)

    async def fetch_categories(self) -> list[str]:
        """Fetch category names.

        Newer API versions return objects (``{"slug", "name", "url"}``); older
        ones return bare strings. Both are accepted.
        """
        payload = await self._get_json(constants.CATEGORIES_ENDPOINT)
        if not isinstance(payload, list):
            raise DataException(
                "Expected a list of categories", code="FORMAT_ERROR"
            )
        names: list[str] = []
        for entry in payload:
            if isinstance(entry, str):
                names.append(entry)
            elif isinstance(entry, dict):
                names.append(str(entry.get("name") or entry.get("slug") or "Unknown"))
            else:
                names.append("Unknown")
        return names

    async def fetch_product(self, product_id: int) -> Product:
        """Fetch a single product; a 404 raises NotFoundException."""
        payload = await self._get_json(
            f"{constants.PRODUCTS_ENDPOINT}/{product_id}",
            resource_type="Product",
            resource_id=product_id,
        )
        try:
            return Product.model_validate(payload)
        except Exception as e:
            raise wrap_catalog_error(e) from e

    async def search_products(self, query: str) -> list[Product]:
        """Full-text product search."""
        payload = await self._get_json(
            constants.SEARCH_ENDPOINT, params={constants.SEARCH_QUERY_PARAM: query}
        )
        return _parse_product_page(payload)

    # --- Transport ---

    async def _get_json(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        resource_type: str | None = None,
        resource_id: str | int | None = None,
    ) -> Any:
        url = f"{self.config.base_url}{path}"
        try:
            response = await self._http.get(path, params=params or None)
            if self.config.enable_api_logging:
                log.info("GET %s -> %s", response.request.url, response.status_code)
            response.raise_for_status()
            return response.json()
        except Exception as e:
            log.debug("Catalog request to %s failed: %s", url, e)
            raise wrap_catalog_error(
                e,
                url=url,
                timeout_s=self.config.request_timeout_s,
                resource_type=resource_type,
                resource_id=resource_id,
            ) from e


def _parse_product_page(payload: Any) -> list[Product]:
    if not isinstance(payload, dict) or not isinstance(payload.get("products"), list):
        raise DataException(
            "Expected an object with a 'products' list", code="FORMAT_ERROR"
        )
    try:
        return [Product.model_validate(item) for item in payload["products"]]
    except Exception as e:
        raise wrap_catalog_error(e) from e
