"""Product browsing state for a catalog screen.

``ProductBrowser`` drives a :class:`ProductListState` from repository Results.
Failures never raise out of the browser: they become an
:class:`~storefront.error_handler.ErrorInfo` on the state, which a view can
render and later dismiss with :meth:`ProductBrowser.clear_error`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import TYPE_CHECKING

from storefront.constants import ALL_CATEGORIES
from storefront.error_handler import get_error_handler

if TYPE_CHECKING:
    from storefront.catalog.repository import ProductRepository
    from storefront.core.exceptions import AppException
    from storefront.core.result_primitives import Result
    from storefront.error_handler import ErrorHandler, ErrorHandlingStrategy, ErrorInfo
    from storefront.models import Product

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductListState:
    """Snapshot of what a product list screen shows."""

    products: tuple[Product, ...] = ()
    categories: tuple[str, ...] = ()
    selected_category: str = ALL_CATEGORIES
    query: str = ""
    is_loading: bool = False
    error: ErrorInfo | None = None

    @property
    def filtered_products(self) -> tuple[Product, ...]:
        """Products in the selected category.

        ``query`` is not applied here; search results already come from the
        repository's own matching.
        """
        if self.selected_category == ALL_CATEGORIES:
            return self.products
        return tuple(p for p in self.products if p.category == self.selected_category)

    @property
    def has_error(self) -> bool:
        """True when the last load failed."""
        return self.error is not None

    @property
    def is_empty(self) -> bool:
        """True when nothing is loading, nothing failed, and nothing matches."""
        return not self.is_loading and not self.has_error and not self.filtered_products


class ProductBrowser:
    """Loads, filters, and searches products into a :class:`ProductListState`."""

    def __init__(
        self,
        repository: ProductRepository,
        *,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        """Bind the browser to a repository."""
        self._repository = repository
        self._error_handler = error_handler or get_error_handler()
        self.state = ProductListState()

    @property
    def error_strategy(self) -> ErrorHandlingStrategy | None:
        """How the current error should be presented, if there is one."""
        if self.state.error is None:
            return None
        return self._error_handler.get_handling_strategy(self.state.error)

    async def load(self) -> ProductListState:
        """Load every product and the category list."""
        self.state = replace(self.state, is_loading=True, error=None)
        products = await self._repository.get_products()
        self._apply_products(products, "load_products")
        await self._load_categories()
        return self.state

    async def filter_by_category(self, category: str) -> ProductListState:
        """Show only ``category`` (``"All"`` shows everything)."""
        self.state = replace(
            self.state,
            selected_category=category,
            query="",
            is_loading=True,
            error=None,
        )
        products = await self._repository.get_products_by_category(category)
        self._apply_products(products, "filter_by_category")
        return self.state

    async def search(self, query: str) -> ProductListState:
        """Search the catalog; a blank query restores the category view."""
        if not query.strip():
            return await self.filter_by_category(self.state.selected_category)
        self.state = replace(
            self.state,
            selected_category=ALL_CATEGORIES,
            query=query,
            is_loading=True,
            error=None,
        )
        products = await self._repository.search_products(query)
        self._apply_products(products, "search")
        return self.state

    async def refresh(self) -> ProductListState:
        """Reload the current view."""
        if self.state.query.strip():
            await self.search(self.state.query)
        else:
            await self.filter_by_category(self.state.selected_category)
        await self._load_categories()
        return self.state

    def clear_error(self) -> ProductListState:
        """Dismiss the current error."""
        self.state = replace(self.state, error=None)
        return self.state

    def reset(self) -> ProductListState:
        """Return to the initial empty state."""
        self.state = ProductListState()
        return self.state

    # --- Internals ---

    async def _load_categories(self) -> None:
        categories = await self._repository.get_categories()
        self.state = categories.match(
            success=lambda names: replace(
                self.state,
                categories=(ALL_CATEGORIES, *(n for n in names if n != ALL_CATEGORIES)),
            ),
            failure=lambda error: self._with_error(error, "load_categories"),
        )

    def _apply_products(self, result: Result[list[Product]], operation: str) -> None:
        self.state = result.fold(
            lambda items: replace(self.state, products=tuple(items), is_loading=False),
            lambda error: self._with_error(error, operation),
        )

    def _with_error(self, error: AppException, operation: str) -> ProductListState:
        info = self._error_handler.handle_error(error, context={"operation": operation})
        log.debug("%s failed; showing %s", operation, info.title)
        return replace(self.state, is_loading=False, error=info)
