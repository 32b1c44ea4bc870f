#!/usr/bin/env python3
"""Browse the product catalog from the command line.

Usage:
  python scripts/catalog_demo.py                      # featured products
  python scripts/catalog_demo.py --view sale
  python scripts/catalog_demo.py --category smartphones
  python scripts/catalog_demo.py --search phone
  python scripts/catalog_demo.py --product 1          # details + ratings

Reads configuration from the environment (and `.env`), e.g. API_BASE_URL.
Failures are reported through the error handler; the exit code is non-zero
when the requested view could not be loaded.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from storefront import (
    CatalogClient,
    CatalogProductRepository,
    Config,
    ConfigurationException,
    get_error_handler,
)

if TYPE_CHECKING:  # pragma: no cover - typing-only import at runtime
    from storefront import AppException, Product, Result


def _print_products(products: list[Product]) -> int:
    if not products:
        print("(no products)")
    for p in products:
        stock = "in stock" if p.is_in_stock else "sold out"
        print(f"#{p.id:<4} {p.title:<40} {p.price:>9.2f}  {p.rating:.1f}*  {stock}")
    return 0


def _report(error: AppException) -> int:
    info = get_error_handler().handle_error(error, context={"source": "catalog_demo"})
    print(f"{info.title}: {info.user_message}", file=sys.stderr)
    for suggestion in info.suggestions:
        print(f"  - {suggestion}", file=sys.stderr)
    return 1


def _show(result: Result[list[Product]]) -> int:
    return result.fold(_print_products, _report)


async def _run(args: argparse.Namespace, config: Config) -> int:
    async with CatalogClient(config) as client:
        repo = CatalogProductRepository(client, retry_policy=config.retry)
        return await _show_view(args, repo)


async def _show_view(args: argparse.Namespace, repo: CatalogProductRepository) -> int:
    if args.product is not None:
        product = await repo.get_product_by_id(args.product)
        ratings = await repo.get_product_ratings(args.product)
        code = product.fold(lambda p: _print_products([p]), _report)
        if code == 0:
            ratings.tap(lambda r: print(f"ratings: {r.rating_distribution}"))
            related = await repo.get_related_products(args.product)
            print("related:")
            code = _show(related)
        return code
    if args.search:
        return _show(await repo.search_products(args.search))
    if args.category:
        return _show(await repo.get_products_by_category(args.category))
    if args.view == "sale":
        return _show(await repo.get_products_on_sale())
    if args.view == "all":
        return _show(await repo.get_products())
    return _show(await repo.get_featured_products())


def main() -> int:
    """CLI entry: print one catalog view."""
    parser = argparse.ArgumentParser(description="Browse the product catalog")
    parser.add_argument(
        "--view",
        choices=["featured", "sale", "all"],
        default="featured",
        help="Which product list to show",
    )
    parser.add_argument("--category", help="Show one category")
    parser.add_argument("--search", help="Full-text product search")
    parser.add_argument("--product", type=int, help="Show one product by id")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s: %(message)s",
    )

    try:
        config = Config.from_env()
    except ConfigurationException as e:
        return _report(e)
    return asyncio.run(_run(args, config))


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
