"""Catalog data models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Product(BaseModel):
    """A catalog product as served by the DummyJSON-style API.

    Missing or ``null`` fields fall back to their defaults, so partial
    payloads still produce a usable product.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int = 0
    title: str = "Unknown Product"
    price: float = 0.0
    description: str = "No description available"
    category: str = "Unknown"
    thumbnail: str = ""
    rating: float = 0.0
    stock: int = 0
    brand: str = "Unknown Brand"
    image: str | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Treat explicit nulls as absent so defaults apply."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @property
    def is_in_stock(self) -> bool:
        """True when at least one unit is available."""
        return self.stock > 0


class ProductRatings(BaseModel):
    """Rating summary for one product.

    The API only exposes an average, so ``rating_distribution`` holds an
    estimated percentage per star bucket (``"5"`` .. ``"1"``).
    """

    model_config = ConfigDict(frozen=True)

    product_id: int
    average_rating: float
    total_reviews: int | None = None
    rating_distribution: dict[str, int] = Field(default_factory=dict)
    last_updated: str


_DISTRIBUTIONS: tuple[tuple[float, tuple[int, int, int, int, int]], ...] = (
    (4.5, (60, 25, 10, 3, 2)),
    (4.0, (40, 35, 15, 5, 5)),
    (3.5, (20, 30, 30, 10, 10)),
    (3.0, (10, 20, 35, 20, 15)),
)
_LOW_RATING_DISTRIBUTION = (5, 10, 20, 30, 35)


def estimate_rating_distribution(average_rating: float) -> dict[str, int]:
    """Return percentage buckets for 5..1 stars that sum to 100."""
    buckets = _LOW_RATING_DISTRIBUTION
    for threshold, distribution in _DISTRIBUTIONS:
        if average_rating >= threshold:
            buckets = distribution
            break
    return {str(star): pct for star, pct in zip((5, 4, 3, 2, 1), buckets, strict=True)}
