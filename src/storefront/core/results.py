"""Namespace helpers for building Results.

Import the module and use it as a namespace::

    from storefront.core import results

    parsed = results.wrap(lambda: int(raw))
    page = results.combine([first, second, third])
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from storefront.core.result_primitives import (
    Failure,
    Result,
    Success,
    failure,
    failure_from_exception,
    success,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

T = TypeVar("T")

__all__ = [
    "combine",
    "failure",
    "failure_from_exception",
    "success",
    "wrap",
    "wrap_async",
]


def wrap(operation: Callable[[], T]) -> Result[T]:
    """Run ``operation`` and capture its value or its raise."""
    try:
        return Success(operation())
    except Exception as e:
        return failure_from_exception(e)


async def wrap_async(operation: Callable[[], Awaitable[T]]) -> Result[T]:
    """Await ``operation`` and capture its value or its raise."""
    try:
        return Success(await operation())
    except Exception as e:
        return failure_from_exception(e)


def combine(results: Iterable[Result[T]]) -> Result[list[T]]:
    """Collect the values of ``results`` in order.

    The first Failure in input order wins; later inputs are not inspected.
    An empty input yields ``Success([])``.
    """
    values: list[T] = []
    for result in results:
        match result:
            case Success(value):
                values.append(value)
            case Failure():
                return result  # type: ignore[return-value]
            case _:
                raise TypeError(f"Expected Success or Failure, got {type(result).__name__}")
    return Success(values)
