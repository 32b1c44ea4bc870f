"""Map raw HTTP-layer faults into the storefront error taxonomy.

The catalog client calls :func:`wrap_catalog_error` at its boundary so nothing
above it ever sees an ``httpx`` or decoding error.
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

import httpx
import pydantic

from storefront.core.exceptions import (
    AppException,
    AuthenticationException,
    ConnectionException,
    DataException,
    InsufficientPermissionException,
    NetworkException,
    NotFoundException,
    ServerException,
    TimeoutException,
)

if TYPE_CHECKING:
    from collections.abc import Iterator


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
        value = getattr(e, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def _request_url(exc: BaseException) -> str | None:
    try:
        request = getattr(exc, "request", None)
    except RuntimeError:
        # httpx raises RuntimeError when no request is attached.
        return None
    url = getattr(request, "url", None)
    return str(url) if url is not None else None


def wrap_catalog_error(
    exc: BaseException,
    *,
    url: str | None = None,
    timeout_s: float | None = None,
    resource_type: str | None = None,
    resource_id: str | int | None = None,
) -> AppException:
    """Map a raw exception into the most specific taxonomy variant."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    # Already classified.
    if isinstance(exc, AppException):
        return exc

    url = url or _request_url(exc)
    tb = exc.__traceback__

    if isinstance(exc, httpx.TimeoutException):
        return TimeoutException(
            "Request timed out",
            timeout=timeout_s if timeout_s is not None else 0.0,
            url=url,
            code="TIMEOUT_ERROR",
            original_error=exc,
            stack_trace=tb,
        )

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status >= 500:
            return ServerException(
                "Server error. Please try again later.",
                status_code=status,
                url=url,
                code="SERVER_ERROR",
                original_error=exc,
                stack_trace=tb,
            )
        if status == 404:
            return NotFoundException(
                "The requested resource was not found.",
                resource_type=resource_type,
                resource_id=resource_id,
                code="NOT_FOUND",
                original_error=exc,
                stack_trace=tb,
            )
        if status == 401:
            return AuthenticationException(
                "Authentication failed. Please log in again.",
                code="UNAUTHORIZED",
                original_error=exc,
                stack_trace=tb,
            )
        if status == 403:
            return InsufficientPermissionException(
                "Access denied. You don't have permission to perform this action.",
                code="FORBIDDEN",
                original_error=exc,
                stack_trace=tb,
            )
        return NetworkException(
            "Too many requests. Please try again later."
            if status == 429
            else f"Request failed with status {status}",
            status_code=status,
            url=url,
            code="RATE_LIMITED" if status == 429 else "HTTP_ERROR",
            original_error=exc,
            stack_trace=tb,
        )

    if isinstance(exc, httpx.TransportError):
        return ConnectionException(
            "Network connection error. Please check your internet connection.",
            url=url,
            code="CONNECTION_ERROR",
            original_error=exc,
            stack_trace=tb,
        )

    if isinstance(exc, (json.JSONDecodeError, pydantic.ValidationError)):
        return DataException(
            f"Invalid data received from the catalog: {exc}",
            code="FORMAT_ERROR",
            original_error=exc,
            stack_trace=tb,
        )

    status = extract_status_code(exc)
    if status is not None:
        return NetworkException(
            str(exc) or f"Request failed with status {status}",
            status_code=status,
            url=url,
            original_error=exc,
            stack_trace=tb,
        )

    return AppException(
        str(exc) or type(exc).__name__, original_error=exc, stack_trace=tb
    )
