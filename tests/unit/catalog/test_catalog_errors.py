"""Raw fault to taxonomy mapping at the catalog boundary."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from storefront.catalog._errors import extract_status_code, wrap_catalog_error
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

pytestmark = pytest.mark.unit

URL = "https://catalog.test/products/1"


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", URL)
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


@pytest.mark.parametrize(
    ("status", "expected", "code"),
    [
        (500, ServerException, "SERVER_ERROR"),
        (503, ServerException, "SERVER_ERROR"),
        (404, NotFoundException, "NOT_FOUND"),
        (401, AuthenticationException, "UNAUTHORIZED"),
        (403, InsufficientPermissionException, "FORBIDDEN"),
        (429, NetworkException, "RATE_LIMITED"),
        (400, NetworkException, "HTTP_ERROR"),
    ],
)
def test_status_errors(status: int, expected: type[AppException], code: str) -> None:
    raw = _status_error(status)
    err = wrap_catalog_error(raw, url=URL, resource_type="Product", resource_id=1)
    assert type(err) is expected
    assert err.code == code
    assert err.original_error is raw


def test_not_found_carries_resource_identity() -> None:
    err = wrap_catalog_error(_status_error(404), resource_type="Product", resource_id=5)
    assert isinstance(err, NotFoundException)
    assert (err.resource_type, err.resource_id) == ("Product", "5")


def test_url_falls_back_to_the_request() -> None:
    err = wrap_catalog_error(_status_error(502))
    assert isinstance(err, ServerException)
    assert err.url == URL


def test_timeouts_and_transport_errors() -> None:
    timeout = wrap_catalog_error(httpx.ConnectTimeout("slow"), timeout_s=3)
    assert isinstance(timeout, TimeoutException)
    assert timeout.timeout.total_seconds() == 3

    refused = wrap_catalog_error(httpx.ConnectError("refused"), url=URL)
    assert isinstance(refused, ConnectionException)
    assert refused.url == URL


def test_decode_errors_become_data_exceptions() -> None:
    with pytest.raises(json.JSONDecodeError) as exc:
        json.loads("{")
    err = wrap_catalog_error(exc.value)
    assert isinstance(err, DataException)
    assert err.code == "FORMAT_ERROR"


def test_taxonomy_errors_pass_through() -> None:
    original = NotFoundException("gone")
    assert wrap_catalog_error(original) is original


def test_cancellation_is_reraised() -> None:
    with pytest.raises(asyncio.CancelledError):
        wrap_catalog_error(asyncio.CancelledError())


def test_status_is_found_along_the_cause_chain() -> None:
    class _Upstream(Exception):
        status_code = 503

    try:
        try:
            raise _Upstream("upstream")
        except _Upstream as inner:
            raise RuntimeError("outer") from inner
    except RuntimeError as outer:
        assert extract_status_code(outer) == 503
        err = wrap_catalog_error(outer)

    assert isinstance(err, NetworkException)
    assert err.status_code == 503


def test_unknown_errors_become_generic_app_exceptions() -> None:
    raw = KeyError("x")
    err = wrap_catalog_error(raw)
    assert type(err) is AppException
    assert err.original_error is raw
