from __future__ import annotations

import copy
from datetime import UTC, datetime, timedelta
import pickle

import pytest

from storefront.core.exceptions import (
    REQUIRED_FIELD_MESSAGE,
    AppException,
    AuthenticationException,
    BusinessLogicException,
    CacheException,
    CacheMissException,
    ConfigurationException,
    ConnectionException,
    DataException,
    DuplicateResourceException,
    ErrorKind,
    ErrorType,
    InsufficientPermissionException,
    InvalidCredentialsException,
    MissingConfigurationException,
    NetworkException,
    NotFoundException,
    RequiredFieldException,
    ResourceLockedException,
    ServerException,
    SessionInvalidException,
    TimeoutException,
    TokenExpiredException,
    ValidationException,
)
from storefront.core.result_primitives import Failure

pytestmark = pytest.mark.unit


def test_app_exception_string_includes_code_when_present() -> None:
    assert str(AppException("boom")) == "AppException: boom"
    assert str(AppException("boom", code="X1")) == "AppException: boom (Code: X1)"


def test_app_exception_defaults_to_none() -> None:
    err = AppException("fail")
    assert err.message == "fail"
    assert err.code is None
    assert err.original_error is None
    assert err.stack_trace is None


def test_network_exception_renders_status_and_url() -> None:
    err = NetworkException(
        "bad gateway", status_code=502, url="https://x/products", code="HTTP_ERROR"
    )
    assert str(err) == (
        "NetworkException: bad gateway (Status: 502) (URL: https://x/products)"
        " (Code: HTTP_ERROR)"
    )


def test_server_exception_requires_status_code() -> None:
    err = ServerException("down", status_code=503)
    assert err.status_code == 503
    assert str(err) == "ServerException: down (Status: 503)"
    with pytest.raises(TypeError):
        ServerException("down")  # type: ignore[call-arg]


def test_timeout_exception_accepts_seconds_or_timedelta() -> None:
    assert TimeoutException("slow", timeout=30).timeout == timedelta(seconds=30)
    err = TimeoutException("slow", timeout=timedelta(seconds=12.9))
    assert str(err) == "TimeoutException: slow (Timeout: 12s)"


def test_token_expired_renders_expiry() -> None:
    expired_at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    err = TokenExpiredException("expired", expired_at=expired_at)
    assert str(err) == (
        "TokenExpiredException: expired (Expired: 2024-01-02T03:04:05+00:00)"
    )


def test_validation_exception_lists_field_errors() -> None:
    err = ValidationException({"email": ["invalid", "too long"], "age": ["negative"]})
    assert err.message == "Validation failed"
    assert str(err) == (
        "ValidationException: Validation failed - "
        "email: invalid, too long; age: negative"
    )


def test_required_field_exception_synthesizes_errors() -> None:
    err = RequiredFieldException(["name", "email"])
    assert err.missing_fields == ("name", "email")
    assert err.errors == {
        "name": (REQUIRED_FIELD_MESSAGE,),
        "email": (REQUIRED_FIELD_MESSAGE,),
    }
    assert str(err) == (
        "RequiredFieldException: Required fields are missing - Missing: name, email"
    )


def test_not_found_stores_resource_id_as_text() -> None:
    err = NotFoundException("missing", resource_type="Product", resource_id=42)
    assert err.resource_id == "42"
    assert str(err) == "NotFoundException: missing (Type: Product) (ID: 42)"


@pytest.mark.parametrize(
    ("error", "parents", "error_type"),
    [
        (ServerException("s", status_code=500), (NetworkException,), ErrorType.NETWORK),
        (ConnectionException("c"), (NetworkException,), ErrorType.NETWORK),
        (
            SessionInvalidException("s"),
            (AuthenticationException,),
            ErrorType.AUTHENTICATION,
        ),
        (RequiredFieldException(["a"]), (ValidationException,), ErrorType.VALIDATION),
        (NotFoundException("n"), (DataException,), ErrorType.DATA),
        (CacheMissException("m"), (), ErrorType.CACHE),
        (InsufficientPermissionException("p"), (), ErrorType.BUSINESS_LOGIC),
        (MissingConfigurationException("k"), (), ErrorType.CONFIGURATION),
    ],
)
def test_subclass_hierarchy(
    error: AppException, parents: tuple[type[AppException], ...], error_type: ErrorType
) -> None:
    """Every variant is catchable as AppException and its layer parent."""
    assert isinstance(error, AppException)
    for parent in parents:
        assert isinstance(error, parent)
    assert error.error_type is error_type


def test_is_kind_matches_variant_and_ancestors() -> None:
    err = ServerException("down", status_code=500)
    assert err.kind is ErrorKind.SERVER
    assert err.is_kind(ErrorKind.SERVER)
    assert err.is_kind(ErrorKind.NETWORK)
    assert err.is_kind(ErrorKind.APP)
    assert not err.is_kind(ErrorKind.TIMEOUT)


def test_exceptions_are_immutable_after_construction() -> None:
    err = NotFoundException("missing", resource_id=1)
    with pytest.raises(AttributeError):
        err.message = "changed"  # type: ignore[misc]
    with pytest.raises(AttributeError):
        err.resource_id = "2"  # type: ignore[misc]
    assert err.message == "missing"


def test_collection_payloads_cannot_be_mutated_in_place() -> None:
    source = {"email": ["invalid"]}
    err = ValidationException(source)
    source["email"].append("late")

    assert err.errors == {"email": ("invalid",)}
    with pytest.raises(TypeError):
        err.errors["age"] = ("negative",)  # type: ignore[index]
    with pytest.raises(AttributeError):
        err.errors["email"].append("too long")  # type: ignore[attr-defined]

    required = RequiredFieldException(["name"])
    with pytest.raises(AttributeError):
        required.missing_fields.append("email")  # type: ignore[attr-defined]
    assert str(required).endswith("Missing: name")


_EXPIRY = datetime(2024, 1, 1, tzinfo=UTC)

ALL_VARIANTS = [
    AppException("boom", code="X"),
    NetworkException("net", status_code=429, url="https://a.test"),
    ServerException("down", status_code=503, url="https://a.test"),
    TimeoutException("slow", timeout=4, url="https://a.test"),
    ConnectionException("refused", url="https://a.test"),
    AuthenticationException("auth"),
    InvalidCredentialsException("nope"),
    TokenExpiredException("expired", expired_at=_EXPIRY),
    SessionInvalidException("stale"),
    ValidationException({"email": ["invalid"]}, message="bad", code="V"),
    RequiredFieldException(["name", "email"]),
    DataException("data"),
    NotFoundException("gone", resource_type="Product", resource_id=7),
    DuplicateResourceException("dup", resource_type="User", duplicate_field="email"),
    CacheException("cache"),
    CacheMissException("miss", cache_key="products"),
    BusinessLogicException("rule"),
    InsufficientPermissionException("no", required_permission="w", user_role="r"),
    ResourceLockedException("locked", locked_by="u1", lock_expires_at=_EXPIRY),
    ConfigurationException("config"),
    MissingConfigurationException("unset", config_key="API_BASE_URL"),
]


@pytest.mark.parametrize("err", ALL_VARIANTS, ids=lambda e: type(e).__name__)
def test_pickle_preserves_variant_and_fields(err: AppException) -> None:
    restored = pickle.loads(pickle.dumps(err))  # noqa: S301

    assert type(restored) is type(err)
    assert str(restored) == str(err)
    assert vars(restored) == vars(err)
    with pytest.raises(AttributeError):
        restored.message = "changed"  # type: ignore[misc]


@pytest.mark.parametrize("err", ALL_VARIANTS, ids=lambda e: type(e).__name__)
def test_copies_return_the_same_immutable_error(err: AppException) -> None:
    assert copy.copy(err) is err
    assert copy.deepcopy(err) is err


def test_failures_holding_errors_can_be_copied_and_pickled() -> None:
    failure = Failure(NotFoundException("gone", resource_id=3))

    assert copy.deepcopy(failure) == failure
    restored = pickle.loads(pickle.dumps(failure))  # noqa: S301
    assert isinstance(restored.error, NotFoundException)
    assert restored.error.resource_id == "3"


def test_immutable_exceptions_can_still_be_raised_and_chained() -> None:
    cause = ValueError("root")
    with pytest.raises(DataException) as exc:
        try:
            raise cause
        except ValueError as e:
            raise DataException("wrapped", original_error=e) from e

    assert exc.value.__cause__ is cause
    assert exc.value.original_error is cause
    assert exc.value.__traceback__ is not None
