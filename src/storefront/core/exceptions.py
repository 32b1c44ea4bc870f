"""Core exceptions for the storefront.

Every failure path is represented by one of the classes below instead of a raw
platform fault. Each class carries two class-level tags:

- ``kind``: a unique :class:`ErrorKind` discriminator for the variant.
- ``error_type``: the :class:`ErrorType` layer the variant belongs to.

Callers that need to branch on the failure kind should use ``isinstance`` or
:meth:`AppException.is_kind`, never the message text.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from types import TracebackType


class ErrorType(Enum):
    """Layer a failure originates from."""

    NETWORK = "network"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    DATA = "data"
    CACHE = "cache"
    BUSINESS_LOGIC = "business_logic"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class ErrorKind(Enum):
    """Discriminator naming each variant of the taxonomy."""

    APP = "app"
    NETWORK = "network"
    SERVER = "server"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    AUTHENTICATION = "authentication"
    INVALID_CREDENTIALS = "invalid_credentials"
    TOKEN_EXPIRED = "token_expired"
    SESSION_INVALID = "session_invalid"
    VALIDATION = "validation"
    REQUIRED_FIELD = "required_field"
    DATA = "data"
    NOT_FOUND = "not_found"
    DUPLICATE_RESOURCE = "duplicate_resource"
    CACHE = "cache"
    CACHE_MISS = "cache_miss"
    BUSINESS_LOGIC = "business_logic"
    INSUFFICIENT_PERMISSION = "insufficient_permission"
    RESOURCE_LOCKED = "resource_locked"
    CONFIGURATION = "configuration"
    MISSING_CONFIGURATION = "missing_configuration"


REQUIRED_FIELD_MESSAGE = "This field is required"


def _rebuild(cls: type[AppException], fields: dict[str, Any]) -> AppException:
    """Recreate an error from its constructor keywords (used by pickle)."""
    return cls(**fields)


class AppException(Exception):
    """Base exception for all storefront errors.

    Also used directly as the generic catch-all for faults that do not fit a
    more specific variant.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.APP
    error_type: ClassVar[ErrorType] = ErrorType.UNKNOWN

    message: str
    code: str | None
    original_error: Any | None
    stack_trace: TracebackType | None

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize the error; fields are read-only afterwards."""
        super().__init__(message)
        object.__setattr__(self, "message", message)
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "original_error", original_error)
        object.__setattr__(self, "stack_trace", stack_trace)
        object.__setattr__(self, "_sealed", True)

    def __setattr__(self, name: str, value: Any) -> None:
        # Interpreter-managed attributes (__traceback__, __notes__, ...) stay writable.
        if getattr(self, "_sealed", False) and not name.startswith("__"):
            raise AttributeError(
                f"{type(self).__name__} is immutable; cannot set {name!r}"
            )
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, "_sealed", False) and not name.startswith("__"):
            raise AttributeError(
                f"{type(self).__name__} is immutable; cannot delete {name!r}"
            )
        object.__delattr__(self, name)

    def _details(self) -> str:
        return ""

    def _fields(self) -> dict[str, Any]:
        # Constructor keywords that rebuild this error. Tracebacks cannot be
        # pickled, so stack_trace is not carried over.
        return {
            "message": self.message,
            "code": self.code,
            "original_error": self.original_error,
        }

    def __reduce__(self) -> tuple[Any, ...]:
        return (_rebuild, (type(self), self._fields()))

    def __copy__(self) -> AppException:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> AppException:
        return self

    def __str__(self) -> str:
        """Return ``"<TypeName>: <message>"`` plus details and code."""
        code = f" (Code: {self.code})" if self.code is not None else ""
        return f"{type(self).__name__}: {self.message}{self._details()}{code}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"

    def is_kind(self, kind: ErrorKind) -> bool:
        """Return True if this error is *kind* or a specialisation of it."""
        return any(
            getattr(cls, "kind", None) is kind
            for cls in type(self).__mro__
            if isinstance(cls, type) and issubclass(cls, AppException)
        )


# --- Network ---


class NetworkException(AppException):
    """A request to a remote service failed."""

    kind = ErrorKind.NETWORK
    error_type = ErrorType.NETWORK

    status_code: int | None
    url: str | None

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize with optional HTTP status and URL."""
        self.status_code = status_code
        self.url = url
        super().__init__(
            message, code=code, original_error=original_error, stack_trace=stack_trace
        )

    def _details(self) -> str:
        status = f" (Status: {self.status_code})" if self.status_code is not None else ""
        url = f" (URL: {self.url})" if self.url is not None else ""
        return f"{status}{url}"

    def _fields(self) -> dict[str, Any]:
        return {**super()._fields(), "status_code": self.status_code, "url": self.url}


class ServerException(NetworkException):
    """The remote service answered with an error status."""

    kind = ErrorKind.SERVER

    status_code: int

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        url: str | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize; ``status_code`` is required."""
        super().__init__(
            message,
            status_code=status_code,
            url=url,
            code=code,
            original_error=original_error,
            stack_trace=stack_trace,
        )


class TimeoutException(NetworkException):
    """A request did not complete within its time budget."""

    kind = ErrorKind.TIMEOUT

    timeout: timedelta

    def __init__(
        self,
        message: str,
        *,
        timeout: timedelta | float,
        url: str | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize; a numeric ``timeout`` is taken as seconds."""
        self.timeout = (
            timeout if isinstance(timeout, timedelta) else timedelta(seconds=timeout)
        )
        super().__init__(
            message,
            url=url,
            code=code,
            original_error=original_error,
            stack_trace=stack_trace,
        )

    def _details(self) -> str:
        return f" (Timeout: {int(self.timeout.total_seconds())}s)"

    def _fields(self) -> dict[str, Any]:
        return {**AppException._fields(self), "timeout": self.timeout, "url": self.url}


class ConnectionException(NetworkException):
    """The remote service could not be reached."""

    kind = ErrorKind.CONNECTION

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize with the unreachable URL, if known."""
        super().__init__(
            message,
            url=url,
            code=code,
            original_error=original_error,
            stack_trace=stack_trace,
        )

    def _fields(self) -> dict[str, Any]:
        return {**AppException._fields(self), "url": self.url}


# --- Authentication ---


class AuthenticationException(AppException):
    """The caller could not be authenticated."""

    kind = ErrorKind.AUTHENTICATION
    error_type = ErrorType.AUTHENTICATION


class InvalidCredentialsException(AuthenticationException):
    """Username or password were rejected."""

    kind = ErrorKind.INVALID_CREDENTIALS


class TokenExpiredException(AuthenticationException):
    """The session token is past its expiry."""

    kind = ErrorKind.TOKEN_EXPIRED

    expired_at: datetime

    def __init__(
        self,
        message: str,
        *,
        expired_at: datetime,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize with the moment the token expired."""
        self.expired_at = expired_at
        super().__init__(
            message, code=code, original_error=original_error, stack_trace=stack_trace
        )

    def _details(self) -> str:
        return f" (Expired: {self.expired_at.isoformat()})"

    def _fields(self) -> dict[str, Any]:
        return {**super()._fields(), "expired_at": self.expired_at}


class SessionInvalidException(AuthenticationException):
    """The stored session is unusable."""

    kind = ErrorKind.SESSION_INVALID


# --- Validation ---


class ValidationException(AppException):
    """Input failed validation; ``errors`` maps field names to messages."""

    kind = ErrorKind.VALIDATION
    error_type = ErrorType.VALIDATION

    errors: Mapping[str, tuple[str, ...]]

    def __init__(
        self,
        errors: Mapping[str, Iterable[str]] | None = None,
        *,
        message: str | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize; the message defaults to ``"Validation failed"``."""
        self.errors = MappingProxyType(
            {field: tuple(msgs) for field, msgs in (errors or {}).items()}
        )
        super().__init__(
            message if message is not None else "Validation failed",
            code=code,
            original_error=original_error,
            stack_trace=stack_trace,
        )

    def _details(self) -> str:
        if not self.errors:
            return ""
        listed = "; ".join(
            f"{field}: {', '.join(msgs)}" for field, msgs in self.errors.items()
        )
        return f" - {listed}"

    def _fields(self) -> dict[str, Any]:
        return {
            **super()._fields(),
            "errors": {field: list(msgs) for field, msgs in self.errors.items()},
        }


class RequiredFieldException(ValidationException):
    """One or more mandatory fields were not supplied."""

    kind = ErrorKind.REQUIRED_FIELD

    missing_fields: tuple[str, ...]

    def __init__(
        self,
        missing_fields: Iterable[str],
        *,
        message: str | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize and synthesize one error entry per missing field."""
        self.missing_fields = tuple(missing_fields)
        super().__init__(
            {field: (REQUIRED_FIELD_MESSAGE,) for field in self.missing_fields},
            message=message if message is not None else "Required fields are missing",
            code=code,
            original_error=original_error,
            stack_trace=stack_trace,
        )

    def _details(self) -> str:
        return f" - Missing: {', '.join(self.missing_fields)}"

    def _fields(self) -> dict[str, Any]:
        # errors is derived from missing_fields, so it is not passed back in.
        return {
            **AppException._fields(self),
            "missing_fields": list(self.missing_fields),
        }


# --- Data ---


class DataException(AppException):
    """Stored or fetched data is unusable."""

    kind = ErrorKind.DATA
    error_type = ErrorType.DATA


class NotFoundException(DataException):
    """A requested resource does not exist."""

    kind = ErrorKind.NOT_FOUND

    resource_type: str | None
    resource_id: str | None

    def __init__(
        self,
        message: str,
        *,
        resource_type: str | None = None,
        resource_id: str | int | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize with the missing resource's type and id."""
        self.resource_type = resource_type
        self.resource_id = None if resource_id is None else str(resource_id)
        super().__init__(
            message, code=code, original_error=original_error, stack_trace=stack_trace
        )

    def _details(self) -> str:
        rtype = f" (Type: {self.resource_type})" if self.resource_type is not None else ""
        rid = f" (ID: {self.resource_id})" if self.resource_id is not None else ""
        return f"{rtype}{rid}"

    def _fields(self) -> dict[str, Any]:
        return {
            **super()._fields(),
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
        }


class DuplicateResourceException(DataException):
    """A resource with the same identity already exists."""

    kind = ErrorKind.DUPLICATE_RESOURCE

    resource_type: str | None
    duplicate_field: str | None

    def __init__(
        self,
        message: str,
        *,
        resource_type: str | None = None,
        duplicate_field: str | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize with the clashing resource type and field."""
        self.resource_type = resource_type
        self.duplicate_field = duplicate_field
        super().__init__(
            message, code=code, original_error=original_error, stack_trace=stack_trace
        )

    def _fields(self) -> dict[str, Any]:
        return {
            **super()._fields(),
            "resource_type": self.resource_type,
            "duplicate_field": self.duplicate_field,
        }


# --- Cache ---


class CacheException(AppException):
    """A cache operation failed."""

    kind = ErrorKind.CACHE
    error_type = ErrorType.CACHE


class CacheMissException(CacheException):
    """No usable cache entry exists for a key."""

    kind = ErrorKind.CACHE_MISS

    cache_key: str | None

    def __init__(
        self,
        message: str,
        *,
        cache_key: str | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize with the key that missed."""
        self.cache_key = cache_key
        super().__init__(
            message, code=code, original_error=original_error, stack_trace=stack_trace
        )

    def _fields(self) -> dict[str, Any]:
        return {**super()._fields(), "cache_key": self.cache_key}


# --- Business logic ---


class BusinessLogicException(AppException):
    """A business rule forbids the operation."""

    kind = ErrorKind.BUSINESS_LOGIC
    error_type = ErrorType.BUSINESS_LOGIC


class InsufficientPermissionException(BusinessLogicException):
    """The caller lacks a required permission."""

    kind = ErrorKind.INSUFFICIENT_PERMISSION

    required_permission: str | None
    user_role: str | None

    def __init__(
        self,
        message: str,
        *,
        required_permission: str | None = None,
        user_role: str | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize with the missing permission and the caller's role."""
        self.required_permission = required_permission
        self.user_role = user_role
        super().__init__(
            message, code=code, original_error=original_error, stack_trace=stack_trace
        )

    def _fields(self) -> dict[str, Any]:
        return {
            **super()._fields(),
            "required_permission": self.required_permission,
            "user_role": self.user_role,
        }


class ResourceLockedException(BusinessLogicException):
    """The resource is locked by someone else."""

    kind = ErrorKind.RESOURCE_LOCKED

    locked_by: str | None
    lock_expires_at: datetime | None

    def __init__(
        self,
        message: str,
        *,
        locked_by: str | None = None,
        lock_expires_at: datetime | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize with the lock holder and expiry."""
        self.locked_by = locked_by
        self.lock_expires_at = lock_expires_at
        super().__init__(
            message, code=code, original_error=original_error, stack_trace=stack_trace
        )

    def _fields(self) -> dict[str, Any]:
        return {
            **super()._fields(),
            "locked_by": self.locked_by,
            "lock_expires_at": self.lock_expires_at,
        }


# --- Configuration ---


class ConfigurationException(AppException):
    """Configuration is invalid."""

    kind = ErrorKind.CONFIGURATION
    error_type = ErrorType.CONFIGURATION


class MissingConfigurationException(ConfigurationException):
    """A required configuration key is not set."""

    kind = ErrorKind.MISSING_CONFIGURATION

    config_key: str | None

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        code: str | None = None,
        original_error: Any | None = None,
        stack_trace: TracebackType | None = None,
    ) -> None:
        """Initialize with the missing key."""
        self.config_key = config_key
        super().__init__(
            message, code=code, original_error=original_error, stack_trace=stack_trace
        )

    def _fields(self) -> dict[str, Any]:
        return {**super()._fields(), "config_key": self.config_key}
