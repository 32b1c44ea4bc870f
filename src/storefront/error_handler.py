"""Error handler: turn any fault into user-facing error information.

The handler accepts taxonomy errors as well as raw faults (``httpx`` errors,
JSON decode errors, pydantic validation errors, timeouts) and returns an
:class:`ErrorInfo` with a title, a user message, suggestions, and a
recoverability flag. Each handled error is logged; callers decide how to
present it via :meth:`ErrorHandler.get_handling_strategy`.

Example:
    info = get_error_handler().handle_error(exc, context={"screen": "catalog"})
    print(info.user_message)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import cache
import json
import logging
from typing import Any

import httpx
import pydantic

from storefront.core.exceptions import (
    AppException,
    AuthenticationException,
    BusinessLogicException,
    ConnectionException,
    DataException,
    DuplicateResourceException,
    ErrorKind,
    ErrorType,
    InsufficientPermissionException,
    InvalidCredentialsException,
    NetworkException,
    NotFoundException,
    ResourceLockedException,
    ServerException,
    SessionInvalidException,
    TimeoutException,
    TokenExpiredException,
    ValidationException,
)

log = logging.getLogger(__name__)

_RETRY_SUGGESTIONS = (
    "Check your internet connection",
    "Try again in a moment",
    "Contact support if the problem persists",
)


@dataclass(frozen=True)
class ErrorInfo:
    """Error information for display and logging."""

    title: str
    message: str
    user_message: str
    type: ErrorType
    kind: ErrorKind | None = None
    code: str | None = None
    suggestions: tuple[str, ...] = ()
    is_recoverable: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return (
            f"ErrorInfo(title={self.title}, type={self.type.value}, "
            f"message={self.user_message})"
        )


class ErrorHandlingStrategy(Enum):
    """How a consumer should surface an error."""

    SHOW_USER_MESSAGE = "show_user_message"
    SHOW_RETRY_DIALOG = "show_retry_dialog"
    SHOW_LOGIN_FORM = "show_login_form"
    LOG_ONLY = "log_only"
    REPORT_TO_ANALYTICS = "report_to_analytics"
    REDIRECT_TO_SETTINGS = "redirect_to_settings"


class ErrorHandler:
    """Classifies errors and logs them."""

    def handle_error(
        self, exc: BaseException, *, context: dict[str, Any] | None = None
    ) -> ErrorInfo:
        """Build error information for ``exc`` and log it."""
        info = self.describe(exc, context=context)
        log.warning(
            "%s [%s/%s]: %s",
            info.title,
            info.type.value,
            info.code,
            info.message,
        )
        log.debug("Handled error detail: %r metadata=%s", exc, info.metadata, exc_info=exc)
        return info

    def describe(
        self, exc: BaseException, *, context: dict[str, Any] | None = None
    ) -> ErrorInfo:
        """Build error information for ``exc`` without logging it."""
        return self._create_error_info(exc, dict(context or {}))

    def get_handling_strategy(self, info: ErrorInfo) -> ErrorHandlingStrategy:
        """Pick the presentation strategy for an error."""
        match info.type:
            case ErrorType.NETWORK:
                return ErrorHandlingStrategy.SHOW_RETRY_DIALOG
            case ErrorType.AUTHENTICATION:
                if info.kind is ErrorKind.TOKEN_EXPIRED:
                    return ErrorHandlingStrategy.SHOW_LOGIN_FORM
                return ErrorHandlingStrategy.SHOW_USER_MESSAGE
            case ErrorType.DATA:
                if info.kind is ErrorKind.NOT_FOUND:
                    return ErrorHandlingStrategy.SHOW_USER_MESSAGE
                return ErrorHandlingStrategy.SHOW_RETRY_DIALOG
            case ErrorType.CACHE:
                return ErrorHandlingStrategy.LOG_ONLY
            case ErrorType.CONFIGURATION:
                return ErrorHandlingStrategy.REDIRECT_TO_SETTINGS
            case _:
                return ErrorHandlingStrategy.SHOW_USER_MESSAGE

    # --- Classification ---

    def _create_error_info(
        self, exc: BaseException, context: dict[str, Any]
    ) -> ErrorInfo:
        if isinstance(exc, AppException):
            return self._create_app_exception_info(exc, context)

        if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
            return ErrorInfo(
                title="Timeout Error",
                message=str(exc) or "Request timed out",
                user_message="The request took too long to complete. Please try again.",
                type=ErrorType.NETWORK,
                code="TIMEOUT_ERROR",
                suggestions=(
                    "Check your internet connection speed",
                    "Try again later",
                    "Contact support if the problem persists",
                ),
                metadata=context,
            )

        if isinstance(exc, httpx.HTTPStatusError):
            return ErrorInfo(
                title="HTTP Error",
                message=str(exc),
                user_message="Server returned an error. Please try again later.",
                type=ErrorType.NETWORK,
                code="HTTP_ERROR",
                metadata={"status_code": exc.response.status_code, **context},
            )

        if isinstance(exc, (httpx.TransportError, ConnectionError)):
            return ErrorInfo(
                title="Connection Error",
                message=str(exc),
                user_message=(
                    "Unable to connect to the server. "
                    "Please check your internet connection."
                ),
                type=ErrorType.NETWORK,
                code="SOCKET_ERROR",
                suggestions=_RETRY_SUGGESTIONS,
                metadata=context,
            )

        if isinstance(exc, (json.JSONDecodeError, pydantic.ValidationError)):
            return ErrorInfo(
                title="Data Format Error",
                message=str(exc),
                user_message="The server returned invalid data. Please try again.",
                type=ErrorType.DATA,
                code="FORMAT_ERROR",
                metadata=context,
            )

        return ErrorInfo(
            title="Unexpected Error",
            message=str(exc) or type(exc).__name__,
            user_message=(
                "An unexpected error occurred. Please try again or contact support."
            ),
            type=ErrorType.UNKNOWN,
            code="UNKNOWN_ERROR",
            suggestions=(
                "Try again",
                "Restart the app",
                "Contact support if the problem persists",
            ),
            metadata=context,
        )

    def _create_app_exception_info(
        self, exc: AppException, context: dict[str, Any]
    ) -> ErrorInfo:
        common: dict[str, Any] = {"message": exc.message, "kind": exc.kind}

        if isinstance(exc, NetworkException):
            return ErrorInfo(
                title="Network Error",
                user_message=_network_user_message(exc),
                type=ErrorType.NETWORK,
                code=exc.code or "NETWORK_ERROR",
                suggestions=_network_suggestions(exc),
                metadata={"status_code": exc.status_code, "url": exc.url, **context},
                **common,
            )

        if isinstance(exc, AuthenticationException):
            return ErrorInfo(
                title="Authentication Error",
                user_message=_authentication_user_message(exc),
                type=ErrorType.AUTHENTICATION,
                code=exc.code or "AUTH_ERROR",
                is_recoverable=isinstance(exc, TokenExpiredException),
                suggestions=_authentication_suggestions(exc),
                metadata=context,
                **common,
            )

        if isinstance(exc, ValidationException):
            return ErrorInfo(
                title="Validation Error",
                user_message="Please check your input and try again.",
                type=ErrorType.VALIDATION,
                code=exc.code or "VALIDATION_ERROR",
                suggestions=("Check all required fields", "Ensure correct format"),
                metadata={"errors": dict(exc.errors), **context},
                **common,
            )

        if isinstance(exc, DataException):
            return ErrorInfo(
                title="Data Error",
                user_message=_data_user_message(exc),
                type=ErrorType.DATA,
                code=exc.code or "DATA_ERROR",
                suggestions=_data_suggestions(exc),
                metadata=context,
                **common,
            )

        if exc.error_type is ErrorType.CACHE:
            return ErrorInfo(
                title="Cache Error",
                user_message="Data cache error. The app will refresh automatically.",
                type=ErrorType.CACHE,
                code=exc.code or "CACHE_ERROR",
                metadata=context,
                **common,
            )

        if isinstance(exc, BusinessLogicException):
            return ErrorInfo(
                title="Operation Not Allowed",
                user_message=exc.message,
                type=ErrorType.BUSINESS_LOGIC,
                code=exc.code or "BUSINESS_LOGIC_ERROR",
                suggestions=_business_logic_suggestions(exc),
                metadata=context,
                **common,
            )

        if exc.error_type is ErrorType.CONFIGURATION:
            return ErrorInfo(
                title="Configuration Error",
                user_message="App configuration error. Please contact support.",
                type=ErrorType.CONFIGURATION,
                code=exc.code or "CONFIG_ERROR",
                is_recoverable=False,
                suggestions=("Restart the app", "Update the app", "Contact support"),
                metadata=context,
                **common,
            )

        return ErrorInfo(
            title="Application Error",
            user_message="An application error occurred. Please try again.",
            type=ErrorType.UNKNOWN,
            code=exc.code or "APP_ERROR",
            metadata=context,
            **common,
        )


def _network_user_message(exc: NetworkException) -> str:
    if isinstance(exc, ServerException):
        if exc.status_code >= 500:
            return "Server is temporarily unavailable. Please try again later."
        if exc.status_code == 404:
            return "The requested resource was not found."
        if exc.status_code == 403:
            return "You don't have permission to access this resource."
    if isinstance(exc, ConnectionException):
        return "Unable to connect to the server. Please check your internet connection."
    if isinstance(exc, TimeoutException):
        return "The request took too long to complete. Please try again."
    return "A network error occurred. Please try again."


def _network_suggestions(exc: NetworkException) -> tuple[str, ...]:
    if isinstance(exc, ServerException) and exc.status_code >= 500:
        return ("Try again later", "Contact support if the problem persists")
    return _RETRY_SUGGESTIONS


def _authentication_user_message(exc: AuthenticationException) -> str:
    if isinstance(exc, InvalidCredentialsException):
        return "Invalid username or password. Please try again."
    if isinstance(exc, TokenExpiredException):
        return "Your session has expired. Please log in again."
    if isinstance(exc, SessionInvalidException):
        return "Your session is invalid. Please log in again."
    return "Authentication failed. Please log in again."


def _authentication_suggestions(exc: AuthenticationException) -> tuple[str, ...]:
    if isinstance(exc, InvalidCredentialsException):
        return ("Check your username and password", "Reset your password if needed")
    if isinstance(exc, TokenExpiredException):
        return ("Please log in again to continue",)
    return ("Please log in again", "Contact support if the problem persists")


def _data_user_message(exc: DataException) -> str:
    if isinstance(exc, NotFoundException):
        return f"The requested {exc.resource_type or 'item'} was not found."
    if isinstance(exc, DuplicateResourceException):
        return f"This {exc.resource_type or 'item'} already exists."
    return "A data error occurred. Please try again."


def _data_suggestions(exc: DataException) -> tuple[str, ...]:
    if isinstance(exc, NotFoundException):
        return ("Check if the item exists", "Refresh the page", "Contact support")
    if isinstance(exc, DuplicateResourceException):
        return ("Use a different value", "Check existing items")
    return ("Try again", "Refresh the page", "Contact support if needed")


def _business_logic_suggestions(exc: BusinessLogicException) -> tuple[str, ...]:
    if isinstance(exc, InsufficientPermissionException):
        return ("Contact an administrator", "Check your permissions")
    if isinstance(exc, ResourceLockedException):
        return ("Try again later", "Contact the person who locked the resource")
    return ("Check your input", "Contact support if needed")


@cache
def get_error_handler() -> ErrorHandler:
    """Return the process-wide error handler."""
    return ErrorHandler()


def reset_error_handler() -> None:
    """Forget the process-wide handler (for tests)."""
    get_error_handler.cache_clear()
