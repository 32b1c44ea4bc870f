"""Result Monad for Robust Error Handling.

A ``Result`` is either a :class:`Success` holding a value or a :class:`Failure`
holding an :class:`~storefront.core.exceptions.AppException`. Repositories and
services return Results instead of raising, and callers chain combinators
without branching at every step: a Failure short-circuits the rest of the
chain.

Every combinator that runs caller code catches ``Exception`` and converts it
into a Failure via :func:`failure_from_exception`. The exceptions are
``fold``/``match``, which are transparent, and :meth:`Success.data_or_raise` /
:meth:`Failure.data_or_raise`, the only way back from a Failure to a raise.
``BaseException`` subclasses such as ``asyncio.CancelledError`` always
propagate.

Both variants are frozen dataclasses, so equality is structural and
``match``-statements work::

    match await repository.get_products():
        case Success(products):
            render(products)
        case Failure(error):
            show(error.message)
"""

from __future__ import annotations

import dataclasses
import logging
import typing

from storefront.core.exceptions import AppException, ErrorKind, ValidationException

if typing.TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from storefront.error_handler import ErrorInfo

log = logging.getLogger(__name__)

T = typing.TypeVar("T")
V = typing.TypeVar("V")
X = typing.TypeVar("X", bound=AppException)

FILTER_FAILED_MESSAGE = "Filter condition not met"
NON_NULL_EXPECTED_MESSAGE = "Expected non-null value"


def _matches(error: AppException, error_type: type[AppException] | ErrorKind) -> bool:
    if isinstance(error_type, ErrorKind):
        return error.is_kind(error_type)
    return isinstance(error, error_type)


@dataclasses.dataclass(frozen=True, slots=True)
class Success(typing.Generic[T]):
    """A successful result carrying ``value``."""

    value: T

    @property
    def is_success(self) -> bool:
        """Always True."""
        return True

    @property
    def is_failure(self) -> bool:
        """Always False."""
        return False

    @property
    def data_or_none(self) -> T | None:
        """The value."""
        return self.value

    @property
    def error_or_none(self) -> AppException | None:
        """Always None."""
        return None

    @property
    def error_message_or_none(self) -> str | None:
        """Always None."""
        return None

    @property
    def error_info(self) -> ErrorInfo | None:
        """Always None."""
        return None

    def data_or_raise(self) -> T:
        """Return the value."""
        return self.value

    # --- Transformations ---

    def map(self, fn: Callable[[T], V]) -> Result[V]:
        """Apply ``fn`` to the value; a raise becomes a Failure."""
        try:
            return Success(fn(self.value))
        except Exception as e:
            return failure_from_exception(e)

    async def map_async(self, fn: Callable[[T], Awaitable[V]]) -> Result[V]:
        """Await ``fn(value)``; a raise becomes a Failure."""
        try:
            return Success(await fn(self.value))
        except Exception as e:
            return failure_from_exception(e)

    def flat_map(self, fn: Callable[[T], Result[V]]) -> Result[V]:
        """Return ``fn(value)`` as-is; a raise becomes a Failure."""
        try:
            return fn(self.value)
        except Exception as e:
            return failure_from_exception(e)

    async def flat_map_async(
        self, fn: Callable[[T], Awaitable[Result[V]]]
    ) -> Result[V]:
        """Await and return ``fn(value)``; a raise becomes a Failure."""
        try:
            return await fn(self.value)
        except Exception as e:
            return failure_from_exception(e)

    def and_then(self, fn: Callable[[], Result[V]]) -> Result[V]:
        """Discard the value and evaluate ``fn``."""
        try:
            return fn()
        except Exception as e:
            return failure_from_exception(e)

    async def and_then_async(self, fn: Callable[[], Awaitable[Result[V]]]) -> Result[V]:
        """Discard the value and await ``fn``."""
        try:
            return await fn()
        except Exception as e:
            return failure_from_exception(e)

    # --- Terminal consumers (no exception capture) ---

    def fold(
        self, on_success: Callable[[T], V], on_failure: Callable[[AppException], V]
    ) -> V:
        """Run ``on_success`` with the value."""
        del on_failure
        return on_success(self.value)

    def match(
        self, *, success: Callable[[T], V], failure: Callable[[AppException], V]
    ) -> V:
        """Keyword-only spelling of :meth:`fold`."""
        return self.fold(success, failure)

    def get_or_else(self, default: T) -> T:
        """Return the value; ``default`` is ignored."""
        del default
        return self.value

    def get_or_else_compute(self, supplier: Callable[[], T]) -> T:
        """Return the value; ``supplier`` is never invoked."""
        del supplier
        return self.value

    # --- Guards ---

    def filter(
        self, predicate: Callable[[T], bool], error_message: str | None = None
    ) -> Result[T]:
        """Keep the value only while ``predicate`` holds."""
        try:
            holds = predicate(self.value)
        except Exception as e:
            return failure_from_exception(e)
        if holds:
            return self
        return Failure(
            ValidationException(message=error_message or FILTER_FAILED_MESSAGE)
        )

    def validate(self, validator: Callable[[T], bool], error_message: str) -> Result[T]:
        """Like :meth:`filter` with a caller-supplied message."""
        return self.filter(validator, error_message)

    def where_not_none(self) -> Result[T]:
        """Turn a ``None`` value into a validation Failure."""
        if self.value is None:
            return Failure(ValidationException(message=NON_NULL_EXPECTED_MESSAGE))
        return self

    # --- Side effects ---

    def tap(self, fn: Callable[[T], object]) -> Result[T]:
        """Call ``fn`` for its side effect; its raises never leak."""
        try:
            fn(self.value)
        except Exception as e:
            log.debug("Ignoring error raised by tap side effect: %s", e, exc_info=True)
        return self

    async def tap_async(self, fn: Callable[[T], Awaitable[object]]) -> Result[T]:
        """Await ``fn`` for its side effect; its raises never leak."""
        try:
            await fn(self.value)
        except Exception as e:
            log.debug(
                "Ignoring error raised by tap_async side effect: %s", e, exc_info=True
            )
        return self

    # --- Recovery ---

    def catch_error(self, handler: Callable[[AppException], Result[T]]) -> Result[T]:
        """Nothing to recover; return self."""
        del handler
        return self

    async def catch_error_async(
        self, handler: Callable[[AppException], Awaitable[Result[T]]]
    ) -> Result[T]:
        """Nothing to recover; return self."""
        del handler
        return self

    def catch_error_of_type(
        self,
        error_type: type[X] | ErrorKind,
        handler: Callable[[X], Result[T]],
    ) -> Result[T]:
        """Nothing to recover; return self."""
        del error_type, handler
        return self

    # --- Queries ---

    def contains(self, predicate: Callable[[T], bool]) -> bool:
        """Return True if ``predicate`` holds for the value."""
        return bool(predicate(self.value))

    def contains_error(self, error_type: type[AppException] | ErrorKind) -> bool:
        """Always False."""
        del error_type
        return False

    def get_error_of_type(
        self, error_type: type[X] | ErrorKind
    ) -> X | None:
        """Always None."""
        del error_type
        return None

    def __str__(self) -> str:
        return f"Result.success({self.value!r})"


@dataclasses.dataclass(frozen=True, slots=True)
class Failure(typing.Generic[T]):
    """A failed result carrying an :class:`AppException`.

    ``T`` is the success type the Failure stands in for; it only matters to
    type checkers.
    """

    error: AppException

    def __post_init__(self) -> None:
        """Reject errors outside the taxonomy."""
        if not isinstance(self.error, AppException):
            raise TypeError(
                "Failure expects an AppException; "
                "use failure_from_exception() to wrap other errors."
            )

    @property
    def is_success(self) -> bool:
        """Always False."""
        return False

    @property
    def is_failure(self) -> bool:
        """Always True."""
        return True

    @property
    def data_or_none(self) -> T | None:
        """Always None."""
        return None

    @property
    def error_or_none(self) -> AppException | None:
        """The wrapped error."""
        return self.error

    @property
    def error_message_or_none(self) -> str | None:
        """The wrapped error's message."""
        return self.error.message

    @property
    def error_info(self) -> ErrorInfo | None:
        """User-facing description of the error; reading it does not log."""
        from storefront.error_handler import get_error_handler

        return get_error_handler().describe(self.error)

    def data_or_raise(self) -> T:
        """Raise the wrapped error."""
        raise self.error

    # --- Transformations (short-circuit) ---

    def map(self, fn: Callable[[T], V]) -> Result[V]:
        """Propagate the failure unchanged."""
        del fn
        return typing.cast("Failure[V]", self)

    async def map_async(self, fn: Callable[[T], Awaitable[V]]) -> Result[V]:
        """Propagate the failure unchanged."""
        del fn
        return typing.cast("Failure[V]", self)

    def flat_map(self, fn: Callable[[T], Result[V]]) -> Result[V]:
        """Propagate the failure unchanged."""
        del fn
        return typing.cast("Failure[V]", self)

    async def flat_map_async(
        self, fn: Callable[[T], Awaitable[Result[V]]]
    ) -> Result[V]:
        """Propagate the failure unchanged."""
        del fn
        return typing.cast("Failure[V]", self)

    def and_then(self, fn: Callable[[], Result[V]]) -> Result[V]:
        """Propagate the failure unchanged."""
        del fn
        return typing.cast("Failure[V]", self)

    async def and_then_async(self, fn: Callable[[], Awaitable[Result[V]]]) -> Result[V]:
        """Propagate the failure unchanged."""
        del fn
        return typing.cast("Failure[V]", self)

    # --- Terminal consumers (no exception capture) ---

    def fold(
        self, on_success: Callable[[T], V], on_failure: Callable[[AppException], V]
    ) -> V:
        """Run ``on_failure`` with the error."""
        del on_success
        return on_failure(self.error)

    def match(
        self, *, success: Callable[[T], V], failure: Callable[[AppException], V]
    ) -> V:
        """Keyword-only spelling of :meth:`fold`."""
        return self.fold(success, failure)

    def get_or_else(self, default: T) -> T:
        """Return ``default``."""
        return default

    def get_or_else_compute(self, supplier: Callable[[], T]) -> T:
        """Return ``supplier()``."""
        return supplier()

    # --- Guards ---

    def filter(
        self, predicate: Callable[[T], bool], error_message: str | None = None
    ) -> Result[T]:
        """Nothing to check; return self."""
        del predicate, error_message
        return self

    def validate(self, validator: Callable[[T], bool], error_message: str) -> Result[T]:
        """Nothing to check; return self."""
        del validator, error_message
        return self

    def where_not_none(self) -> Result[T]:
        """Nothing to check; return self."""
        return self

    # --- Side effects ---

    def tap(self, fn: Callable[[T], object]) -> Result[T]:
        """No value to observe; return self."""
        del fn
        return self

    async def tap_async(self, fn: Callable[[T], Awaitable[object]]) -> Result[T]:
        """No value to observe; return self."""
        del fn
        return self

    # --- Recovery ---

    def catch_error(self, handler: Callable[[AppException], Result[T]]) -> Result[T]:
        """Let ``handler`` recover or re-wrap the error."""
        try:
            return handler(self.error)
        except Exception as e:
            return failure_from_exception(e)

    async def catch_error_async(
        self, handler: Callable[[AppException], Awaitable[Result[T]]]
    ) -> Result[T]:
        """Await ``handler`` to recover or re-wrap the error."""
        try:
            return await handler(self.error)
        except Exception as e:
            return failure_from_exception(e)

    def catch_error_of_type(
        self,
        error_type: type[X] | ErrorKind,
        handler: Callable[[X], Result[T]],
    ) -> Result[T]:
        """Run ``handler`` only when the error matches ``error_type``."""
        if not _matches(self.error, error_type):
            return self
        return self.catch_error(typing.cast("Callable[[AppException], Result[T]]", handler))

    # --- Queries ---

    def contains(self, predicate: Callable[[T], bool]) -> bool:
        """Always False."""
        del predicate
        return False

    def contains_error(self, error_type: type[AppException] | ErrorKind) -> bool:
        """Return True if the error is an instance (or kind) of ``error_type``."""
        return _matches(self.error, error_type)

    def get_error_of_type(
        self, error_type: type[X] | ErrorKind
    ) -> X | None:
        """Return the error narrowed to ``error_type``, or None."""
        if _matches(self.error, error_type):
            return typing.cast("X", self.error)
        return None

    def __str__(self) -> str:
        return f"Result.failure({self.error})"


Result = Success[T] | Failure[T]


def success(value: T) -> Success[T]:
    """Create a successful result."""
    return Success(value)


def failure(error: AppException) -> Failure[typing.Any]:
    """Create a failed result."""
    return Failure(error)


def failure_from_exception(
    cause: BaseException, message: str | None = None
) -> Failure[typing.Any]:
    """Wrap any exception in a Failure.

    Taxonomy errors are kept as they are. Anything else becomes a generic
    :class:`AppException` whose ``original_error`` is ``cause``.
    """
    if isinstance(cause, AppException):
        return Failure(cause)
    return Failure(
        AppException(
            message or str(cause) or type(cause).__name__,
            original_error=cause,
            stack_trace=cause.__traceback__,
        )
    )
