"""Minimal async retry over Results.

Design goals:
- Explicit state (policy + attempt counters)
- Retry decisions come from the error taxonomy, never from message text
- Failures stay values: the last Result is returned, nothing is raised
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import random
import time
from typing import TYPE_CHECKING, TypeVar

from storefront._http import RETRYABLE_STATUS_CODES
from storefront.core.exceptions import (
    AppException,
    ConnectionException,
    NetworkException,
    TimeoutException,
)
from storefront.core.result_primitives import Failure

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from storefront.core.result_primitives import Result

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with exponential backoff and optional jitter."""

    max_attempts: int = 3
    initial_delay_s: float = 1.0
    backoff_multiplier: float = 2.0
    max_delay_s: float = 8.0
    jitter: bool = True  # "full jitter" when enabled
    max_elapsed_s: float | None = 30.0

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay_s < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("RetryPolicy.backoff_multiplier must be > 0")
        if self.max_delay_s < 0:
            raise ValueError("RetryPolicy.max_delay_s must be >= 0")
        if self.max_elapsed_s is not None and self.max_elapsed_s < 0:
            raise ValueError("RetryPolicy.max_elapsed_s must be >= 0 or None")


NO_RETRY = RetryPolicy(max_attempts=1)


def should_retry(error: AppException) -> bool:
    """Return True when a failed request is worth repeating.

    Contract:
    - Timeouts and connection failures are transient.
    - Other network errors are retried only for a known retryable status.
    - Everything outside the network layer is final.
    """
    if isinstance(error, (TimeoutException, ConnectionException)):
        return True
    if isinstance(error, NetworkException):
        return (
            isinstance(error.status_code, int)
            and error.status_code in RETRYABLE_STATUS_CODES
        )
    return False


def _compute_backoff_delay(policy: RetryPolicy, *, retry_index: int) -> float:
    # retry_index starts at 1 for the first retry sleep.
    base = policy.initial_delay_s * (
        policy.backoff_multiplier ** max(0, retry_index - 1)
    )
    base = min(policy.max_delay_s, base)
    if base <= 0:
        return 0.0
    if not policy.jitter:
        return base
    # Full jitter: random in [0, base].
    return random.random() * base  # noqa: S311


async def retry_result(
    factory: Callable[[], Awaitable[Result[T]]],
    *,
    policy: RetryPolicy,
    retry_if: Callable[[AppException], bool] = should_retry,
) -> Result[T]:
    """Run an async Result factory, repeating retryable Failures.

    Returns the first Success, the first non-retryable Failure, or the last
    Failure once attempts or elapsed time run out.
    """
    start = time.monotonic()
    attempt = 1
    while True:
        result = await factory()
        if not isinstance(result, Failure):
            return result
        if attempt >= policy.max_attempts or not retry_if(result.error):
            return result

        delay = _compute_backoff_delay(policy, retry_index=attempt)
        if policy.max_elapsed_s is not None:
            remaining = policy.max_elapsed_s - (time.monotonic() - start)
            if remaining <= 0:
                return result
            delay = min(delay, remaining)

        log.debug(
            "Retrying after %s (attempt %d/%d, delay %.2fs)",
            result.error,
            attempt,
            policy.max_attempts,
            delay,
        )
        if delay > 0:
            await asyncio.sleep(delay)
        attempt += 1
