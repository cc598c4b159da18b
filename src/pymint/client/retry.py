"""Fixed-interval retry bounded by an attempt count and an overall timeout."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any

import structlog

from pymint.kernel.exceptions import NotAuthorizedException, OperationTimeoutException

logger = structlog.get_logger(__name__)


def is_retryable(exc: BaseException) -> bool:
    """Default predicate: everything except rejected credentials."""
    return not isinstance(exc, NotAuthorizedException)


class RetryPolicy:
    """Retry policy with a fixed delay between attempts.

    Whichever bound is reached first ends the retrying: ``max_attempts`` or
    ``timeout`` measured from the start of the first attempt. The exception
    from the last attempt is re-raised unchanged, so callers see what
    actually went wrong rather than a generic "gave up" error.

    Args:
        max_attempts: Maximum number of attempts (including the first).
        interval: Delay between attempts. Does not grow.
        timeout: Ceiling on the total time spent, delays included.
        retry_if: Predicate deciding whether an exception is worth another attempt.
        clock: Monotonic clock, replaceable in tests.
    """

    def __init__(
        self,
        max_attempts: int = 2,
        interval: timedelta = timedelta(seconds=3),
        timeout: timedelta = timedelta(seconds=24),
        retry_if: Callable[[BaseException], bool] = is_retryable,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._interval = interval.total_seconds()
        self._timeout = timeout.total_seconds()
        self._retry_if = retry_if
        self._clock = clock

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def execute(self, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        """Execute a function with retry logic."""
        deadline = self._clock() + self._timeout
        last_exception: Exception | None = None

        for attempt in range(1, self._max_attempts + 1):
            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            try:
                return await asyncio.wait_for(func(*args, **kwargs), timeout=remaining)
            except TimeoutError:
                logger.warning("retry.timeout", attempt=attempt, timeout=self._timeout)
                break
            except Exception as exc:
                last_exception = exc
                if not self._retry_if(exc):
                    raise
                if attempt == self._max_attempts:
                    break
                if deadline - self._clock() <= self._interval:
                    logger.warning("retry.deadline_reached", attempt=attempt, error=str(exc))
                    break
                logger.warning(
                    "retry.scheduled",
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    delay=self._interval,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                await asyncio.sleep(self._interval)

        if last_exception is not None:
            raise last_exception
        raise OperationTimeoutException(f"no attempt completed within {self._timeout}s")
