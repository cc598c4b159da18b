"""Circuit breaker with a rolling failure-rate window."""

from __future__ import annotations

import asyncio
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum, auto
from typing import Any

import structlog

from pymint.kernel.exceptions import (
    CircuitOpenException,
    NotAuthorizedException,
    OperationTimeoutException,
)

logger = structlog.get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = auto()
    OPEN = auto()
    HALF_OPEN = auto()


@dataclass(frozen=True)
class CircuitStats:
    """Point-in-time view of the breaker's window."""

    state: CircuitState
    successes: int
    failures: int

    @property
    def total(self) -> int:
        return self.successes + self.failures

    @property
    def failure_rate(self) -> float:
        """Failure percentage in the window, 0-100."""
        if self.total == 0:
            return 0.0
        return self.failures * 100.0 / self.total


class CircuitBreaker:
    """Circuit breaker that stops calling a degraded backend.

    Results of the calls made while closed are kept for ``window``. Once at
    least ``minimum_calls`` results are in the window and the failure
    percentage reaches ``failure_threshold``, the circuit opens and every
    call fails fast with CircuitOpenException for ``circuit_duration``. After
    that a single probe call is let through (half-open): success closes the
    circuit with a fresh window, failure opens it again for another full
    ``circuit_duration``.

    NotAuthorizedException reflects the caller's credentials, not backend
    health, so it is not recorded unless ``count_authorization_failures``
    is set.

    Args:
        failure_threshold: Failure percentage (0-100] that trips the circuit.
        window: Rolling horizon over which the failure rate is computed.
        minimum_calls: Results needed in the window before it may trip.
        circuit_duration: How long the circuit stays open before a probe.
        call_timeout: Ceiling on each wrapped call; exceeding it is a failure.
        count_authorization_failures: Record NotAuthorizedException as a failure.
        clock: Monotonic clock, replaceable in tests.
    """

    def __init__(
        self,
        failure_threshold: float = 80.0,
        window: timedelta = timedelta(seconds=60),
        minimum_calls: int = 10,
        circuit_duration: timedelta = timedelta(hours=3),
        call_timeout: timedelta | None = timedelta(seconds=64),
        count_authorization_failures: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not 0 < failure_threshold <= 100:
            raise ValueError("failure_threshold must be a percentage in (0, 100]")
        self._failure_threshold = failure_threshold
        self._window = window.total_seconds()
        self._minimum_calls = max(1, minimum_calls)
        self._circuit_duration = circuit_duration.total_seconds()
        self._call_timeout = call_timeout.total_seconds() if call_timeout is not None else None
        self._count_authorization_failures = count_authorization_failures
        self._clock = clock

        self._results: deque[tuple[float, bool]] = deque()
        self._state = CircuitState.CLOSED
        self._opened_at: float | None = None
        self._probe_in_flight = False
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        """Current circuit state, accounting for the cooldown."""
        if self._state == CircuitState.OPEN and self._cooldown_elapsed():
            return CircuitState.HALF_OPEN
        return self._state

    @property
    def stats(self) -> CircuitStats:
        self._prune(self._clock())
        successes, failures = self._window_counts()
        return CircuitStats(state=self.state, successes=successes, failures=failures)

    async def call(self, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        """Execute a function through the circuit breaker."""
        is_probe = await self._acquire_permission()

        try:
            if self._call_timeout is None:
                result = await func(*args, **kwargs)
            else:
                result = await asyncio.wait_for(func(*args, **kwargs), timeout=self._call_timeout)
        except TimeoutError as exc:
            await self._on_failure(is_probe)
            raise OperationTimeoutException(f"call exceeded timeout of {self._call_timeout}s") from exc
        except NotAuthorizedException:
            if self._count_authorization_failures:
                await self._on_failure(is_probe)
            else:
                await self._release_probe(is_probe)
            raise
        except asyncio.CancelledError:
            await self._release_probe(is_probe)
            raise
        except Exception:
            await self._on_failure(is_probe)
            raise

        await self._on_success(is_probe)
        return result

    async def reset(self) -> None:
        """Force the circuit closed and forget the recorded results."""
        async with self._lock:
            self._close()

    async def _acquire_permission(self) -> bool:
        """Admit a call or raise CircuitOpenException. Returns True for a probe call."""
        async with self._lock:
            if self._state == CircuitState.CLOSED:
                return False
            if self._state == CircuitState.OPEN and self._cooldown_elapsed():
                self._state = CircuitState.HALF_OPEN
                logger.info("circuit.half_open")
            if self._state == CircuitState.HALF_OPEN and not self._probe_in_flight:
                self._probe_in_flight = True
                return True
            raise CircuitOpenException("Circuit breaker is open", context={"state": self._state.name})

    async def _on_success(self, is_probe: bool) -> None:
        async with self._lock:
            if is_probe:
                self._close()
                logger.info("circuit.closed")
            elif self._state == CircuitState.CLOSED:
                self._record(failed=False)

    async def _on_failure(self, is_probe: bool) -> None:
        async with self._lock:
            if is_probe:
                self._open()
                return
            if self._state != CircuitState.CLOSED:
                return
            self._record(failed=True)
            successes, failures = self._window_counts()
            total = successes + failures
            if total >= self._minimum_calls and failures * 100.0 / total >= self._failure_threshold:
                self._open()

    async def _release_probe(self, is_probe: bool) -> None:
        if not is_probe:
            return
        async with self._lock:
            self._probe_in_flight = False

    def _record(self, failed: bool) -> None:
        now = self._clock()
        self._results.append((now, failed))
        self._prune(now)

    def _prune(self, now: float) -> None:
        horizon = now - self._window
        while self._results and self._results[0][0] <= horizon:
            self._results.popleft()

    def _window_counts(self) -> tuple[int, int]:
        failures = sum(1 for _, failed in self._results if failed)
        return len(self._results) - failures, failures

    def _cooldown_elapsed(self) -> bool:
        return self._opened_at is not None and self._clock() - self._opened_at >= self._circuit_duration

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()
        self._probe_in_flight = False
        logger.warning("circuit.opened", cooldown=self._circuit_duration)

    def _close(self) -> None:
        self._state = CircuitState.CLOSED
        self._opened_at = None
        self._probe_in_flight = False
        self._results.clear()
