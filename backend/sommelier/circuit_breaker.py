"""Circuit breaker isolating the advisory flow from a failing text generator."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreakerStats:
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    rejected_calls: int = 0
    consecutive_failures: int = 0
    circuit_opened_count: int = 0


class CircuitOpenError(Exception):
    """The generator is being skipped until its cooldown expires."""


class CircuitBreaker:
    """
    Stops calling the generator after ``failure_threshold`` consecutive failures.

    While open every call is rejected with :class:`CircuitOpenError`. Once
    ``cooldown_seconds`` have passed the breaker lets trial calls through
    (half-open); ``success_threshold`` successes close it again and a single
    failure reopens it for another cooldown.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 3,
        cooldown_seconds: float = 300.0,
        success_threshold: int = 1,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.cooldown_seconds = cooldown_seconds
        self.success_threshold = success_threshold
        self.enabled = enabled
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._stats = CircuitBreakerStats()
        self._lock = Lock()
        self._opened_at = clock()
        self._trial_successes = 0

    @property
    def state(self) -> CircuitState:
        with self._lock:
            cooled_down = self._clock() - self._opened_at >= self.cooldown_seconds
            if self._state == CircuitState.OPEN and cooled_down:
                self._state = CircuitState.HALF_OPEN
                self._trial_successes = 0
                logger.info("Circuit '%s' half-open; allowing a trial generator call", self.name)
            return self._state

    @property
    def stats(self) -> CircuitBreakerStats:
        return self._stats

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()
        self._stats.circuit_opened_count += 1
        logger.warning(
            "Circuit '%s' open after %d consecutive failures; skipping for %ss",
            self.name,
            self._stats.consecutive_failures,
            self.cooldown_seconds,
        )

    def _close(self) -> None:
        recovered = self._state == CircuitState.HALF_OPEN
        self._state = CircuitState.CLOSED
        self._stats.consecutive_failures = 0
        self._trial_successes = 0
        if recovered:
            logger.info("Circuit '%s' closed; generator recovered", self.name)

    def _admit(self) -> None:
        if self.state != CircuitState.OPEN:
            return
        with self._lock:
            self._stats.rejected_calls += 1
        raise CircuitOpenError(
            f"Circuit breaker '{self.name}' is open; retry after {self.cooldown_seconds}s"
        )

    def call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``func`` unless the circuit is open; its exceptions are re-raised."""
        if not self.enabled:
            return func(*args, **kwargs)
        self._admit()
        try:
            result = func(*args, **kwargs)
        except Exception:
            self._record(success=False)
            raise
        self._record(success=True)
        return result

    async def call_async(
        self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Awaitable counterpart of :meth:`call`; cancellation counts as a failure."""
        if not self.enabled:
            return await func(*args, **kwargs)
        self._admit()
        try:
            result = await func(*args, **kwargs)
        except BaseException:
            self._record(success=False)
            raise
        self._record(success=True)
        return result

    def _record(self, *, success: bool) -> None:
        with self._lock:
            self._stats.total_calls += 1
            if success:
                self._stats.successful_calls += 1
                self._stats.consecutive_failures = 0
                if self._state == CircuitState.HALF_OPEN:
                    self._trial_successes += 1
                    if self._trial_successes >= self.success_threshold:
                        self._close()
                return

            self._stats.failed_calls += 1
            self._stats.consecutive_failures += 1
            if self._state == CircuitState.HALF_OPEN or (
                self._state == CircuitState.CLOSED
                and self._stats.consecutive_failures >= self.failure_threshold
            ):
                self._open()

    def reset(self) -> None:
        with self._lock:
            self._close()
            logger.info("Circuit '%s' reset", self.name)

    def is_open(self) -> bool:
        return self.state == CircuitState.OPEN

    def is_closed(self) -> bool:
        return self.state == CircuitState.CLOSED


__all__ = [
    "CircuitBreaker",
    "CircuitBreakerStats",
    "CircuitOpenError",
    "CircuitState",
]
