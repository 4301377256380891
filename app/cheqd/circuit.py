"""Circuit breaker for outbound cheqd Studio calls."""

import asyncio
import logging
import time
from typing import Optional

from app.config import CHEQD_CIRCUIT_FAILURE_THRESHOLD, CHEQD_CIRCUIT_RESET_SECONDS
from app.core.exceptions import CircuitOpenError

log = logging.getLogger(__name__)

CLOSED = "closed"
OPEN = "open"
HALF_OPEN = "half_open"


class CircuitBreaker:
    """Consecutive-failure circuit breaker.

    After ``failure_threshold`` consecutive upstream failures the circuit
    opens and calls fail immediately. Once ``reset_seconds`` have passed a
    single trial call is let through; success closes the circuit, failure
    re-opens it for another cool-down.
    """

    def __init__(
        self,
        failure_threshold: int = CHEQD_CIRCUIT_FAILURE_THRESHOLD,
        reset_seconds: float = CHEQD_CIRCUIT_RESET_SECONDS,
    ) -> None:
        """Initialize the breaker.

        Args:
            failure_threshold: Consecutive failures before opening
            reset_seconds: Cool-down before a trial call is allowed
        """
        self._failure_threshold = max(1, failure_threshold)
        self._reset_seconds = reset_seconds
        self._failures = 0
        self._opened_at = 0.0
        self._state = CLOSED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> str:
        return self._state

    async def before_call(self) -> None:
        """Raise CircuitOpenError if calls are currently blocked."""
        async with self._lock:
            if self._state == CLOSED:
                return
            if self._state == HALF_OPEN:
                # A trial call is already in flight
                raise CircuitOpenError("cheqd Studio API unavailable (circuit open)")
            if time.monotonic() - self._opened_at >= self._reset_seconds:
                self._state = HALF_OPEN
                log.info("Circuit half-open: allowing trial call to cheqd Studio")
                return
            raise CircuitOpenError("cheqd Studio API unavailable (circuit open)")

    def abandon_trial(self) -> None:
        """Return a half-open breaker to open when its trial call never finished.

        Keeps the original open time, so the next caller may start a new trial
        once the cool-down has elapsed.
        """
        if self._state == HALF_OPEN:
            self._state = OPEN
            log.info("Circuit re-opened: trial call to cheqd Studio did not complete")

    async def record_success(self) -> None:
        async with self._lock:
            if self._state != CLOSED:
                log.info("Circuit closed: cheqd Studio call succeeded")
            self._failures = 0
            self._state = CLOSED

    async def record_failure(self) -> None:
        async with self._lock:
            self._failures += 1
            if self._state == HALF_OPEN or self._failures >= self._failure_threshold:
                self._state = OPEN
                self._opened_at = time.monotonic()
                log.warning(
                    f"Circuit opened after {self._failures} consecutive failures, "
                    f"cooling down for {self._reset_seconds}s"
                )


# Module-level singleton
_circuit_breaker: Optional[CircuitBreaker] = None


def get_circuit_breaker() -> CircuitBreaker:
    """Get or create the process-wide breaker for cheqd Studio."""
    global _circuit_breaker
    if _circuit_breaker is None:
        _circuit_breaker = CircuitBreaker()
    return _circuit_breaker


def reset_circuit_breaker() -> None:
    """Reset the singleton (for testing)."""
    global _circuit_breaker
    _circuit_breaker = None
