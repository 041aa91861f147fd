"""Resilience helpers for calls leaving the process.

- Circuit breaker guarding the LLM delegate (CLOSED → OPEN → HALF_OPEN → CLOSED)
- Retry with exponential backoff for network API requests
"""
import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """Raised instead of calling through while the circuit is open."""


class CircuitBreaker:
    """Stop calling a failing dependency for a while.

    ``failure_threshold`` consecutive failures open the circuit; after
    ``open_timeout`` seconds one trial call is let through. A successful trial
    closes the circuit again, a failed one re-opens it.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        open_timeout: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.open_timeout = open_timeout
        self._clock = clock

        self._state = CircuitState.CLOSED
        self.failure_count = 0
        self._opened_at = 0.0

    @property
    def state(self) -> CircuitState:
        if self._state == CircuitState.OPEN and self._clock() - self._opened_at >= self.open_timeout:
            self._state = CircuitState.HALF_OPEN
            logger.info("Circuit %s: OPEN → HALF_OPEN", self.name)
        return self._state

    def record_success(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            logger.info("Circuit %s: HALF_OPEN → CLOSED", self.name)
        self._state = CircuitState.CLOSED
        self.failure_count = 0

    def record_failure(self) -> None:
        self.failure_count += 1
        if self._state == CircuitState.HALF_OPEN or self.failure_count >= self.failure_threshold:
            if self._state != CircuitState.OPEN:
                logger.warning("Circuit %s: %s → OPEN (failures=%d)", self.name, self._state.value, self.failure_count)
            self._state = CircuitState.OPEN
            self._opened_at = self._clock()

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        if self.state == CircuitState.OPEN:
            raise CircuitOpenError(f"Circuit '{self.name}' is OPEN")
        try:
            result = await func(*args, **kwargs)
        except Exception:
            self.record_failure()
            raise
        self.record_success()
        return result

    def reset(self) -> None:
        self._state = CircuitState.CLOSED
        self.failure_count = 0


# ── Retry with Exponential Backoff ──

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


async def retry_with_backoff(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_retries: int = 3,
    backoff_base: float = 1.0,
    backoff_factor: float = 2.0,
    **kwargs: Any,
) -> T:
    """Call ``func``, retrying transport errors and 429/5xx responses.

    Delay before retry n (0-based) is ``backoff_base * backoff_factor ** n``,
    i.e. 1s, 2s, 4s by default. Other errors propagate immediately.
    """
    for attempt in range(max_retries + 1):
        try:
            return await func(*args, **kwargs)
        except (httpx.HTTPStatusError, httpx.TransportError) as exc:
            if not _is_retryable(exc) or attempt >= max_retries:
                if attempt >= max_retries:
                    logger.error("Max retries (%d) exceeded: %s", max_retries, exc)
                raise
            delay = backoff_base * (backoff_factor ** attempt)
            logger.warning("Retry %d/%d after %.1fs: %s", attempt + 1, max_retries, delay, exc)
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")
