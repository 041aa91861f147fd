"""Tests for the circuit breaker and retry-with-backoff helpers."""
from unittest.mock import AsyncMock

import httpx
import pytest

from app.integrations.resilience import CircuitBreaker, CircuitOpenError, CircuitState, retry_with_backoff

pytestmark = pytest.mark.anyio


def _status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://api.linkedin.com/rest/socialActions/x")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError(f"HTTP {status_code}", request=request, response=response)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


# ═══════════════════════════════════════════════════════
# Circuit Breaker
# ═══════════════════════════════════════════════════════


class TestCircuitBreaker:
    def test_initial_state_is_closed(self):
        assert CircuitBreaker("test").state == CircuitState.CLOSED

    async def test_success_keeps_closed(self):
        cb = CircuitBreaker("test")
        assert await cb.call(AsyncMock(return_value="ok")) == "ok"
        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 0

    async def test_failures_open_circuit(self):
        cb = CircuitBreaker("test", failure_threshold=3)
        failing = AsyncMock(side_effect=RuntimeError("fail"))
        for _ in range(3):
            with pytest.raises(RuntimeError):
                await cb.call(failing)
        assert cb.state == CircuitState.OPEN

        with pytest.raises(CircuitOpenError):
            await cb.call(failing)
        assert failing.await_count == 3

    async def test_success_resets_failure_count(self):
        cb = CircuitBreaker("test", failure_threshold=2)
        with pytest.raises(RuntimeError):
            await cb.call(AsyncMock(side_effect=RuntimeError("fail")))
        await cb.call(AsyncMock(return_value="ok"))
        with pytest.raises(RuntimeError):
            await cb.call(AsyncMock(side_effect=RuntimeError("fail")))
        assert cb.state == CircuitState.CLOSED

    async def test_half_open_trial(self):
        clock = FakeClock()
        cb = CircuitBreaker("test", failure_threshold=1, open_timeout=30, clock=clock)
        with pytest.raises(RuntimeError):
            await cb.call(AsyncMock(side_effect=RuntimeError("fail")))
        assert cb.state == CircuitState.OPEN

        clock.now += 29
        assert cb.state == CircuitState.OPEN
        clock.now += 1
        assert cb.state == CircuitState.HALF_OPEN

        # A failed trial re-opens immediately
        with pytest.raises(RuntimeError):
            await cb.call(AsyncMock(side_effect=RuntimeError("still failing")))
        assert cb.state == CircuitState.OPEN

        clock.now += 30
        assert await cb.call(AsyncMock(return_value="back")) == "back"
        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 0

    def test_reset(self):
        cb = CircuitBreaker("test", failure_threshold=1)
        cb.record_failure()
        assert cb.state == CircuitState.OPEN
        cb.reset()
        assert cb.state == CircuitState.CLOSED


# ═══════════════════════════════════════════════════════
# Retry with backoff
# ═══════════════════════════════════════════════════════


@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
    delays: list[float] = []

    async def _record(delay):
        delays.append(delay)

    monkeypatch.setattr("app.integrations.resilience.asyncio.sleep", _record)
    return delays


class TestRetryWithBackoff:
    async def test_success_first_try(self, sleeps):
        func = AsyncMock(return_value="ok")
        assert await retry_with_backoff(func, "arg", key="value") == "ok"
        func.assert_awaited_once_with("arg", key="value")
        assert sleeps == []

    async def test_retries_retryable_status(self, sleeps):
        func = AsyncMock(side_effect=[_status_error(429), _status_error(503), "ok"])
        assert await retry_with_backoff(func) == "ok"
        assert sleeps == [1.0, 2.0]

    async def test_retries_transport_errors(self, sleeps):
        func = AsyncMock(side_effect=[httpx.ConnectError("refused"), "ok"])
        assert await retry_with_backoff(func, backoff_base=0.5) == "ok"
        assert sleeps == [0.5]

    async def test_client_errors_not_retried(self, sleeps):
        func = AsyncMock(side_effect=_status_error(404))
        with pytest.raises(httpx.HTTPStatusError):
            await retry_with_backoff(func)
        assert func.await_count == 1
        assert sleeps == []

    async def test_gives_up_after_max_retries(self, sleeps):
        func = AsyncMock(side_effect=_status_error(500))
        with pytest.raises(httpx.HTTPStatusError):
            await retry_with_backoff(func, max_retries=3)
        assert func.await_count == 4
        assert sleeps == [1.0, 2.0, 4.0]

    async def test_other_errors_propagate(self, sleeps):
        func = AsyncMock(side_effect=KeyError("boom"))
        with pytest.raises(KeyError):
            await retry_with_backoff(func)
        assert sleeps == []
