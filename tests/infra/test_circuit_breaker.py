"""Testes do circuit breaker (relógio controlado)."""

from __future__ import annotations

import pytest

from pennyworth.infra.circuit_breaker import CircuitBreaker, CircuitBreakerConfig, CircuitState


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _breaker(clock: FakeClock, **overrides) -> CircuitBreaker:
    config = CircuitBreakerConfig(
        fail_max=overrides.get("fail_max", 3),
        reset_timeout_seconds=overrides.get("reset_timeout_seconds", 10.0),
        half_open_max_calls=overrides.get("half_open_max_calls", 1),
    )
    return CircuitBreaker(config, clock=clock)


class TestCircuitBreaker:
    @pytest.mark.asyncio
    async def test_opens_after_consecutive_retryable_failures(self) -> None:
        breaker = _breaker(FakeClock())
        for _ in range(2):
            assert await breaker.record_failure(is_retryable=True) is CircuitState.CLOSED
        assert await breaker.record_failure(is_retryable=True) is CircuitState.OPEN
        assert await breaker.allow_request() is False

    @pytest.mark.asyncio
    async def test_non_retryable_failure_resets_count(self) -> None:
        """4xx é erro do chamador e não conta para abrir o circuito."""
        breaker = _breaker(FakeClock())
        await breaker.record_failure(is_retryable=True)
        await breaker.record_failure(is_retryable=True)

        await breaker.record_failure(is_retryable=False)

        assert breaker.failure_count == 0
        assert breaker.state is CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_after_timeout_allows_limited_trials(self) -> None:
        clock = FakeClock()
        breaker = _breaker(clock, fail_max=1)
        await breaker.record_failure(is_retryable=True)

        clock.now = 10.0
        assert await breaker.allow_request() is True
        assert breaker.state is CircuitState.HALF_OPEN
        assert await breaker.allow_request() is False

    @pytest.mark.asyncio
    async def test_half_open_success_closes(self) -> None:
        clock = FakeClock()
        breaker = _breaker(clock, fail_max=1)
        await breaker.record_failure(is_retryable=True)
        clock.now = 11.0
        await breaker.allow_request()

        assert await breaker.record_success() is CircuitState.CLOSED
        assert await breaker.allow_request() is True

    @pytest.mark.asyncio
    async def test_half_open_failure_reopens(self) -> None:
        clock = FakeClock()
        breaker = _breaker(clock, fail_max=1)
        await breaker.record_failure(is_retryable=True)
        clock.now = 11.0
        await breaker.allow_request()

        assert await breaker.record_failure(is_retryable=True) is CircuitState.OPEN
        clock.now = 15.0
        assert await breaker.allow_request() is False
