"""Circuit breaker para chamadas HTTP externas (Graph API, Google).

Estados:
- closed: chamadas passam; falhas retentáveis consecutivas são contadas
- open: falha rápida até `reset_timeout_seconds`
- half_open: libera até `half_open_max_calls` chamadas de teste
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum


class CircuitState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class CircuitBreakerConfig:
    fail_max: int = 5
    reset_timeout_seconds: float = 60.0
    half_open_max_calls: int = 1


class CircuitBreaker:
    """Breaker assíncrono; o relógio é injetável para testes."""

    def __init__(
        self,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._config = config or CircuitBreakerConfig()
        self._clock = clock or time.monotonic
        self._lock = asyncio.Lock()
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0
        self._trial_calls = 0

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failures

    async def allow_request(self) -> bool:
        async with self._lock:
            if self._state is CircuitState.OPEN:
                if self._clock() - self._opened_at < self._config.reset_timeout_seconds:
                    return False
                self._state = CircuitState.HALF_OPEN
                self._trial_calls = 0

            if self._state is CircuitState.HALF_OPEN:
                if self._trial_calls >= self._config.half_open_max_calls:
                    return False
                self._trial_calls += 1

            return True

    async def record_success(self) -> CircuitState:
        async with self._lock:
            self._close()
            return self._state

    async def record_failure(self, is_retryable: bool) -> CircuitState:
        """Registra falha.

        Falhas não retentáveis (4xx) indicam erro do chamador, não do serviço
        remoto: zeram o contador em vez de abrir o circuito.
        """
        async with self._lock:
            if not is_retryable:
                self._close()
            elif self._state is CircuitState.HALF_OPEN:
                self._open()
            else:
                self._failures += 1
                if self._failures >= self._config.fail_max:
                    self._open()
            return self._state

    def _close(self) -> None:
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._trial_calls = 0

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()
        self._trial_calls = 0
