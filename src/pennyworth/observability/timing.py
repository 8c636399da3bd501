"""Medição de latência das chamadas a colaboradores."""

from __future__ import annotations

import contextlib
import time
from collections.abc import Iterator

from pennyworth.observability.logging import get_logger

logger = get_logger(__name__)


@contextlib.contextmanager
def timed(component: str, **fields: object) -> Iterator[None]:
    """Loga `component_latency` com o desfecho do bloco (ok/error).

    A exceção, se houver, é propagada sem alteração.
    """
    start = time.perf_counter()
    outcome = "error"
    try:
        yield
        outcome = "ok"
    finally:
        logger.info(
            "component_latency",
            extra={
                "component": component,
                "outcome": outcome,
                "elapsed_ms": round((time.perf_counter() - start) * 1000, 2),
                **fields,
            },
        )
