"""Factory de SessionStore conforme settings.

- "memory": InMemorySessionStore (dev/testes, processo único)
- "redis": RedisSessionStore (JSON + TTL opcional)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pennyworth.domain.protocols.session_store import SessionStore
from pennyworth.infra.redis_pool import get_redis_client
from pennyworth.infra.session_store_memory import InMemorySessionStore
from pennyworth.infra.session_store_redis import RedisSessionStore
from pennyworth.observability.logging import get_logger

if TYPE_CHECKING:
    from pennyworth.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


def create_session_store(settings: Settings | None = None) -> SessionStore:
    """Cria o store configurado em SESSION_STORE_BACKEND.

    Raises:
        ValueError: Backend não reconhecido ou REDIS_URL ausente
    """
    if settings is None:
        from pennyworth.config.settings import get_settings

        settings = get_settings()

    backend = settings.session_store_backend.lower()
    if backend == "memory":
        logger.info("Usando InMemorySessionStore (apenas dev/testes)")
        return InMemorySessionStore()

    if backend == "redis":
        logger.info(
            "Usando RedisSessionStore",
            extra={"ttl_seconds": settings.session_ttl_seconds},
        )
        return RedisSessionStore(
            get_redis_client(settings), ttl_seconds=settings.session_ttl_seconds
        )

    raise ValueError(f"Backend de sessão não reconhecido: {backend}")
