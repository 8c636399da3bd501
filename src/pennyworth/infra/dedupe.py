"""Dedupe de mensagens inbound (a Meta reentrega webhooks).

A chave é o `message_id` do WhatsApp. `mark_if_new` é atômico:
retorna True se a mensagem é nova (e a marca), False se já foi vista.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from pennyworth.infra.redis_pool import get_redis_client
from pennyworth.observability.logging import get_logger

if TYPE_CHECKING:
    from pennyworth.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


class DedupeError(Exception):
    """Falha no backend de dedupe."""


class DedupeStore(ABC):
    @abstractmethod
    async def mark_if_new(self, key: str) -> bool:
        """Marca chave se não existir (set-if-not-exists).

        Returns:
            True se a chave foi marcada agora (evento novo)
            False se a chave já existia (duplicado)

        Raises:
            DedupeError: Falha no backend
        """

    @abstractmethod
    async def clear(self, key: str) -> bool: ...


class InMemoryDedupeStore(DedupeStore):
    """Dedupe em memória para desenvolvimento e testes.

    Não funciona com múltiplas instâncias.
    """

    def __init__(self, ttl_seconds: int = 86400) -> None:
        self._seen: dict[str, float] = {}
        self._ttl_seconds = ttl_seconds

    async def mark_if_new(self, key: str) -> bool:
        self._cleanup_expired()
        if key in self._seen:
            logger.debug("Dedupe hit (in-memory)", extra={"key": key[:16] + "..."})
            return False
        self._seen[key] = time.time()
        return True

    async def clear(self, key: str) -> bool:
        return self._seen.pop(key, None) is not None

    def _cleanup_expired(self) -> None:
        now = time.time()
        expired = [k for k, ts in self._seen.items() if now - ts > self._ttl_seconds]
        for k in expired:
            del self._seen[k]


class RedisDedupeStore(DedupeStore):
    """Dedupe via Redis (SET NX EX)."""

    def __init__(self, redis_client: Any, ttl_seconds: int = 86400, key_prefix: str = "dedupe:") -> None:
        self._redis = redis_client
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix

    async def mark_if_new(self, key: str) -> bool:
        try:
            created = await self._redis.set(
                self._key_prefix + key, "1", nx=True, ex=self._ttl_seconds
            )
        except Exception as e:
            logger.error("Erro em operação Redis (dedupe)", extra={"error_type": type(e).__name__})
            raise DedupeError(f"Redis dedupe failed: {e}") from e
        return bool(created)

    async def clear(self, key: str) -> bool:
        try:
            return bool(await self._redis.delete(self._key_prefix + key))
        except Exception as e:
            logger.warning("Erro ao remover chave", extra={"error_type": type(e).__name__})
            return False


def create_dedupe_store(settings: Settings | None = None) -> DedupeStore:
    if settings is None:
        from pennyworth.config.settings import get_settings

        settings = get_settings()

    backend = settings.dedupe_backend.lower()
    if backend == "memory":
        logger.info("Usando InMemoryDedupeStore (apenas dev/testes)")
        return InMemoryDedupeStore(ttl_seconds=settings.inbound_dedupe_ttl_seconds)
    if backend == "redis":
        logger.info("Usando RedisDedupeStore")
        return RedisDedupeStore(
            get_redis_client(settings), ttl_seconds=settings.inbound_dedupe_ttl_seconds
        )
    raise ValueError(f"Backend de dedupe não reconhecido: {backend}")
