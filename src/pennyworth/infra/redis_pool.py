"""Conexão Redis compartilhada (sessões, diretório de usuários, dedupe)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import redis.asyncio as redis

from pennyworth.observability.logging import get_logger

if TYPE_CHECKING:
    from pennyworth.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

_clients: dict[str, Any] = {}


def get_redis_client(settings: Settings) -> Any:
    """Cliente `redis.asyncio` por URL (um pool por processo)."""
    if not settings.redis_url:
        raise ValueError("REDIS_URL é obrigatório para backends redis")

    client = _clients.get(settings.redis_url)
    if client is None:
        client = redis.from_url(settings.redis_url, decode_responses=True)
        _clients[settings.redis_url] = client
        logger.info(
            "Conexão Redis configurada",
            extra={"url": settings.redis_url.split("@")[-1]},  # Sem credenciais
        )
    return client


async def close_redis_clients() -> None:
    while _clients:
        _, client = _clients.popitem()
        await client.aclose()
