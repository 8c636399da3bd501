"""Diretório de usuários vinculados (canal WhatsApp ↔ conta Google).

Backends:
- "memory": dicts do processo (dev/testes)
- "redis": documento JSON por usuário + índice canal → user_id
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pennyworth.domain.models import LinkedUser
from pennyworth.domain.protocols import UserDirectory
from pennyworth.infra.redis_pool import get_redis_client
from pennyworth.observability.logging import get_logger
from pennyworth.utils.ids import mask_channel_id

if TYPE_CHECKING:
    from pennyworth.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

USER_KEY_PREFIX = "user:"
CHANNEL_KEY_PREFIX = "user_channel:"


class InMemoryUserDirectory(UserDirectory):
    def __init__(self, users: list[LinkedUser] | None = None) -> None:
        self._by_id: dict[str, LinkedUser] = {}
        self._by_channel: dict[str, str] = {}
        for user in users or []:
            self._store(user)

    async def find_by_channel_id(self, channel_id: str) -> LinkedUser | None:
        user_id = self._by_channel.get(channel_id)
        return self._by_id.get(user_id) if user_id else None

    async def find_by_id(self, user_id: str) -> LinkedUser | None:
        return self._by_id.get(user_id)

    async def upsert(self, user: LinkedUser) -> None:
        self._store(user)

    def _store(self, user: LinkedUser) -> None:
        previous = self._by_id.get(user.user_id)
        if previous and previous.channel_id != user.channel_id:
            self._by_channel.pop(previous.channel_id, None)
        self._by_id[user.user_id] = user
        self._by_channel[user.channel_id] = user.user_id


class RedisUserDirectory(UserDirectory):
    def __init__(self, redis_client: Any) -> None:
        self._redis = redis_client

    async def find_by_channel_id(self, channel_id: str) -> LinkedUser | None:
        user_id = await self._redis.get(CHANNEL_KEY_PREFIX + channel_id)
        if not user_id:
            return None
        if isinstance(user_id, bytes):
            user_id = user_id.decode("utf-8")
        return await self.find_by_id(user_id)

    async def find_by_id(self, user_id: str) -> LinkedUser | None:
        payload = await self._redis.get(USER_KEY_PREFIX + user_id)
        if not payload:
            return None
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        return LinkedUser.model_validate_json(payload)

    async def upsert(self, user: LinkedUser) -> None:
        previous = await self.find_by_id(user.user_id)
        if previous and previous.channel_id != user.channel_id:
            await self._redis.delete(CHANNEL_KEY_PREFIX + previous.channel_id)
        await self._redis.set(USER_KEY_PREFIX + user.user_id, user.model_dump_json())
        await self._redis.set(CHANNEL_KEY_PREFIX + user.channel_id, user.user_id)
        logger.info(
            "User linked (Redis)",
            extra={"channel": mask_channel_id(user.channel_id)},
        )


def create_user_directory(settings: Settings | None = None) -> UserDirectory:
    if settings is None:
        from pennyworth.config.settings import get_settings

        settings = get_settings()

    backend = settings.user_directory_backend.lower()
    if backend == "memory":
        logger.info("Usando InMemoryUserDirectory (apenas dev/testes)")
        return InMemoryUserDirectory()
    if backend == "redis":
        logger.info("Usando RedisUserDirectory")
        return RedisUserDirectory(get_redis_client(settings))
    raise ValueError(f"Backend de diretório não reconhecido: {backend}")
