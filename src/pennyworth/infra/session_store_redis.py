"""Implementação de SessionStore usando Redis (redis.asyncio)."""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from typing import Any

from pydantic import ValidationError

from pennyworth.domain.protocols.session_store import SessionStore, SessionStoreError
from pennyworth.domain.session import DraftingState, Session
from pennyworth.infra.keyed_lock import KeyedLock
from pennyworth.observability.logging import get_logger
from pennyworth.utils.ids import mask_channel_id

logger: logging.Logger = get_logger(__name__)

KEY_PREFIX = "session:"


class RedisSessionStore(SessionStore):
    """Sessões como documentos JSON em Redis.

    O lock é por processo: várias instâncias atrás do mesmo webhook não
    serializam entre si.
    """

    def __init__(self, redis_client: Any, ttl_seconds: int = 0) -> None:
        self._redis = redis_client
        self._ttl_seconds = ttl_seconds
        self._locks = KeyedLock()

    def lock(self, channel_id: str) -> AbstractAsyncContextManager[None]:
        return self._locks.hold(channel_id)

    async def get(self, channel_id: str) -> Session | None:
        try:
            payload = await self._redis.get(KEY_PREFIX + channel_id)
        except Exception as e:
            logger.error(
                "Failed to load session from Redis",
                extra={"channel": mask_channel_id(channel_id), "error_type": type(e).__name__},
            )
            raise SessionStoreError(f"Redis get failed: {e}") from e

        if not payload:
            return None
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")

        try:
            return Session.model_validate_json(payload)
        except ValidationError:
            # Documento de versão incompatível: recomeça do zero
            logger.warning(
                "Discarding unreadable session (Redis)",
                extra={"channel": mask_channel_id(channel_id)},
            )
            return None

    async def save(self, session: Session) -> None:
        if isinstance(session.state, DraftingState):
            session = session.with_state(session.state.fallback)
        key = KEY_PREFIX + session.channel_id
        payload = session.model_dump_json()

        try:
            if self._ttl_seconds > 0:
                await self._redis.setex(key, self._ttl_seconds, payload)
            else:
                await self._redis.set(key, payload)
        except Exception as e:
            logger.error(
                "Failed to save session to Redis",
                extra={
                    "channel": mask_channel_id(session.channel_id),
                    "error_type": type(e).__name__,
                },
            )
            raise SessionStoreError(f"Redis save failed: {e}") from e

        logger.debug(
            "Session saved (Redis)",
            extra={"channel": mask_channel_id(session.channel_id), "step": session.step},
        )

    async def delete(self, channel_id: str) -> bool:
        try:
            deleted = await self._redis.delete(KEY_PREFIX + channel_id)
        except Exception as e:
            logger.error(
                "Failed to delete session from Redis",
                extra={"channel": mask_channel_id(channel_id), "error_type": type(e).__name__},
            )
            raise SessionStoreError(f"Redis delete failed: {e}") from e
        return bool(deleted)
