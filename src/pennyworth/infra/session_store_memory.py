"""Implementação de SessionStore em memória (dev/testes, processo único)."""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager

from pennyworth.domain.protocols.session_store import SessionStore
from pennyworth.domain.session import DraftingState, Session
from pennyworth.infra.keyed_lock import KeyedLock
from pennyworth.observability.logging import get_logger
from pennyworth.utils.ids import mask_channel_id

logger: logging.Logger = get_logger(__name__)


class InMemorySessionStore(SessionStore):
    """Sessões num dict do processo; somem no restart."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._locks = KeyedLock()

    def lock(self, channel_id: str) -> AbstractAsyncContextManager[None]:
        return self._locks.hold(channel_id)

    async def get(self, channel_id: str) -> Session | None:
        return self._sessions.get(channel_id)

    async def save(self, session: Session) -> None:
        if isinstance(session.state, DraftingState):
            session = session.with_state(session.state.fallback)
        self._sessions[session.channel_id] = session
        logger.debug(
            "Session saved (in-memory)",
            extra={"channel": mask_channel_id(session.channel_id), "step": session.step},
        )

    async def delete(self, channel_id: str) -> bool:
        if self._sessions.pop(channel_id, None) is None:
            return False
        logger.debug("Session deleted (in-memory)", extra={"channel": mask_channel_id(channel_id)})
        return True

    def __len__(self) -> int:
        return len(self._sessions)
