"""Protocolo de domínio para persistência de sessão (async)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from pennyworth.domain.session import Session


class SessionStoreError(Exception):
    """Erro ao persistir ou recuperar sessão."""


class SessionStore(ABC):
    """Contrato de armazenamento de sessões por canal.

    Uma sessão por `channel_id`. O acesso concorrente ao mesmo canal é
    serializado por `lock()`; canais diferentes nunca disputam o mesmo lock.
    """

    @abstractmethod
    async def get(self, channel_id: str) -> Session | None: ...

    @abstractmethod
    async def save(self, session: Session) -> None: ...

    @abstractmethod
    async def delete(self, channel_id: str) -> bool: ...

    @abstractmethod
    def lock(self, channel_id: str) -> AbstractAsyncContextManager[None]:
        """Exclusão mútua por canal (context manager assíncrono)."""

    async def get_or_create(
        self, channel_id: str, user_id: str, email: str | None
    ) -> Session:
        """Sessão existente ou uma nova em `initial`.

        A sessão nova só é gravada quando o chamador fizer `save()`.
        """
        session = await self.get(channel_id)
        if session is not None:
            return session
        return Session(channel_id=channel_id, user_id=user_id, email=email)

    async def exists(self, channel_id: str) -> bool:
        return await self.get(channel_id) is not None
