"""Contratos dos colaboradores externos consumidos pela conversa.

Application depende apenas destas interfaces; as implementações concretas
(WhatsApp, OpenAI, Gmail, Redis) ficam em adapters/, ai/ e infra/.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from pennyworth.domain.models import ChatTurn, EmailDraft, LinkedUser


@dataclass(frozen=True, slots=True)
class CompletionOptions:
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None


class MessageSender(ABC):
    """Transporte de saída (best effort: falhas não são propagadas)."""

    @abstractmethod
    async def send_message(self, recipient: str, text: str) -> None: ...


class CompletionClient(ABC):
    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        history: Sequence[ChatTurn],
        user_message: str,
        options: CompletionOptions | None = None,
    ) -> str:
        """Retorna o texto gerado.

        Raises:
            CompletionError: Falha da chamada ou resposta vazia
        """


class DraftGenerator(ABC):
    @abstractmethod
    async def generate(self, prompt: str) -> EmailDraft:
        """Gera rascunho estruturado a partir de texto livre.

        Raises:
            DraftGenerationError: Falha da chamada ou saída malformada
        """


class EmailGateway(ABC):
    """Conta de e-mail vinculada ao usuário."""

    @abstractmethod
    async def create_draft(self, owner_id: str, draft: EmailDraft) -> str:
        """Guarda o rascunho na conta; retorna o id do rascunho.

        Raises:
            EmailDeliveryError: Falha ao criar
        """

    @abstractmethod
    async def send_draft(self, owner_id: str, draft: EmailDraft) -> None:
        """Envia o rascunho confirmado.

        Raises:
            EmailDeliveryError: Falha no envio
        """


class UserDirectory(ABC):
    """Usuários vinculados (canal ↔ conta Google)."""

    @abstractmethod
    async def find_by_channel_id(self, channel_id: str) -> LinkedUser | None: ...

    @abstractmethod
    async def find_by_id(self, user_id: str) -> LinkedUser | None: ...

    @abstractmethod
    async def upsert(self, user: LinkedUser) -> None: ...
