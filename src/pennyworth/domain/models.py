"""Modelos de domínio compartilhados entre camadas.

Todos os modelos são imutáveis: a máquina de estados produz cópias novas
(`model_copy`) em vez de mutar instâncias em uso.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class EmailDraft(BaseModel):
    """Rascunho de e-mail aguardando confirmação do usuário."""

    model_config = ConfigDict(frozen=True)

    to: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    body: str = Field(min_length=1)


class ChatTurn(BaseModel):
    """Um turno do chat livre (formato compatível com chat completions)."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class GoogleTokens(BaseModel):
    """Credenciais OAuth do Google vinculadas a um usuário."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None
    scope: str | None = None

    def is_expired(self, now: datetime | None = None, leeway_seconds: int = 60) -> bool:
        """True se o access token expirou (ou expira dentro da folga)."""
        if self.expires_at is None:
            return False
        current = now or datetime.now(tz=UTC)
        return (self.expires_at - current).total_seconds() <= leeway_seconds


class LinkedUser(BaseModel):
    """Usuário conhecido pelo diretório, identificado pelo canal WhatsApp."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    channel_id: str
    email: str | None = None
    name: str | None = None
    tokens: GoogleTokens | None = None

    @property
    def has_credential(self) -> bool:
        """True se existe conta externa vinculada (access token presente)."""
        return bool(self.tokens and self.tokens.access_token)


class InboundMessage(BaseModel):
    """Mensagem de texto recebida de um canal (um turno do usuário)."""

    model_config = ConfigDict(frozen=True)

    channel_id: str
    text: str
    message_id: str | None = None
