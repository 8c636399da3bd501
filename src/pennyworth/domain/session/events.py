"""Eventos consumidos pela máquina de estados.

`MessageReceived` vem do usuário; os demais são desfechos de efeitos
executados pelo serviço de conversa (colaboradores externos).
"""

from __future__ import annotations

from dataclasses import dataclass

from pennyworth.domain.models import EmailDraft


@dataclass(frozen=True, slots=True)
class MessageReceived:
    text: str


@dataclass(frozen=True, slots=True)
class DraftReady:
    draft: EmailDraft


@dataclass(frozen=True, slots=True)
class DraftFailed:
    reason: str


@dataclass(frozen=True, slots=True)
class ChatReplied:
    user_text: str
    reply: str


@dataclass(frozen=True, slots=True)
class ChatFailed:
    user_text: str
    reason: str


@dataclass(frozen=True, slots=True)
class EmailDelivered:
    draft_id: str


@dataclass(frozen=True, slots=True)
class EmailDeliveryFailed:
    reason: str


SessionEvent = (
    MessageReceived
    | DraftReady
    | DraftFailed
    | ChatReplied
    | ChatFailed
    | EmailDelivered
    | EmailDeliveryFailed
)
