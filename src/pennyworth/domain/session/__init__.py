"""Sessão de conversa: passos, estados, eventos e efeitos.

Exporta:
- ConversationStep: passos canônicos
- Session + variantes de estado (união etiquetada por `step`)
- Eventos (entrada da máquina) e efeitos (saída da máquina)
"""

from pennyworth.domain.session.effects import (
    CompleteChat,
    DeleteSession,
    DeliverEmail,
    Effect,
    GenerateDraft,
    Reply,
)
from pennyworth.domain.session.events import (
    ChatFailed,
    ChatReplied,
    DraftFailed,
    DraftReady,
    EmailDelivered,
    EmailDeliveryFailed,
    MessageReceived,
    SessionEvent,
)
from pennyworth.domain.session.states import (
    DraftingState,
    DraftReviewState,
    FlowState,
    GetPurposeState,
    Session,
    SlotlessState,
    at_step,
)
from pennyworth.domain.session.steps import DRAFT_STEPS, MENU_STEPS, ConversationStep

__all__ = [
    "ConversationStep",
    "DRAFT_STEPS",
    "MENU_STEPS",
    "Session",
    "FlowState",
    "SlotlessState",
    "GetPurposeState",
    "DraftingState",
    "DraftReviewState",
    "at_step",
    "SessionEvent",
    "MessageReceived",
    "DraftReady",
    "DraftFailed",
    "ChatReplied",
    "ChatFailed",
    "EmailDelivered",
    "EmailDeliveryFailed",
    "Effect",
    "Reply",
    "GenerateDraft",
    "CompleteChat",
    "DeliverEmail",
    "DeleteSession",
]
