"""Posições do fluxo de conversa (campo `step` da sessão)."""

from __future__ import annotations

from enum import StrEnum


class ConversationStep(StrEnum):
    """Passos canônicos de uma sessão."""

    # === Entrada / menu ===
    INITIAL = "initial"
    WAITING_FOR_INTENT = "waiting_for_intent"
    CHATTING = "chatting"
    """Chat livre; volta a si mesmo enquanto nenhum pedido é reconhecido."""

    # === Coleta de slots do e-mail ===
    GET_RECIPIENT = "get_recipient"
    GET_PURPOSE = "get_purpose"
    DRAFTING = "drafting"
    """Transitório: rascunho sendo gerado. Nunca é persistido."""

    # === Revisão do rascunho ===
    CONFIRM_DRAFT = "confirm_draft"
    EDIT_DRAFT = "edit_draft"
    EDIT_SUBJECT = "edit_subject"
    EDIT_BODY = "edit_body"
    EDIT_RECIPIENT = "edit_recipient"

    # === Placeholders ===
    REPLY_EMAIL = "reply_email"
    SET_REMINDER = "set_reminder"


# Passos em que a sessão carrega um rascunho obrigatório
DRAFT_STEPS = frozenset({
    ConversationStep.CONFIRM_DRAFT,
    ConversationStep.EDIT_DRAFT,
    ConversationStep.EDIT_SUBJECT,
    ConversationStep.EDIT_BODY,
    ConversationStep.EDIT_RECIPIENT,
})

# Passos de entrada: pedidos do menu são reconhecidos aqui
MENU_STEPS = frozenset({
    ConversationStep.INITIAL,
    ConversationStep.WAITING_FOR_INTENT,
    ConversationStep.CHATTING,
})
