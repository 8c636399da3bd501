"""Máquina de estados da sessão: função de transição pura.

`advance(session, event)` devolve a sessão seguinte e a lista ordenada de
efeitos a executar. Nada aqui faz I/O: chamadas a colaboradores saem como
efeitos e seus desfechos voltam como eventos (`DraftReady`, `ChatFailed`...).

Ordem de avaliação para `MessageReceived`:
1. about-me (passo inalterado)
2. saudação isolada (volta ao menu, histórico preservado)
3. pedido compacto com endereço inline (vai direto para `drafting`),
   exceto em `get_purpose`, onde o texto é sempre o propósito
4. tabela por passo
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from pennyworth.application import replies
from pennyworth.domain.display_name import DEFAULT_HONORIFIC, resolve_display_name
from pennyworth.domain.intents import (
    NO_PURPOSE_PLACEHOLDER,
    NormalizedMessage,
    RequestIntent,
    classify_request,
    extract_purpose,
    find_inline_email,
    is_about_me,
    is_email_request,
    is_greeting_only,
    is_strict_email_address,
)
from pennyworth.domain.models import ChatTurn
from pennyworth.domain.session import (
    DRAFT_STEPS,
    MENU_STEPS,
    ChatFailed,
    ChatReplied,
    CompleteChat,
    ConversationStep,
    DeleteSession,
    DeliverEmail,
    DraftFailed,
    DraftingState,
    DraftReady,
    DraftReviewState,
    Effect,
    EmailDelivered,
    EmailDeliveryFailed,
    GenerateDraft,
    GetPurposeState,
    MessageReceived,
    Reply,
    Session,
    SessionEvent,
    at_step,
)
from pennyworth.observability.logging import get_logger
from pennyworth.utils.ids import mask_channel_id

logger: logging.Logger = get_logger(__name__)

DEFAULT_HISTORY_WINDOW = 5

_EDITABLE_FIELDS: dict[str, tuple[ConversationStep, str]] = {
    "subject": (ConversationStep.EDIT_SUBJECT, replies.NEW_SUBJECT_PROMPT),
    "body": (ConversationStep.EDIT_BODY, replies.NEW_BODY_PROMPT),
    "recipient": (ConversationStep.EDIT_RECIPIENT, replies.NEW_RECIPIENT_PROMPT),
}
_FIELD_PUNCTUATION = " .!?,;:"


@dataclass(slots=True)
class Transition:
    """Resultado de um passo: sessão seguinte + efeitos em ordem de emissão."""

    session: Session
    effects: list[Effect] = field(default_factory=list)

    @property
    def deletes_session(self) -> bool:
        return any(isinstance(effect, DeleteSession) for effect in self.effects)

    @property
    def replies(self) -> list[str]:
        return [effect.text for effect in self.effects if isinstance(effect, Reply)]


_StepHandler = Callable[[Session, NormalizedMessage], Transition]
_StateT = TypeVar("_StateT")


def _expect_state(session: Session, kind: type[_StateT]) -> _StateT:
    """Estado da sessão tipado para o handler do passo; divergência é bug de roteamento."""
    state = session.state
    if not isinstance(state, kind):
        raise TypeError(f"Passo {session.step} com estado inesperado: {type(state).__name__}")
    return state


class SessionStateMachine:
    """Dispatcher puro e determinístico dos passos de conversa."""

    def __init__(
        self,
        honorific: str = DEFAULT_HONORIFIC,
        history_window: int = DEFAULT_HISTORY_WINDOW,
    ) -> None:
        self._honorific = honorific
        self._history_window = history_window
        self._step_handlers: dict[ConversationStep, _StepHandler] = {
            **{step: self._on_menu for step in MENU_STEPS},
            ConversationStep.GET_RECIPIENT: self._on_get_recipient,
            ConversationStep.GET_PURPOSE: self._on_get_purpose,
            ConversationStep.CONFIRM_DRAFT: self._on_confirm_draft,
            ConversationStep.EDIT_DRAFT: self._on_edit_draft,
            ConversationStep.EDIT_SUBJECT: self._on_edit_value,
            ConversationStep.EDIT_BODY: self._on_edit_value,
            ConversationStep.EDIT_RECIPIENT: self._on_edit_value,
            ConversationStep.SET_REMINDER: self._on_placeholder,
            ConversationStep.REPLY_EMAIL: self._on_placeholder,
        }

    def advance(self, session: Session, event: SessionEvent) -> Transition:
        """Aplica um evento à sessão.

        Contrato:
        - Nunca muta a sessão recebida (modelos imutáveis)
        - Eventos fora de contexto (ex.: DraftReady sem geração pendente)
          são ignorados sem efeitos
        """
        if isinstance(event, MessageReceived):
            transition = self._on_message(session, event)
        elif isinstance(event, DraftReady | DraftFailed):
            transition = self._on_draft_outcome(session, event)
        elif isinstance(event, ChatReplied | ChatFailed):
            transition = self._on_chat_outcome(session, event)
        elif isinstance(event, EmailDelivered | EmailDeliveryFailed):
            transition = self._on_delivery_outcome(session, event)
        else:
            raise TypeError(f"Evento desconhecido: {type(event).__name__}")

        logger.debug(
            "session_transition",
            extra={
                "channel": mask_channel_id(session.channel_id),
                "event": type(event).__name__,
                "from_step": session.step,
                "to_step": transition.session.step,
                "effects_count": len(transition.effects),
            },
        )
        return transition

    # ------------------------------------------------------------------
    # Mensagem do usuário
    # ------------------------------------------------------------------

    def _on_message(self, session: Session, event: MessageReceived) -> Transition:
        if isinstance(session.state, DraftingState):
            # Geração interrompida (ex.: processo reiniciado no meio do passo)
            session = session.with_state(session.state.fallback)

        message = NormalizedMessage.from_raw(event.text)

        if is_about_me(message):
            text = replies.persona_description(self._display_name(session))
            return Transition(session, [Reply(text, chunked=True)])

        if is_greeting_only(message):
            if session.step in DRAFT_STEPS:
                logger.info(
                    "draft_discarded_by_greeting",
                    extra={"channel": mask_channel_id(session.channel_id)},
                )
            return Transition(
                session.with_state(at_step(ConversationStep.WAITING_FOR_INTENT)),
                [Reply(replies.capability_menu(self._display_name(session)))],
            )

        address = find_inline_email(message)
        if address and is_email_request(message.without(address)):
            if session.step == ConversationStep.GET_PURPOSE:
                # Destinatário já coletado; o endereço faz parte do propósito
                logger.info(
                    "inline_request_taken_as_purpose",
                    extra={"channel": mask_channel_id(session.channel_id)},
                )
                return self._on_get_purpose(session, message)
            purpose = extract_purpose(message, address)
            return self._start_drafting(
                session,
                recipient=address,
                purpose=purpose,
                prompt=f"To: {address}\nMessage: {purpose}",
                notice=replies.INLINE_DRAFTING_NOTICE,
            )

        handler = self._step_handlers[session.step]
        return handler(session, message)

    def _on_menu(self, session: Session, message: NormalizedMessage) -> Transition:
        intent = classify_request(message)
        if intent is RequestIntent.EMAIL:
            return Transition(
                session.with_state(at_step(ConversationStep.GET_RECIPIENT)),
                [Reply(replies.RECIPIENT_PROMPT)],
            )
        if intent is RequestIntent.REMINDER:
            return Transition(
                session.with_state(at_step(ConversationStep.SET_REMINDER)),
                [Reply(replies.REMINDER_PROMPT)],
            )
        if intent is RequestIntent.REPLY:
            return Transition(
                session.with_state(at_step(ConversationStep.REPLY_EMAIL)),
                [Reply(replies.REPLY_EMAIL_PROMPT)],
            )

        # Chat livre: o turno do usuário só entra no histórico com a resposta
        context = session.recent_history(self._history_window - 1)
        return Transition(session, [CompleteChat(user_text=message.raw, context=context)])

    def _on_get_recipient(self, session: Session, message: NormalizedMessage) -> Transition:
        if not is_strict_email_address(message.raw):
            return Transition(session, [Reply(replies.INVALID_ADDRESS)])
        return Transition(
            session.with_state(GetPurposeState(recipient=message.raw.strip())),
            [Reply(replies.PURPOSE_PROMPT)],
        )

    def _on_get_purpose(self, session: Session, message: NormalizedMessage) -> Transition:
        state = _expect_state(session, GetPurposeState)
        purpose = message.raw.strip() or NO_PURPOSE_PLACEHOLDER
        return self._start_drafting(
            session,
            recipient=state.recipient,
            purpose=purpose,
            prompt=f"To: {state.recipient}\nPurpose: {purpose}",
            notice=replies.DRAFTING_NOTICE,
        )

    def _on_confirm_draft(self, session: Session, message: NormalizedMessage) -> Transition:
        state = _expect_state(session, DraftReviewState)

        # Desempate fixo: send, cancel, edit
        if "send" in message.text:
            return Transition(
                session, [Reply(replies.DISPATCH_NOTICE), DeliverEmail(state.draft)]
            )
        if "cancel" in message.text:
            return Transition(session, [Reply(replies.DRAFT_DISCARDED), DeleteSession()])
        if "edit" in message.text:
            editing = state.model_copy(update={"step": ConversationStep.EDIT_DRAFT.value})
            return Transition(session.with_state(editing), [Reply(replies.EDIT_FIELD_PROMPT)])
        return Transition(session, [Reply(replies.CONFIRM_REPROMPT)])

    def _on_edit_draft(self, session: Session, message: NormalizedMessage) -> Transition:
        state = _expect_state(session, DraftReviewState)

        choice = message.text.strip(_FIELD_PUNCTUATION)
        choice = choice.removeprefix("the ").strip()
        target = _EDITABLE_FIELDS.get(choice)
        if target is None:
            return Transition(session, [Reply(replies.EDIT_FIELD_REPROMPT)])

        step, prompt = target
        return Transition(
            session.with_state(state.model_copy(update={"step": step.value})),
            [Reply(prompt)],
        )

    def _on_edit_value(self, session: Session, message: NormalizedMessage) -> Transition:
        state = _expect_state(session, DraftReviewState)

        value = message.raw.strip()
        if not value:
            _, prompt = _EDITABLE_FIELDS[state.step.removeprefix("edit_")]
            return Transition(session, [Reply(prompt)])

        updates: dict[str, str]
        state_updates: dict[str, object] = {"step": ConversationStep.CONFIRM_DRAFT.value}
        if state.step == ConversationStep.EDIT_SUBJECT:
            updates = {"subject": value}
            confirmation = replies.SUBJECT_UPDATED
        elif state.step == ConversationStep.EDIT_BODY:
            updates = {"body": value}
            confirmation = replies.BODY_UPDATED
        else:
            updates = {"to": value}
            state_updates["recipient"] = value
            confirmation = replies.recipient_updated(self._display_name(session))

        state_updates["draft"] = state.draft.model_copy(update=updates)
        return Transition(
            session.with_state(state.model_copy(update=state_updates)),
            [Reply(confirmation)],
        )

    def _on_placeholder(self, session: Session, message: NormalizedMessage) -> Transition:
        return Transition(
            session.with_state(at_step(ConversationStep.WAITING_FOR_INTENT)),
            [Reply(replies.NOT_YET_SUPPORTED)],
        )

    # ------------------------------------------------------------------
    # Desfechos de colaboradores
    # ------------------------------------------------------------------

    def _on_draft_outcome(self, session: Session, event: DraftReady | DraftFailed) -> Transition:
        state = session.state
        if not isinstance(state, DraftingState):
            return self._ignore(session, event)

        if isinstance(event, DraftFailed):
            return Transition(session.with_state(state.fallback), [Reply(replies.DRAFT_FAILED)])

        # O destinatário informado pelo usuário prevalece sobre o do modelo
        draft = event.draft.model_copy(update={"to": state.recipient})
        review = DraftReviewState(recipient=state.recipient, purpose=state.purpose, draft=draft)
        return Transition(session.with_state(review), [Reply(replies.draft_presentation(draft))])

    def _on_chat_outcome(self, session: Session, event: ChatReplied | ChatFailed) -> Transition:
        if isinstance(event, ChatFailed):
            return Transition(session, [Reply(replies.chat_failure(self._honorific))])

        updated = session.with_turns(
            ChatTurn(role="user", content=event.user_text),
            ChatTurn(role="assistant", content=event.reply),
        ).with_state(at_step(ConversationStep.CHATTING))
        return Transition(updated, [Reply(event.reply, chunked=True)])

    def _on_delivery_outcome(
        self, session: Session, event: EmailDelivered | EmailDeliveryFailed
    ) -> Transition:
        if session.step != ConversationStep.CONFIRM_DRAFT:
            return self._ignore(session, event)
        if isinstance(event, EmailDeliveryFailed):
            return Transition(session, [Reply(replies.DELIVERY_FAILED)])
        return Transition(
            session,
            [Reply(replies.send_success(self._display_name(session))), DeleteSession()],
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _start_drafting(
        self,
        session: Session,
        *,
        recipient: str,
        purpose: str,
        prompt: str,
        notice: str,
    ) -> Transition:
        state = session.state
        if isinstance(state, DraftingState):
            raise TypeError("Rascunho já em geração para este canal")
        drafting = DraftingState(recipient=recipient, purpose=purpose, fallback=state)
        return Transition(session.with_state(drafting), [Reply(notice), GenerateDraft(prompt)])

    def _display_name(self, session: Session) -> str:
        return resolve_display_name(session.email, self._honorific)

    def _ignore(self, session: Session, event: SessionEvent) -> Transition:
        logger.warning(
            "session_event_out_of_context",
            extra={
                "channel": mask_channel_id(session.channel_id),
                "event": type(event).__name__,
                "step": session.step,
            },
        )
        return Transition(session)
