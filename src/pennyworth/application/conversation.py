"""Serviço de conversa: executa a máquina de estados contra os colaboradores.

Fluxo por mensagem:
    autentica canal → lock do canal → carrega/cria sessão → advance()
    → executa efeitos (desfechos voltam como eventos) → salva ou remove sessão

A sessão só é gravada no fim do passo; uma exceção inesperada no meio do
caminho deixa a sessão armazenada intacta e gera um pedido de desculpas
genérico antes de propagar.
"""

from __future__ import annotations

import logging
from collections import deque
from urllib.parse import quote

from pennyworth.ai.prompts import CHAT_SYSTEM_PROMPT
from pennyworth.application import replies
from pennyworth.application.state_machine import SessionStateMachine, Transition
from pennyworth.domain.chunking import DEFAULT_CHUNK_LIMIT, split_by_sentences
from pennyworth.domain.display_name import DEFAULT_HONORIFIC, resolve_display_name
from pennyworth.domain.errors import (
    CompletionError,
    DraftGenerationError,
    EmailDeliveryError,
)
from pennyworth.domain.models import InboundMessage, LinkedUser
from pennyworth.domain.protocols import (
    CompletionClient,
    CompletionOptions,
    DraftGenerator,
    EmailGateway,
    MessageSender,
    SessionStore,
    UserDirectory,
)
from pennyworth.domain.session import (
    ChatFailed,
    ChatReplied,
    CompleteChat,
    DeleteSession,
    DeliverEmail,
    DraftFailed,
    DraftReady,
    Effect,
    EmailDelivered,
    EmailDeliveryFailed,
    GenerateDraft,
    MessageReceived,
    Reply,
    Session,
    SessionEvent,
)
from pennyworth.observability.logging import get_logger, log_fallback
from pennyworth.observability.timing import timed
from pennyworth.utils.ids import mask_channel_id

logger: logging.Logger = get_logger(__name__)


class ConversationService:
    """Ponto de entrada de cada turno do usuário."""

    def __init__(
        self,
        *,
        sessions: SessionStore,
        users: UserDirectory,
        sender: MessageSender,
        completion: CompletionClient,
        drafts: DraftGenerator,
        email: EmailGateway,
        auth_url: str,
        machine: SessionStateMachine | None = None,
        honorific: str = DEFAULT_HONORIFIC,
        chat_options: CompletionOptions | None = None,
        chunk_limit: int = DEFAULT_CHUNK_LIMIT,
    ) -> None:
        self._sessions = sessions
        self._users = users
        self._sender = sender
        self._completion = completion
        self._drafts = drafts
        self._email = email
        self._auth_url = auth_url
        self._machine = machine or SessionStateMachine(honorific=honorific)
        self._honorific = honorific
        self._chat_options = chat_options
        self._chunk_limit = chunk_limit

    async def handle_message(self, inbound: InboundMessage) -> None:
        channel_id = inbound.channel_id
        user = await self._users.find_by_channel_id(channel_id)
        if user is None or not user.has_credential:
            logger.info("channel_not_linked", extra={"channel": mask_channel_id(channel_id)})
            await self._sender.send_message(channel_id, self._login_prompt(channel_id))
            return

        async with self._sessions.lock(channel_id):
            try:
                await self._advance(channel_id, inbound.text, user)
            except Exception as exc:
                # Sessão armazenada fica como estava; o usuário ainda recebe resposta.
                logger.warning(
                    "turn_failed",
                    extra={"channel": mask_channel_id(channel_id), "error_type": type(exc).__name__},
                )
                await self._apologize(channel_id)
                raise

    async def _advance(self, channel_id: str, text: str, user: LinkedUser) -> None:
        session = await self._sessions.get_or_create(channel_id, user.user_id, user.email)
        final, deleted = await self._run(self._machine.advance(session, MessageReceived(text)), user)
        if deleted:
            await self._sessions.delete(channel_id)
            logger.info(
                "session_closed",
                extra={"channel": mask_channel_id(channel_id), "step": session.step},
            )
        else:
            await self._sessions.save(final)

    async def _apologize(self, channel_id: str) -> None:
        try:
            await self._sender.send_message(channel_id, replies.unexpected_failure(self._honorific))
        except Exception as exc:
            logger.warning(
                "apology_not_sent",
                extra={"channel": mask_channel_id(channel_id), "error_type": type(exc).__name__},
            )

    def _login_prompt(self, channel_id: str) -> str:
        login_url = f"{self._auth_url}?whatsapp={quote(channel_id, safe='')}"
        return replies.login_prompt(resolve_display_name(None, self._honorific), login_url)

    async def _run(self, transition: Transition, user: LinkedUser) -> tuple[Session, bool]:
        """Executa os efeitos em ordem; desfechos de colaborador realimentam a máquina."""
        session = transition.session
        deleted = False
        pending: deque[Effect] = deque(transition.effects)

        while pending:
            effect = pending.popleft()
            if isinstance(effect, Reply):
                await self._reply(session.channel_id, effect)
            elif isinstance(effect, DeleteSession):
                deleted = True
            else:
                outcome = await self._call_collaborator(effect, user)
                follow_up = self._machine.advance(session, outcome)
                session = follow_up.session
                pending.extendleft(reversed(follow_up.effects))

        return session, deleted

    async def _reply(self, channel_id: str, reply: Reply) -> None:
        if not reply.chunked:
            await self._sender.send_message(channel_id, reply.text)
            return
        for chunk in split_by_sentences(reply.text, self._chunk_limit):
            await self._sender.send_message(channel_id, chunk)

    async def _call_collaborator(self, effect: Effect, user: LinkedUser) -> SessionEvent:
        channel = mask_channel_id(user.channel_id)
        if isinstance(effect, GenerateDraft):
            try:
                with timed("draft_generation"):
                    draft = await self._drafts.generate(effect.prompt)
            except DraftGenerationError as exc:
                log_fallback(logger, "draft_generator", exc, channel=channel)
                return DraftFailed(reason=str(exc))
            return DraftReady(draft=draft)

        if isinstance(effect, CompleteChat):
            try:
                with timed("chat_completion"):
                    reply = await self._completion.complete(
                        CHAT_SYSTEM_PROMPT,
                        effect.context,
                        effect.user_text,
                        self._chat_options,
                    )
            except CompletionError as exc:
                log_fallback(logger, "completion", exc, channel=channel)
                return ChatFailed(user_text=effect.user_text, reason=str(exc))
            return ChatReplied(user_text=effect.user_text, reply=reply)

        if isinstance(effect, DeliverEmail):
            try:
                with timed("email_delivery"):
                    draft_id = await self._email.create_draft(user.user_id, effect.draft)
                    await self._email.send_draft(user.user_id, effect.draft)
            except EmailDeliveryError as exc:
                log_fallback(logger, "email_gateway", exc, channel=channel)
                return EmailDeliveryFailed(reason=str(exc))
            logger.info("email_delivered", extra={"channel": channel})
            return EmailDelivered(draft_id=draft_id)

        raise TypeError(f"Efeito sem executor: {type(effect).__name__}")
