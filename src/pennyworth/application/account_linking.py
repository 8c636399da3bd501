"""Vínculo de um canal WhatsApp a uma conta Google (login via link)."""

from __future__ import annotations

import logging
import re

from pennyworth.application import replies
from pennyworth.domain.models import LinkedUser
from pennyworth.domain.protocols import MessageSender, UserDirectory
from pennyworth.infra.google_oauth import GoogleOAuthClient, PendingLinkStore
from pennyworth.observability.logging import get_logger
from pennyworth.utils.ids import mask_channel_id, new_user_id

logger: logging.Logger = get_logger(__name__)

_E164 = re.compile(r"^\+[1-9]\d{1,14}$")


class InvalidChannelError(ValueError):
    """Número fora do formato E.164 (+5511987654321)."""


class UnknownLinkError(LookupError):
    """`state` do callback inexistente ou expirado."""


def is_e164(channel_id: str) -> bool:
    return bool(_E164.match(channel_id))


class AccountLinkingService:
    def __init__(
        self,
        oauth: GoogleOAuthClient,
        pending: PendingLinkStore,
        users: UserDirectory,
        sender: MessageSender,
    ) -> None:
        self._oauth = oauth
        self._pending = pending
        self._users = users
        self._sender = sender

    def start(self, channel_id: str) -> str:
        """Registra o vínculo pendente e retorna a URL de consentimento.

        Raises:
            InvalidChannelError: Número fora do formato E.164
        """
        channel_id = channel_id.strip()
        if not is_e164(channel_id):
            raise InvalidChannelError("Use o formato E.164, ex.: +1234567890")
        link = self._pending.create(channel_id)
        logger.info("account_link_started", extra={"channel": mask_channel_id(channel_id)})
        return self._oauth.consent_url(link.link_id)

    async def complete(self, code: str, state: str) -> LinkedUser:
        """Troca o code, grava o usuário e envia a boas-vindas no WhatsApp.

        Raises:
            UnknownLinkError: `state` desconhecido ou expirado
            OAuthError: Falha na troca de tokens ou no perfil
        """
        link = self._pending.consume(state)
        if link is None:
            raise UnknownLinkError("Vínculo inválido ou expirado")

        tokens = await self._oauth.exchange_code(code)
        profile = await self._oauth.fetch_profile(tokens.access_token)

        existing = await self._users.find_by_channel_id(link.channel_id)
        if existing and tokens.refresh_token is None and existing.tokens:
            tokens = tokens.model_copy(update={"refresh_token": existing.tokens.refresh_token})

        user = LinkedUser(
            user_id=existing.user_id if existing else new_user_id(),
            channel_id=link.channel_id,
            email=profile.email,
            name=profile.name,
            tokens=tokens,
        )
        await self._users.upsert(user)
        logger.info(
            "account_linked",
            extra={"channel": mask_channel_id(user.channel_id), "returning_user": existing is not None},
        )

        await self._sender.send_message(user.channel_id, replies.WELCOME_MESSAGE)
        return user
