"""Gateway de e-mail sobre a API REST do Gmail.

Mensagens vão como RFC 822 em base64url. O corpo recebe a assinatura do
remetente depois de removidos fechamentos e placeholders escritos pelo modelo.
"""

from __future__ import annotations

import base64
import logging
import re
from email.message import EmailMessage
from typing import TYPE_CHECKING

from pennyworth.domain.errors import EmailDeliveryError, OAuthError
from pennyworth.domain.models import EmailDraft, GoogleTokens, LinkedUser
from pennyworth.domain.protocols import EmailGateway, UserDirectory
from pennyworth.infra.google_oauth import GoogleOAuthClient
from pennyworth.infra.http import HttpClient, HttpError
from pennyworth.observability.logging import get_logger
from pennyworth.utils.ids import mask_channel_id

if TYPE_CHECKING:
    from pennyworth.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

DEFAULT_SENDER_NAME = "User"

_PLACEHOLDER = re.compile(r"\[(?:Your|Sender|User) Name\]", re.IGNORECASE)
_CLOSING_LINE = re.compile(
    r"^(?:best|regards|sincerely|warm regards|cheers|thanks|thank you|yours|cordially|"
    r"respectfully|respectfully yours|kind regards|best wishes|best regards|"
    r"looking forward|take care)[,.!]?$",
    re.IGNORECASE,
)


def sign_body(body: str, sender_name: str | None, marker: str) -> str:
    """Troca o fechamento do modelo pela assinatura padrão.

    "Dear Bob,\\n\\nSee you.\\n\\nWarm regards,\\n[Your Name]"
    -> "Dear Bob,\\n\\nSee you.\\n\\nBest,\\nBruce Wayne\\n[Sent by ALF.RED]"
    """
    previous_signature = re.compile(r"Best,\n.{2,}\n" + re.escape(marker))
    clean = previous_signature.sub("", body)
    clean = _PLACEHOLDER.sub("", clean).replace(marker, "").strip()

    lines = clean.split("\n")
    while lines and (not lines[-1].strip() or _CLOSING_LINE.match(lines[-1].strip())):
        lines.pop()

    name = (sender_name or "").strip() or DEFAULT_SENDER_NAME
    return "\n".join(lines).strip() + f"\n\nBest,\n{name}\n{marker}"


def encode_message(draft: EmailDraft, body: str) -> str:
    """RFC 822 em base64url sem padding (campo `raw` do Gmail)."""
    message = EmailMessage()
    message["To"] = draft.to
    message["Subject"] = draft.subject
    message.set_content(body)
    return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii").rstrip("=")


class GmailGateway(EmailGateway):
    """Cria e envia rascunhos na conta Gmail vinculada ao usuário."""

    def __init__(
        self,
        settings: Settings,
        http: HttpClient,
        users: UserDirectory,
        oauth: GoogleOAuthClient,
    ) -> None:
        self._base_url = settings.gmail_api_base_url
        self._marker = settings.email_signature_marker
        self._http = http
        self._users = users
        self._oauth = oauth

    async def create_draft(self, owner_id: str, draft: EmailDraft) -> str:
        user, tokens = await self._credentials(owner_id)
        raw = encode_message(draft, sign_body(draft.body, user.name, self._marker))
        response = await self._post(
            "drafts", {"message": {"raw": raw}}, tokens, user, operation="create_draft"
        )
        draft_id = response.get("id")
        if not draft_id:
            raise EmailDeliveryError("Gmail não retornou id do rascunho")
        return str(draft_id)

    async def send_draft(self, owner_id: str, draft: EmailDraft) -> None:
        user, tokens = await self._credentials(owner_id)
        raw = encode_message(draft, sign_body(draft.body, user.name, self._marker))
        await self._post("messages/send", {"raw": raw}, tokens, user, operation="send")

    async def _credentials(self, owner_id: str) -> tuple[LinkedUser, GoogleTokens]:
        """Tokens válidos do usuário, renovando e persistindo se expirados.

        Falhas do diretório (backend fora, documento inválido) viram
        EmailDeliveryError como qualquer outra falha de entrega.
        """
        try:
            user = await self._users.find_by_id(owner_id)
        except Exception as exc:
            self._log_directory_failure("find_by_id", exc)
            raise EmailDeliveryError("Diretório de usuários indisponível") from exc
        if user is None or user.tokens is None:
            raise EmailDeliveryError("Usuário sem credencial Google vinculada")

        tokens = user.tokens
        if tokens.is_expired():
            try:
                tokens = await self._oauth.refresh(tokens)
            except OAuthError as exc:
                raise EmailDeliveryError("Não foi possível renovar o token do Google") from exc
            user = user.model_copy(update={"tokens": tokens})
            try:
                await self._users.upsert(user)
            except Exception as exc:
                self._log_directory_failure("upsert", exc)
                raise EmailDeliveryError("Não foi possível persistir o token renovado") from exc
            logger.info("google_token_refreshed", extra={"channel": mask_channel_id(user.channel_id)})
        return user, tokens

    @staticmethod
    def _log_directory_failure(operation: str, exc: Exception) -> None:
        logger.warning(
            "user_directory_failed",
            extra={"operation": operation, "error_type": type(exc).__name__},
        )

    async def _post(
        self,
        path: str,
        payload: dict,
        tokens: GoogleTokens,
        user: LinkedUser,
        *,
        operation: str,
    ) -> dict:
        try:
            return await self._http.fetch_json(
                "POST",
                f"{self._base_url}/users/me/{path}",
                json=payload,
                headers={"Authorization": f"Bearer {tokens.access_token}"},
            )
        except HttpError as exc:
            logger.warning(
                "gmail_request_failed",
                extra={
                    "operation": operation,
                    "status_code": getattr(exc, "status_code", None),
                    "channel": mask_channel_id(user.channel_id),
                },
            )
            raise EmailDeliveryError(f"Gmail {operation} falhou") from exc
