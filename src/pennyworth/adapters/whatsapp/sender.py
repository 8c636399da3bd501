"""Envio de mensagens de texto pela Graph API (WhatsApp Cloud)."""

from __future__ import annotations

import logging

from pennyworth.domain.protocols import MessageSender
from pennyworth.infra.http import HttpClient, HttpError
from pennyworth.observability.logging import get_logger
from pennyworth.utils.ids import mask_channel_id

logger: logging.Logger = get_logger(__name__)


class WhatsAppTextSender(MessageSender):
    """Best effort: falhas de envio são logadas e nunca propagadas."""

    def __init__(
        self,
        http: HttpClient,
        messages_endpoint: str | None,
        access_token: str | None,
    ) -> None:
        self._http = http
        self._endpoint = messages_endpoint
        self._access_token = access_token

    async def send_message(self, recipient: str, text: str) -> None:
        if not self._endpoint or not self._access_token:
            logger.warning(
                "whatsapp_sender_not_configured",
                extra={"channel": mask_channel_id(recipient)},
            )
            return

        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": recipient.lstrip("+"),
            "type": "text",
            "text": {"preview_url": True, "body": text},
        }
        try:
            await self._http.post(
                self._endpoint,
                json=payload,
                headers={"Authorization": f"Bearer {self._access_token}"},
            )
        except HttpError as exc:
            logger.warning(
                "whatsapp_send_failed",
                extra={
                    "channel": mask_channel_id(recipient),
                    "status_code": exc.status_code,
                    "error_type": type(exc).__name__,
                },
            )
            return

        logger.debug("whatsapp_message_sent", extra={"channel": mask_channel_id(recipient)})
