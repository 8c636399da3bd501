"""Extração das mensagens de texto do payload do webhook Meta.

Só mensagens `type=text` viram turnos de conversa; mídia, reações e status
de entrega são ignorados.
"""

from __future__ import annotations

from typing import Any

from pennyworth.domain.models import InboundMessage
from pennyworth.observability.logging import get_logger

logger = get_logger(__name__)


def to_channel_id(wa_id: str) -> str:
    """Número do WhatsApp ("5511987654321") -> canal E.164 ("+5511987654321")."""
    wa_id = wa_id.strip()
    return wa_id if wa_id.startswith("+") else f"+{wa_id}"


def extract_text_messages(payload: dict[str, Any]) -> list[InboundMessage]:
    """Percorre entry[].changes[].value.messages[] e devolve os textos."""
    messages: list[InboundMessage] = []
    skipped = 0

    for entry in payload.get("entry", []) or []:
        for change in entry.get("changes", []) or []:
            value = change.get("value", {}) or {}
            for msg in value.get("messages", []) or []:
                sender = msg.get("from")
                text_block = msg.get("text") or {}
                body = text_block.get("body") if isinstance(text_block, dict) else None
                if msg.get("type") != "text" or not sender or not body:
                    skipped += 1
                    continue
                messages.append(
                    InboundMessage(
                        channel_id=to_channel_id(sender),
                        text=body,
                        message_id=msg.get("id"),
                    )
                )

    if skipped:
        logger.debug("non_text_messages_skipped", extra={"count": skipped})
    return messages
