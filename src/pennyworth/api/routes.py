"""Rotas HTTP do webhook WhatsApp."""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response, status

from pennyworth.adapters.whatsapp.normalizer import extract_text_messages
from pennyworth.adapters.whatsapp.signature import verify_meta_signature
from pennyworth.api.dependencies import get_conversation_service, get_dedupe_store, get_settings
from pennyworth.application.conversation import ConversationService
from pennyworth.config.settings import Settings
from pennyworth.domain.models import InboundMessage
from pennyworth.infra.dedupe import DedupeError, DedupeStore
from pennyworth.observability.logging import get_logger
from pennyworth.observability.middleware import bound_correlation_id, get_correlation_id
from pennyworth.utils.ids import mask_channel_id

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Healthcheck simples."""
    return {"status": "ok", "service": settings.service_name, "version": settings.version}


@router.get("/webhooks/whatsapp")
def whatsapp_verify(
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Verificação de webhook exigida pela Meta."""
    if not settings.whatsapp_verify_token:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="missing_verify_token",
        )

    if hub_mode != "subscribe" or hub_verify_token != settings.whatsapp_verify_token:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="verification_failed")

    return Response(content=hub_challenge or "", media_type="text/plain")


async def process_inbound(
    service: ConversationService,
    message: InboundMessage,
    correlation_id: str,
) -> None:
    """Processa um turno fora do ciclo da requisição (BackgroundTasks)."""
    with bound_correlation_id(correlation_id):
        try:
            await service.handle_message(message)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "inbound_processing_failed",
                extra={
                    "channel": mask_channel_id(message.channel_id),
                    "error_type": type(exc).__name__,
                },
            )


@router.post("/webhooks/whatsapp")
async def whatsapp_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    dedupe_store: DedupeStore = Depends(get_dedupe_store),
    service: ConversationService = Depends(get_conversation_service),
) -> dict[str, Any]:
    """Recebe eventos do WhatsApp e agenda o processamento de cada texto."""
    raw_body = await request.body()
    signature_result = verify_meta_signature(
        raw_body, request.headers, settings.whatsapp_webhook_secret
    )
    if not signature_result.valid:
        logger.warning("invalid_signature", extra={"reason": signature_result.error})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_signature")

    try:
        payload = json.loads(raw_body or b"{}")
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_json") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_payload")

    correlation_id = get_correlation_id()
    accepted = 0
    duplicates = 0
    for message in extract_text_messages(payload):
        if message.message_id:
            try:
                is_new = await dedupe_store.mark_if_new(message.message_id)
            except DedupeError as exc:
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail={"error": "inbound_dedupe_unavailable", "correlation_id": correlation_id},
                ) from exc
            if not is_new:
                duplicates += 1
                continue
        background_tasks.add_task(process_inbound, service, message, correlation_id)
        accepted += 1

    if duplicates:
        logger.info("inbound_duplicate_skipped", extra={"count": duplicates})

    return {
        "ok": True,
        "received": accepted,
        "duplicates": duplicates,
        "correlation_id": correlation_id,
        "signature_skipped": signature_result.skipped,
    }
