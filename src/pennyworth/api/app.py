"""Fábrica da aplicação FastAPI."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from pennyworth.adapters.whatsapp.sender import WhatsAppTextSender
from pennyworth.ai.draft_generator import LLMDraftGenerator
from pennyworth.ai.openai_client import create_completion_client
from pennyworth.api.routes import router
from pennyworth.api.routes_auth import router as auth_router
from pennyworth.application.account_linking import AccountLinkingService
from pennyworth.application.conversation import ConversationService
from pennyworth.application.state_machine import SessionStateMachine
from pennyworth.config.settings import Settings, get_settings
from pennyworth.domain.protocols import CompletionOptions
from pennyworth.infra.dedupe import create_dedupe_store
from pennyworth.infra.gmail import GmailGateway
from pennyworth.infra.google_oauth import GoogleOAuthClient, PendingLinkStore
from pennyworth.infra.http import create_http_client
from pennyworth.infra.redis_pool import close_redis_clients
from pennyworth.infra.session_store import create_session_store
from pennyworth.infra.user_directory import create_user_directory
from pennyworth.observability.logging import configure_logging, get_logger
from pennyworth.observability.middleware import CorrelationIdMiddleware

logger = get_logger(__name__)


def _messages_endpoint(settings: Settings) -> str | None:
    if not settings.whatsapp_phone_number_id:
        return None
    return settings.get_messages_endpoint()


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await app.state.http_client.close()
    await close_redis_clients()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Cria a aplicação FastAPI com todos os colaboradores em `app.state`."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.service_name, settings.environment)

    validation_errors = settings.validate_all()
    if validation_errors:
        error_msg = "; ".join(validation_errors)
        raise ValueError(f"Configuração inválida: {error_msg}")

    app = FastAPI(title=settings.service_name, version=settings.version, lifespan=_lifespan)
    app.add_middleware(CorrelationIdMiddleware)
    app.include_router(router)
    app.include_router(auth_router)

    http_client = create_http_client(settings)
    users = create_user_directory(settings)
    sender = WhatsAppTextSender(
        http_client, _messages_endpoint(settings), settings.whatsapp_access_token
    )
    oauth = GoogleOAuthClient(settings, http_client)
    completion = create_completion_client(settings)

    app.state.settings = settings
    app.state.http_client = http_client
    app.state.user_directory = users
    app.state.session_store = create_session_store(settings)
    app.state.dedupe_store = create_dedupe_store(settings)
    app.state.conversation_service = ConversationService(
        sessions=app.state.session_store,
        users=users,
        sender=sender,
        completion=completion,
        drafts=LLMDraftGenerator(
            completion,
            model=settings.openai_draft_model,
            temperature=settings.openai_draft_temperature,
        ),
        email=GmailGateway(settings, http_client, users, oauth),
        auth_url=settings.auth_url,
        machine=SessionStateMachine(
            honorific=settings.honorific, history_window=settings.chat_history_window
        ),
        honorific=settings.honorific,
        chat_options=CompletionOptions(
            model=settings.openai_chat_model,
            temperature=settings.openai_chat_temperature,
            max_tokens=settings.openai_chat_max_tokens,
        ),
        chunk_limit=settings.reply_chunk_max_chars,
    )
    app.state.account_linking = AccountLinkingService(
        oauth, PendingLinkStore(settings.auth_link_ttl_seconds), users, sender
    )

    logger.info("Aplicação criada", extra={"environment": settings.environment})
    return app


app = create_app()
