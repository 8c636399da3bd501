"""Dependências injetadas nas rotas."""

from __future__ import annotations

from fastapi import Request

from pennyworth.application.account_linking import AccountLinkingService
from pennyworth.application.conversation import ConversationService
from pennyworth.config.settings import Settings
from pennyworth.infra.dedupe import DedupeStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_dedupe_store(request: Request) -> DedupeStore:
    return request.app.state.dedupe_store


def get_conversation_service(request: Request) -> ConversationService:
    return request.app.state.conversation_service


def get_account_linking(request: Request) -> AccountLinkingService:
    return request.app.state.account_linking
