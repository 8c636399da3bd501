from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from pennyworth.api.app import create_app
from pennyworth.application.conversation import ConversationService
from pennyworth.config.settings import get_settings
from pennyworth.infra.session_store_memory import InMemorySessionStore
from pennyworth.infra.user_directory import InMemoryUserDirectory
from tests.helpers.fakes import (
    AUTH_URL,
    RecordingEmailGateway,
    RecordingSender,
    ScriptedCompletion,
    ScriptedDraftGenerator,
    make_user,
)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("WHATSAPP_VERIFY_TOKEN", "test-token")
    monkeypatch.delenv("WHATSAPP_WEBHOOK_SECRET", raising=False)
    get_settings.cache_clear()
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture()
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def users() -> InMemoryUserDirectory:
    return InMemoryUserDirectory([make_user()])


@pytest.fixture()
def completion() -> ScriptedCompletion:
    return ScriptedCompletion(["Indeed, sir. The manor is quiet tonight."])


@pytest.fixture()
def drafts() -> ScriptedDraftGenerator:
    return ScriptedDraftGenerator()


@pytest.fixture()
def email_gateway() -> RecordingEmailGateway:
    return RecordingEmailGateway()


@pytest.fixture()
def service(
    sessions: InMemorySessionStore,
    users: InMemoryUserDirectory,
    sender: RecordingSender,
    completion: ScriptedCompletion,
    drafts: ScriptedDraftGenerator,
    email_gateway: RecordingEmailGateway,
) -> ConversationService:
    return ConversationService(
        sessions=sessions,
        users=users,
        sender=sender,
        completion=completion,
        drafts=drafts,
        email=email_gateway,
        auth_url=AUTH_URL,
    )
