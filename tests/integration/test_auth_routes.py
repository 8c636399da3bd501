"""Testes de integração das rotas de login Google."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

from pennyworth.application import replies
from pennyworth.application.account_linking import AccountLinkingService
from pennyworth.domain.errors import OAuthError
from pennyworth.domain.models import GoogleTokens
from pennyworth.infra.google_oauth import GoogleOAuthClient, GoogleProfile, PendingLinkStore
from pennyworth.infra.user_directory import InMemoryUserDirectory
from tests.helpers.fakes import CHANNEL, RecordingSender


def _linking(oauth_error: Exception | None = None) -> tuple[AccountLinkingService, PendingLinkStore, RecordingSender]:
    oauth = MagicMock(spec=GoogleOAuthClient)
    oauth.consent_url.side_effect = lambda state: f"https://accounts.example.com/o?state={state}"
    oauth.exchange_code = AsyncMock(
        return_value=GoogleTokens(access_token="at", refresh_token="rt"),
        side_effect=oauth_error,
    )
    oauth.fetch_profile = AsyncMock(return_value=GoogleProfile(email="bruce@wayne.com"))
    pending = PendingLinkStore()
    sender = RecordingSender()
    return AccountLinkingService(oauth, pending, InMemoryUserDirectory(), sender), pending, sender


class TestStartLogin:
    def test_redirects_to_google_consent(self, client: TestClient) -> None:
        response = client.get("/auth", params={"whatsapp": CHANNEL}, follow_redirects=False)

        assert response.status_code == 307
        location = urlparse(response.headers["location"])
        assert location.netloc == "accounts.google.com"
        assert parse_qs(location.query)["state"][0]

    def test_invalid_number_page(self, client: TestClient) -> None:
        response = client.get("/auth", params={"whatsapp": "11987654321"})

        assert response.status_code == 400
        assert "E.164" in response.text

    def test_number_is_required(self, client: TestClient) -> None:
        assert client.get("/auth").status_code == 422


class TestLoginCallback:
    def test_success_page_and_welcome(self, client: TestClient) -> None:
        linking, pending, sender = _linking()
        client.app.state.account_linking = linking
        state = pending.create(CHANNEL).link_id

        response = client.get("/auth/callback", params={"code": "c", "state": state})

        assert response.status_code == 200
        assert "Auth Complete" in response.text
        assert sender.sent == [(CHANNEL, replies.WELCOME_MESSAGE)]

    def test_unknown_state_page(self, client: TestClient) -> None:
        response = client.get("/auth/callback", params={"code": "c", "state": "never-issued"})

        assert response.status_code == 400
        assert "expired" in response.text

    def test_oauth_failure_page(self, client: TestClient) -> None:
        linking, pending, sender = _linking(OAuthError("invalid_grant"))
        client.app.state.account_linking = linking

        response = client.get(
            "/auth/callback", params={"code": "c", "state": pending.create(CHANNEL).link_id}
        )

        assert response.status_code == 502
        assert sender.sent == []
