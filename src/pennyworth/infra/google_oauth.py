"""OAuth 2.0 do Google via httpx (consentimento, troca de code, refresh).

Também guarda os vínculos pendentes: o `state` enviado ao Google aponta para
o canal WhatsApp que pediu o login e expira em `auth_link_ttl_seconds`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from pydantic import BaseModel, ValidationError

from pennyworth.domain.errors import OAuthError
from pennyworth.domain.models import GoogleTokens
from pennyworth.infra.http import HttpClient, HttpError
from pennyworth.observability.logging import get_logger
from pennyworth.utils.ids import new_link_id

if TYPE_CHECKING:
    from pennyworth.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


class GoogleProfile(BaseModel):
    email: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class PendingLink:
    link_id: str
    channel_id: str
    expires_at: float


class PendingLinkStore:
    """Vínculos aguardando o retorno do consentimento (em memória)."""

    def __init__(
        self, ttl_seconds: int = 900, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._links: dict[str, PendingLink] = {}

    def create(self, channel_id: str) -> PendingLink:
        self._purge_expired()
        link = PendingLink(
            link_id=new_link_id(),
            channel_id=channel_id,
            expires_at=self._clock() + self._ttl_seconds,
        )
        self._links[link.link_id] = link
        return link

    def consume(self, link_id: str) -> PendingLink | None:
        """Remove e retorna o vínculo; None se inexistente ou expirado."""
        link = self._links.pop(link_id, None)
        if link is None or link.expires_at <= self._clock():
            return None
        return link

    def _purge_expired(self) -> None:
        now = self._clock()
        for link_id in [k for k, v in self._links.items() if v.expires_at <= now]:
            del self._links[link_id]


class GoogleOAuthClient:
    """Fluxo authorization code com `access_type=offline`."""

    def __init__(self, settings: Settings, http: HttpClient) -> None:
        self._settings = settings
        self._http = http

    def consent_url(self, state: str) -> str:
        params = {
            "client_id": self._settings.google_client_id or "",
            "redirect_uri": self._settings.google_redirect_uri or "",
            "response_type": "code",
            "scope": self._settings.google_oauth_scopes,
            "access_type": "offline",
            "state": state,
            "prompt": "consent",  # Garante refresh_token em todo consentimento
        }
        return f"{self._settings.google_auth_base_url}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> GoogleTokens:
        payload = await self._token_request(
            {
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self._settings.google_redirect_uri or "",
            }
        )
        return _tokens_from_payload(payload)

    async def refresh(self, tokens: GoogleTokens) -> GoogleTokens:
        """Renova o access token; o refresh token antigo é mantido se não vier outro."""
        if not tokens.refresh_token:
            raise OAuthError("Token expirado e sem refresh_token")
        payload = await self._token_request(
            {"refresh_token": tokens.refresh_token, "grant_type": "refresh_token"}
        )
        renewed = _tokens_from_payload(payload)
        if renewed.refresh_token is None:
            renewed = renewed.model_copy(update={"refresh_token": tokens.refresh_token})
        return renewed

    async def fetch_profile(self, access_token: str) -> GoogleProfile:
        try:
            payload = await self._http.fetch_json(
                "GET",
                self._settings.google_userinfo_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            return GoogleProfile.model_validate(payload)
        except (HttpError, ValidationError) as exc:
            logger.warning("google_profile_failed", extra={"error_type": type(exc).__name__})
            raise OAuthError("Falha ao obter perfil do Google") from exc

    async def _token_request(self, form: dict[str, str]) -> dict:
        form = {
            **form,
            "client_id": self._settings.google_client_id or "",
            "client_secret": self._settings.google_client_secret or "",
        }
        try:
            payload = await self._http.fetch_json("POST", self._settings.google_token_url, data=form)
        except HttpError as exc:
            logger.warning(
                "google_token_request_failed",
                extra={"grant_type": form["grant_type"], "error_type": type(exc).__name__},
            )
            raise OAuthError("Falha na troca de tokens com o Google") from exc

        if not payload.get("access_token"):
            raise OAuthError("Resposta do Google sem access_token")
        return payload


def _tokens_from_payload(payload: dict) -> GoogleTokens:
    expires_in = payload.get("expires_in")
    expires_at = (
        datetime.now(tz=UTC) + timedelta(seconds=int(expires_in)) if expires_in else None
    )
    return GoogleTokens(
        access_token=payload["access_token"],
        refresh_token=payload.get("refresh_token"),
        expires_at=expires_at,
        scope=payload.get("scope"),
    )
