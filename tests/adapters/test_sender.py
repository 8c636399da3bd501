"""Testes do envio de texto pela Graph API."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from pennyworth.adapters.whatsapp.sender import WhatsAppTextSender
from pennyworth.infra.http import HttpClient, HttpError
from tests.helpers.fakes import CHANNEL

ENDPOINT = "https://graph.facebook.com/v24.0/106540352242922/messages"


def _http() -> MagicMock:
    http = MagicMock(spec=HttpClient)
    http.post = AsyncMock()
    return http


class TestWhatsAppTextSender:
    @pytest.mark.asyncio
    async def test_posts_text_payload(self) -> None:
        http = _http()
        sender = WhatsAppTextSender(http, ENDPOINT, "wa-token")

        await sender.send_message(CHANNEL, "Good evening, Master Bruce.")

        http.post.assert_awaited_once()
        args, kwargs = http.post.call_args
        assert args[0] == ENDPOINT
        assert kwargs["headers"] == {"Authorization": "Bearer wa-token"}
        assert kwargs["json"]["to"] == "5511987654321"
        assert kwargs["json"]["type"] == "text"
        assert kwargs["json"]["text"]["body"] == "Good evening, Master Bruce."

    @pytest.mark.asyncio
    async def test_http_failure_is_swallowed(self) -> None:
        """Envio é best effort: erro de transporte não sobe para a conversa."""
        http = _http()
        http.post.side_effect = HttpError("HTTP 500", status_code=500, is_retryable=True)
        sender = WhatsAppTextSender(http, ENDPOINT, "wa-token")

        await sender.send_message(CHANNEL, "hello")

        http.post.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("endpoint", "token"), [(None, "wa-token"), (ENDPOINT, None)])
    async def test_not_configured_skips_request(self, endpoint, token) -> None:
        http = _http()
        await WhatsAppTextSender(http, endpoint, token).send_message(CHANNEL, "hello")
        http.post.assert_not_called()
