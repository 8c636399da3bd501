"""Testes do cliente de chat completions (AsyncOpenAI mockado)."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APITimeoutError

from pennyworth.ai.openai_client import (
    DisabledCompletionClient,
    OpenAIChatClient,
    create_completion_client,
)
from pennyworth.config.settings import Settings
from pennyworth.domain.errors import CompletionError
from pennyworth.domain.models import ChatTurn
from pennyworth.domain.protocols import CompletionOptions


def _response(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _openai(response=None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=error)
    return client


class TestOpenAIChatClient:
    @pytest.mark.asyncio
    async def test_builds_messages_with_history(self) -> None:
        openai = _openai(_response("  Indeed, sir.  "))
        client = OpenAIChatClient(openai, model="gpt-4o", temperature=0.85, max_tokens=300)
        history = [
            ChatTurn(role="user", content="hello"),
            ChatTurn(role="assistant", content="Good evening."),
        ]

        reply = await client.complete("persona", history, "how are you?")

        assert reply == "Indeed, sir."
        kwargs = openai.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.85
        assert kwargs["max_tokens"] == 300
        assert kwargs["messages"] == [
            {"role": "system", "content": "persona"},
            {"role": "user", "content": "hello"},
            {"role": "assistant", "content": "Good evening."},
            {"role": "user", "content": "how are you?"},
        ]

    @pytest.mark.asyncio
    async def test_options_override_defaults(self) -> None:
        openai = _openai(_response("{}"))
        client = OpenAIChatClient(openai, model="gpt-4o", temperature=0.85)

        await client.complete("p", [], "u", CompletionOptions(model="gpt-4.1-nano", temperature=0.0))

        kwargs = openai.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4.1-nano"
        assert kwargs["temperature"] == 0.0
        assert "max_tokens" not in kwargs

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, "", "   "])
    async def test_empty_content_raises(self, content: str | None) -> None:
        client = OpenAIChatClient(_openai(_response(content)))
        with pytest.raises(CompletionError):
            await client.complete("p", [], "u")

    @pytest.mark.asyncio
    async def test_no_choices_raises(self) -> None:
        client = OpenAIChatClient(_openai(SimpleNamespace(choices=[])))
        with pytest.raises(CompletionError):
            await client.complete("p", [], "u")

    @pytest.mark.asyncio
    async def test_api_timeout_becomes_completion_error(self) -> None:
        error = APITimeoutError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
        client = OpenAIChatClient(_openai(error=error))

        with pytest.raises(CompletionError) as exc_info:
            await client.complete("p", [], "u")
        assert exc_info.value.__cause__ is error


class TestDisabledCompletionClient:
    @pytest.mark.asyncio
    async def test_always_fails(self) -> None:
        with pytest.raises(CompletionError):
            await DisabledCompletionClient().complete("p", [], "u")


class TestCreateCompletionClient:
    def test_disabled_by_default(self) -> None:
        client = create_completion_client(Settings(openai_enabled=False))
        assert isinstance(client, DisabledCompletionClient)

    def test_enabled_builds_openai_client(self) -> None:
        client = create_completion_client(Settings(openai_enabled=True, openai_api_key="sk-test"))
        assert isinstance(client, OpenAIChatClient)
