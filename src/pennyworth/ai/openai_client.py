"""Cliente de chat completions (OpenAI) usado pelo chat livre e pelos rascunhos."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from openai import APIError, APITimeoutError, AsyncOpenAI

from pennyworth.domain.errors import CompletionError
from pennyworth.domain.models import ChatTurn
from pennyworth.domain.protocols import CompletionClient, CompletionOptions
from pennyworth.observability.logging import get_logger

if TYPE_CHECKING:
    from pennyworth.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


class OpenAIChatClient(CompletionClient):
    """`complete()` sobre `AsyncOpenAI.chat.completions.create`."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4o",
        temperature: float = 0.85,
        max_tokens: int | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[ChatTurn],
        user_message: str,
        options: CompletionOptions | None = None,
    ) -> str:
        options = options or CompletionOptions()
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": turn.role, "content": turn.content} for turn in history)
        messages.append({"role": "user", "content": user_message})

        model = options.model or self._model
        max_tokens = options.max_tokens or self._max_tokens
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=options.temperature if options.temperature is not None else self._temperature,
                **({"max_tokens": max_tokens} if max_tokens else {}),
            )
        except (APIError, APITimeoutError) as e:
            logger.warning(
                "chat_completion_error",
                extra={"model": model, "error_type": type(e).__name__},
            )
            raise CompletionError(f"Falha na chamada ao modelo: {type(e).__name__}") from e

        content = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not content:
            logger.warning("chat_completion_empty", extra={"model": model})
            raise CompletionError("Modelo retornou conteúdo vazio")
        return content


class DisabledCompletionClient(CompletionClient):
    """Usado com OPENAI_ENABLED=false: toda chamada falha como colaborador."""

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[ChatTurn],
        user_message: str,
        options: CompletionOptions | None = None,
    ) -> str:
        raise CompletionError("LLM desabilitado (OPENAI_ENABLED=false)")


def create_completion_client(settings: Settings) -> CompletionClient:
    """Cliente de chat conforme feature flag (fail-safe: desabilitado)."""
    if not settings.openai_enabled:
        logger.info("OpenAI desabilitado; chat e rascunhos responderão com fallback")
        return DisabledCompletionClient()

    client = AsyncOpenAI(
        api_key=settings.openai_api_key,
        timeout=settings.openai_timeout_seconds,
        max_retries=settings.openai_max_retries,
    )
    return OpenAIChatClient(
        client,
        model=settings.openai_chat_model,
        temperature=settings.openai_chat_temperature,
        max_tokens=settings.openai_chat_max_tokens,
    )
