"""Geração de rascunho de e-mail: prompt livre -> EmailDraft.

O modelo deve devolver JSON `{to, subject, body}`. Também é aceito o formato
antigo `{"entities": {"recipient", "subject", "body"}}` e blocos ```json.
Qualquer outra coisa vira DraftGenerationError; nada é aplicado parcialmente.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from pennyworth.ai.prompts import DRAFT_SYSTEM_PROMPT
from pennyworth.domain.errors import CompletionError, DraftGenerationError
from pennyworth.domain.models import EmailDraft
from pennyworth.domain.protocols import CompletionClient, CompletionOptions, DraftGenerator
from pennyworth.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def _strip_code_fence(content: str) -> str:
    content = content.strip()
    match = _CODE_FENCE.match(content)
    return match.group(1) if match else content


def _draft_fields(parsed: Any) -> dict[str, Any]:
    if not isinstance(parsed, dict):
        raise DraftGenerationError("Resposta do modelo não é um objeto JSON")

    entities = parsed.get("entities")
    if isinstance(entities, dict) and all(
        entities.get(key) for key in ("recipient", "subject", "body")
    ):
        return {
            "to": entities["recipient"],
            "subject": entities["subject"],
            "body": entities["body"],
        }
    return {key: parsed.get(key) for key in ("to", "subject", "body")}


def parse_draft(content: str) -> EmailDraft:
    """Converte a saída do modelo em EmailDraft.

    Raises:
        DraftGenerationError: JSON inválido ou campo obrigatório ausente/vazio
    """
    try:
        parsed = json.loads(_strip_code_fence(content))
    except json.JSONDecodeError as e:
        raise DraftGenerationError("Resposta do modelo não é JSON válido") from e

    fields = _draft_fields(parsed)
    try:
        return EmailDraft.model_validate(
            {k: v.strip() if isinstance(v, str) else v for k, v in fields.items()}
        )
    except ValidationError as e:
        missing = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise DraftGenerationError(f"Rascunho incompleto: {', '.join(missing)}") from e


class LLMDraftGenerator(DraftGenerator):
    def __init__(
        self,
        completion: CompletionClient,
        model: str = "gpt-4.1-nano",
        temperature: float = 0.7,
    ) -> None:
        self._completion = completion
        self._options = CompletionOptions(model=model, temperature=temperature)

    async def generate(self, prompt: str) -> EmailDraft:
        try:
            content = await self._completion.complete(DRAFT_SYSTEM_PROMPT, [], prompt, self._options)
        except CompletionError as e:
            raise DraftGenerationError("Falha ao gerar rascunho") from e

        try:
            draft = parse_draft(content)
        except DraftGenerationError as e:
            logger.warning("draft_parse_failed", extra={"reason": str(e)})
            raise

        logger.debug(
            "draft_generated",
            extra={"subject_length": len(draft.subject), "body_length": len(draft.body)},
        )
        return draft
