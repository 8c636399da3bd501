"""Testes da geração de rascunho (parser e gerador)."""

from __future__ import annotations

import json

import pytest

from pennyworth.ai.draft_generator import LLMDraftGenerator, parse_draft
from pennyworth.ai.prompts import DRAFT_SYSTEM_PROMPT
from pennyworth.domain.errors import CompletionError, DraftGenerationError
from tests.helpers.fakes import ScriptedCompletion

DRAFT_JSON = json.dumps(
    {"to": "bob@wayne.com", "subject": "The Gala", "body": "Dear Bob,\n\nFriday at eight."}
)


class TestParseDraft:
    def test_plain_json(self) -> None:
        draft = parse_draft(DRAFT_JSON)
        assert draft.to == "bob@wayne.com"
        assert draft.subject == "The Gala"
        assert draft.body.startswith("Dear Bob")

    def test_code_fenced_json(self) -> None:
        assert parse_draft(f"```json\n{DRAFT_JSON}\n```").to == "bob@wayne.com"

    def test_legacy_entities_shape(self) -> None:
        content = json.dumps(
            {
                "intent": "send_email",
                "entities": {"recipient": "bob@wayne.com", "subject": "Hi", "body": "Hello."},
            }
        )
        draft = parse_draft(content)
        assert (draft.to, draft.subject, draft.body) == ("bob@wayne.com", "Hi", "Hello.")

    def test_fields_are_trimmed(self) -> None:
        content = json.dumps({"to": " bob@wayne.com ", "subject": " Hi ", "body": " Hello. "})
        draft = parse_draft(content)
        assert draft.to == "bob@wayne.com"
        assert draft.body == "Hello."

    def test_not_json(self) -> None:
        with pytest.raises(DraftGenerationError, match="JSON"):
            parse_draft("Certainly, sir. Here is your email:")

    def test_json_array(self) -> None:
        with pytest.raises(DraftGenerationError):
            parse_draft("[1, 2]")

    @pytest.mark.parametrize("missing", ["to", "subject", "body"])
    def test_missing_field_is_rejected(self, missing: str) -> None:
        """Nada é aplicado parcialmente: campo ausente invalida o rascunho."""
        fields = json.loads(DRAFT_JSON)
        del fields[missing]

        with pytest.raises(DraftGenerationError, match=missing):
            parse_draft(json.dumps(fields))

    def test_blank_field_is_rejected(self) -> None:
        fields = json.loads(DRAFT_JSON) | {"subject": "   "}
        with pytest.raises(DraftGenerationError, match="subject"):
            parse_draft(json.dumps(fields))


class TestLLMDraftGenerator:
    @pytest.mark.asyncio
    async def test_generates_with_draft_prompt_and_options(self) -> None:
        completion = ScriptedCompletion([DRAFT_JSON])
        generator = LLMDraftGenerator(completion, model="gpt-4.1-nano", temperature=0.7)

        draft = await generator.generate("To: bob@wayne.com\nPurpose: the gala")

        assert draft.to == "bob@wayne.com"
        call = completion.calls[0]
        assert call["system_prompt"] == DRAFT_SYSTEM_PROMPT
        assert call["history"] == []
        assert call["user_message"] == "To: bob@wayne.com\nPurpose: the gala"
        assert call["options"].model == "gpt-4.1-nano"
        assert call["options"].temperature == 0.7

    @pytest.mark.asyncio
    async def test_completion_failure_becomes_draft_error(self) -> None:
        generator = LLMDraftGenerator(ScriptedCompletion([CompletionError("timeout")]))
        with pytest.raises(DraftGenerationError):
            await generator.generate("anything")

    @pytest.mark.asyncio
    async def test_malformed_output_is_draft_error(self) -> None:
        generator = LLMDraftGenerator(ScriptedCompletion(['{"to": "bob@wayne.com"}']))
        with pytest.raises(DraftGenerationError):
            await generator.generate("anything")
