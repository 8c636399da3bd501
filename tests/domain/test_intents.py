"""Testes para domain/intents.py (predicados e ordem de prioridade)."""

from __future__ import annotations

import pytest

from pennyworth.domain.intents import (
    NO_PURPOSE_PLACEHOLDER,
    REQUEST_RULES,
    NormalizedMessage,
    RequestIntent,
    classify_request,
    extract_purpose,
    find_inline_email,
    is_about_me,
    is_email_request,
    is_greeting_only,
    is_reminder_request,
    is_reply_request,
    is_strict_email_address,
)


def _msg(text: str) -> NormalizedMessage:
    return NormalizedMessage.from_raw(text)


class TestNormalizedMessage:
    def test_trims_and_lowercases(self) -> None:
        """`text` é a versão aparada e minúscula; `raw` fica intacto."""
        message = _msg("  Hello THERE  ")
        assert message.raw == "  Hello THERE  "
        assert message.text == "hello there"

    def test_without_removes_fragment(self) -> None:
        message = _msg("email bob@wayne.com now")
        assert message.without("bob@wayne.com").text == "email   now"


class TestAboutMe:
    @pytest.mark.parametrize(
        "text",
        ["Who are you?", "who r you", "Tell me about yourself", "so what do you do", "Introduce yourself"],
    )
    def test_matches(self, text: str) -> None:
        """Perguntas sobre o assistente devem casar."""
        assert is_about_me(_msg(text)) is True

    def test_no_match(self) -> None:
        assert is_about_me(_msg("who is Bob?")) is False


class TestGreetingOnly:
    @pytest.mark.parametrize("text", ["hi", "Hello!", "  hey  ", "greetings...", "ALFRED", "hi!!"])
    def test_matches_whole_message(self, text: str) -> None:
        """Saudação isolada (com pontuação opcional) deve casar."""
        assert is_greeting_only(_msg(text)) is True

    @pytest.mark.parametrize("text", ["hi there", "hello, send an email", "ship", "hi?"])
    def test_rejects_extra_content(self, text: str) -> None:
        """Qualquer conteúdo além da saudação não é saudação isolada."""
        assert is_greeting_only(_msg(text)) is False


class TestInlineEmail:
    def test_finds_first_address(self) -> None:
        message = _msg("mail Bob.Smith@Wayne.com and cc alfred@manor.uk")
        assert find_inline_email(message) == "Bob.Smith@Wayne.com"

    def test_none_without_address(self) -> None:
        assert find_inline_email(_msg("email bob about the gala")) is None


class TestRequestKeywords:
    @pytest.mark.parametrize(
        "text",
        ["Send an email", "write to him", "please compose", "mail bob", "reach out to Lucius", "contact HR"],
    )
    def test_email_request(self, text: str) -> None:
        assert is_email_request(_msg(text)) is True

    def test_email_request_needs_whole_word(self) -> None:
        """Palavras que só contêm o verbo não contam ("sender", "emailing")."""
        assert is_email_request(_msg("the sender was emailing")) is False

    @pytest.mark.parametrize("text", ["remind me", "set a reminder", "remember the milk"])
    def test_reminder_request(self, text: str) -> None:
        assert is_reminder_request(_msg(text)) is True

    def test_reply_request_needs_reply_then_email(self) -> None:
        assert is_reply_request(_msg("Reply to that email")) is True
        assert is_reply_request(_msg("email reply")) is False


class TestStrictEmailAddress:
    @pytest.mark.parametrize("text", ["bob@wayne.com", "  a.b+c@x.co.uk "])
    def test_valid(self, text: str) -> None:
        assert is_strict_email_address(text) is True

    @pytest.mark.parametrize("text", ["not-an-email", "bob@wayne", "bob @wayne.com", "to bob@wayne.com"])
    def test_invalid(self, text: str) -> None:
        assert is_strict_email_address(text) is False


class TestClassifyRequest:
    def test_rule_order(self) -> None:
        """Ordem fixa: e-mail, lembrete, resposta."""
        assert [rule.name for rule in REQUEST_RULES] == [
            RequestIntent.EMAIL,
            RequestIntent.REMINDER,
            RequestIntent.REPLY,
        ]

    def test_email_wins_over_reminder(self) -> None:
        """Mensagem com os dois pedidos resolve para e-mail."""
        assert classify_request(_msg("send a reminder")) is RequestIntent.EMAIL

    def test_reminder(self) -> None:
        assert classify_request(_msg("remind me at 5")) is RequestIntent.REMINDER

    def test_reply(self) -> None:
        """Pedido de resposta sem palavra de envio isolada."""
        assert classify_request(_msg("reply to the last emails please")) is RequestIntent.REPLY

    def test_reply_with_email_keyword_routes_to_email(self) -> None:
        """'email' como palavra isolada dispara a regra de e-mail antes."""
        assert classify_request(_msg("I need to reply to an email")) is RequestIntent.EMAIL

    def test_free_chat(self) -> None:
        assert classify_request(_msg("how is the weather in Gotham?")) is None


class TestExtractPurpose:
    def test_strips_address_and_command_words(self) -> None:
        """Pedido compacto: sobra só o assunto."""
        message = _msg("email bob@wayne.com about the gala")
        assert extract_purpose(message, "bob@wayne.com") == "the gala"

    def test_strips_address_preamble(self) -> None:
        message = _msg("Send a note to Lucius, his email id is lucius@wayne.com")
        assert extract_purpose(message, "lucius@wayne.com") == "Lucius"

    def test_keeps_message_body(self) -> None:
        message = _msg("Please mail alfred@manor.uk saying dinner is at eight.")
        assert extract_purpose(message, "alfred@manor.uk") == "dinner is at eight"

    def test_placeholder_when_nothing_left(self) -> None:
        """Nunca retorna string vazia."""
        message = _msg("email bob@wayne.com")
        assert extract_purpose(message, "bob@wayne.com") == NO_PURPOSE_PLACEHOLDER
