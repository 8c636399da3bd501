"""Classificadores de intenção por regex.

Predicados puros e independentes sobre uma mensagem normalizada. A máquina de
estados os avalia numa ordem fixa de prioridade:

1. about-me ("quem é você")
2. saudação isolada
3. endereço de e-mail inline
4. pedido de e-mail
5. pedido de lembrete
6. pedido de resposta a e-mail

Falsos negativos caem no chat livre; falsos positivos são tolerados adiante.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

_ABOUT_ME = re.compile(
    r"(who (are|r) you|tell me about yourself|what do you do|introduce yourself)",
    re.IGNORECASE,
)
_GREETING_ONLY = re.compile(r"^(hi|hello|hey|greetings|alfred)[!.]*$", re.IGNORECASE)
_INLINE_EMAIL = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_STRICT_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_EMAIL_REQUEST = re.compile(
    r"\b(send|write|compose|mail|email|message|tell|inform|reach out|contact)\b",
    re.IGNORECASE,
)
_REMINDER_REQUEST = re.compile(r"(remind|reminder|remember)", re.IGNORECASE)
_REPLY_REQUEST = re.compile(r"reply.*email", re.IGNORECASE)

# "his email id is", "my mail address is" ...
_ADDRESS_PREAMBLE = re.compile(
    r"\b(?:my|his|her|their|the)?\s*e-?mail\s+(?:id|address)\s+is\b", re.IGNORECASE
)
_FILLER_WORDS = frozenset(
    {
        "please", "kindly", "can", "could", "would", "will", "you", "u", "alfred",
        "send", "write", "compose", "mail", "email", "e-mail", "message", "tell",
        "inform", "reach", "out", "contact", "drop", "shoot", "an", "a", "quick",
        "note", "to", "at", "and", "about", "regarding", "re", "saying", "that",
        "him", "her", "them", "on", "for",
    }
)
_EDGE_PUNCTUATION = " \t\n,.;:!?-"

NO_PURPOSE_PLACEHOLDER = "No message specified."


@dataclass(frozen=True, slots=True)
class NormalizedMessage:
    """Mensagem bruta + versão aparada e minúscula."""

    raw: str
    text: str

    @classmethod
    def from_raw(cls, raw: str) -> NormalizedMessage:
        return cls(raw=raw, text=raw.strip().lower())

    def without(self, fragment: str) -> NormalizedMessage:
        """Retorna a mensagem sem o trecho informado (ex.: endereço inline)."""
        return NormalizedMessage.from_raw(self.raw.replace(fragment, " "))


def is_about_me(message: NormalizedMessage) -> bool:
    return bool(_ABOUT_ME.search(message.raw))


def is_greeting_only(message: NormalizedMessage) -> bool:
    return bool(_GREETING_ONLY.match(message.text))


def find_inline_email(message: NormalizedMessage) -> str | None:
    """Primeiro `local@dominio.tld` encontrado no texto bruto."""
    match = _INLINE_EMAIL.search(message.raw)
    return match.group(0) if match else None


def is_email_request(message: NormalizedMessage) -> bool:
    return bool(_EMAIL_REQUEST.search(message.text))


def is_reminder_request(message: NormalizedMessage) -> bool:
    return bool(_REMINDER_REQUEST.search(message.text))


def is_reply_request(message: NormalizedMessage) -> bool:
    return bool(_REPLY_REQUEST.search(message.text))


def is_strict_email_address(text: str) -> bool:
    """True se o texto inteiro é um endereço (validação do passo get_recipient)."""
    return bool(_STRICT_EMAIL.match(text.strip()))


class RequestIntent(StrEnum):
    """Pedidos que iniciam um fluxo a partir do menu."""

    EMAIL = "email"
    REMINDER = "reminder"
    REPLY = "reply"


@dataclass(frozen=True, slots=True)
class IntentRule:
    name: RequestIntent
    matches: Callable[[NormalizedMessage], bool]


# Ordem de prioridade: e-mail, lembrete, resposta.
REQUEST_RULES: tuple[IntentRule, ...] = (
    IntentRule(RequestIntent.EMAIL, is_email_request),
    IntentRule(RequestIntent.REMINDER, is_reminder_request),
    IntentRule(RequestIntent.REPLY, is_reply_request),
)


def classify_request(message: NormalizedMessage) -> RequestIntent | None:
    """Primeira regra que casa, ou None (cai no chat livre)."""
    for rule in REQUEST_RULES:
        if rule.matches(message):
            return rule.name
    return None


def extract_purpose(message: NormalizedMessage, address: str) -> str:
    """Deriva o propósito de um pedido compacto ("email bob@x.com about the gala").

    Remove o endereço, frases como "his email id is" e palavras de comando/ligação
    nas bordas do texto. Nunca retorna string vazia.
    """
    remainder = message.raw.replace(address, " ")
    remainder = _ADDRESS_PREAMBLE.sub(" ", remainder)
    words = remainder.split()

    while words and words[0].lower().strip(_EDGE_PUNCTUATION) in _FILLER_WORDS | {""}:
        words.pop(0)
    while words and words[-1].lower().strip(_EDGE_PUNCTUATION) in {"to", "at", ""}:
        words.pop()

    purpose = " ".join(words).strip(_EDGE_PUNCTUATION)
    return purpose or NO_PURPOSE_PLACEHOLDER
