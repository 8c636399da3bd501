"""Comandos emitidos pela máquina de estados.

A máquina não executa nada: devolve efeitos em ordem e o serviço de conversa
os executa. Efeitos de colaborador produzem um evento de desfecho que volta
para a máquina.
"""

from __future__ import annotations

from dataclasses import dataclass

from pennyworth.domain.models import ChatTurn, EmailDraft


@dataclass(frozen=True, slots=True)
class Reply:
    """Mensagem ao usuário; `chunked` aplica o fatiamento por sentenças."""

    text: str
    chunked: bool = False


@dataclass(frozen=True, slots=True)
class GenerateDraft:
    prompt: str


@dataclass(frozen=True, slots=True)
class CompleteChat:
    user_text: str
    context: tuple[ChatTurn, ...]


@dataclass(frozen=True, slots=True)
class DeliverEmail:
    draft: EmailDraft


@dataclass(frozen=True, slots=True)
class DeleteSession:
    pass


Effect = Reply | GenerateDraft | CompleteChat | DeliverEmail | DeleteSession
