"""Erros de colaboradores externos.

Cada falha de colaborador vira um evento distinto na máquina de estados;
a causa raiz é logada, nunca enviada ao canal.
"""

from __future__ import annotations


class CollaboratorError(Exception):
    """Base para falhas de colaboradores (LLM, e-mail, OAuth)."""


class CompletionError(CollaboratorError):
    """Falha ou resposta vazia na chamada de chat completion."""


class DraftGenerationError(CollaboratorError):
    """Falha ao gerar rascunho ou resposta do modelo malformada."""


class EmailDeliveryError(CollaboratorError):
    """Falha ao criar ou enviar o rascunho na conta de e-mail."""


class OAuthError(CollaboratorError):
    """Falha na troca/renovação de tokens OAuth."""
