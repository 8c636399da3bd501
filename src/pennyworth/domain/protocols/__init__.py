"""Re-exports dos Protocolos de domínio para uso por Application."""

from __future__ import annotations

from pennyworth.domain.protocols.collaborators import (
    CompletionClient,
    CompletionOptions,
    DraftGenerator,
    EmailGateway,
    MessageSender,
    UserDirectory,
)
from pennyworth.domain.protocols.session_store import SessionStore, SessionStoreError

__all__ = [
    "SessionStore",
    "SessionStoreError",
    "MessageSender",
    "CompletionClient",
    "CompletionOptions",
    "DraftGenerator",
    "EmailGateway",
    "UserDirectory",
]
