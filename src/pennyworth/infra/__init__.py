"""Camada de infraestrutura: adapters para serviços externos.

Este módulo exporta as factories principais:

- Session: InMemorySessionStore, RedisSessionStore, create_session_store
- Usuários: InMemoryUserDirectory, RedisUserDirectory, create_user_directory
- Dedupe: InMemoryDedupeStore, RedisDedupeStore, create_dedupe_store
- HTTP: HttpClient, create_http_client
- Google: GoogleOAuthClient, PendingLinkStore, GmailGateway

Infraestrutura não decide regra de negócio; logs sem PII.
"""

from pennyworth.infra.dedupe import (
    DedupeError,
    DedupeStore,
    InMemoryDedupeStore,
    RedisDedupeStore,
    create_dedupe_store,
)
from pennyworth.infra.gmail import GmailGateway
from pennyworth.infra.google_oauth import GoogleOAuthClient, PendingLinkStore
from pennyworth.infra.http import (
    HttpClient,
    HttpClientConfig,
    HttpError,
    create_http_client,
)
from pennyworth.infra.keyed_lock import KeyedLock
from pennyworth.infra.session_store import create_session_store
from pennyworth.infra.session_store_memory import InMemorySessionStore
from pennyworth.infra.session_store_redis import RedisSessionStore
from pennyworth.infra.user_directory import (
    InMemoryUserDirectory,
    RedisUserDirectory,
    create_user_directory,
)

__all__ = [
    # Session
    "InMemorySessionStore",
    "RedisSessionStore",
    "KeyedLock",
    "create_session_store",
    # Usuários
    "InMemoryUserDirectory",
    "RedisUserDirectory",
    "create_user_directory",
    # Dedupe
    "DedupeStore",
    "DedupeError",
    "InMemoryDedupeStore",
    "RedisDedupeStore",
    "create_dedupe_store",
    # HTTP
    "HttpClient",
    "HttpClientConfig",
    "HttpError",
    "create_http_client",
    # Google
    "GoogleOAuthClient",
    "PendingLinkStore",
    "GmailGateway",
]
