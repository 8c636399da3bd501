"""Configurações da aplicação via variáveis de ambiente.

Todas as configurações são carregadas de env vars (ou arquivo .env em dev).
Nunca hardcode secrets ou valores sensíveis.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from pennyworth.observability.logging import get_logger

# -----------------------------------------------------------------------------
# Constantes de APIs externas
# -----------------------------------------------------------------------------
GRAPH_API_VERSION: str = "v24.0"
GRAPH_API_BASE_URL: str = "https://graph.facebook.com"
GOOGLE_AUTH_BASE_URL: str = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL: str = "https://www.googleapis.com/oauth2/v3/userinfo"
GMAIL_API_BASE_URL: str = "https://gmail.googleapis.com/gmail/v1"

_VALID_STORE_BACKENDS = {"memory", "redis"}


class Settings(BaseSettings):
    """Configurações lidas do ambiente."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    # Aplicação
    service_name: str = "pennyworth"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Persona
    honorific: str = "Master"
    auth_url: str = "http://localhost:8000/auth"  # Link enviado a canais sem conta vinculada

    # WhatsApp / Meta API
    whatsapp_verify_token: str | None = None  # Para verificação de webhook
    whatsapp_webhook_secret: str | None = None  # HMAC SHA-256 secret
    whatsapp_access_token: str | None = None  # Bearer token
    whatsapp_phone_number_id: str | None = None  # ID do número registrado
    whatsapp_api_version: str = GRAPH_API_VERSION
    whatsapp_api_base_url: str = GRAPH_API_BASE_URL

    @property
    def whatsapp_api_endpoint(self) -> str:
        """Retorna a URL base completa da API WhatsApp (versão + base)."""
        return f"{self.whatsapp_api_base_url}/{self.whatsapp_api_version}"

    # Chamadas HTTP externas (WhatsApp, Google)
    http_max_retries: int = 3
    http_retry_backoff_seconds: int = 2
    http_request_timeout_seconds: int = 30
    http_circuit_breaker_enabled: bool = False
    http_circuit_breaker_fail_max: int = 5
    http_circuit_breaker_reset_timeout_seconds: float = 60.0
    http_circuit_breaker_half_open_max_calls: int = 1

    # OpenAI
    openai_api_key: str | None = None
    openai_enabled: bool = False  # Feature flag: habilita LLM (fail-safe: false)
    openai_timeout_seconds: float = 20.0
    openai_max_retries: int = 2
    openai_chat_model: str = "gpt-4o"
    openai_chat_temperature: float = 0.85
    openai_chat_max_tokens: int = 300
    openai_draft_model: str = "gpt-4.1-nano"
    openai_draft_temperature: float = 0.7

    # Google OAuth / Gmail
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_redirect_uri: str | None = None
    google_auth_base_url: str = GOOGLE_AUTH_BASE_URL
    google_token_url: str = GOOGLE_TOKEN_URL
    google_userinfo_url: str = GOOGLE_USERINFO_URL
    gmail_api_base_url: str = GMAIL_API_BASE_URL
    google_oauth_scopes: str = (
        "https://www.googleapis.com/auth/gmail.send "
        "https://www.googleapis.com/auth/gmail.compose openid email profile"
    )
    auth_link_ttl_seconds: int = 900  # 15 minutos para concluir o consentimento
    email_signature_marker: str = "[Sent by ALF.RED]"

    # Sessão
    session_store_backend: str = "memory"  # memory | redis
    session_ttl_seconds: int = 0  # 0 = sem expiração (sessões ficam até send/cancel)
    chat_history_window: int = 5  # Turnos enviados ao modelo no chat livre
    reply_chunk_max_chars: int = 300

    # Diretório de usuários
    user_directory_backend: str = "memory"  # memory | redis
    redis_url: str | None = None

    # Dedupe inbound (reentregas do webhook Meta)
    dedupe_backend: str = "memory"  # memory | redis
    inbound_dedupe_ttl_seconds: int = 86400

    def validate_session_store_config(self) -> list[str]:
        """Valida backend de session store.

        Retorna lista de erros (vazia = tudo OK).
        """
        errors: list[str] = []
        backend = self.session_store_backend.lower()
        if backend not in _VALID_STORE_BACKENDS:
            errors.append(
                f"SESSION_STORE_BACKEND '{backend}' inválido. "
                f"Valores válidos: {sorted(_VALID_STORE_BACKENDS)}"
            )
        if backend == "redis" and not self.redis_url:
            errors.append("SESSION_STORE_BACKEND=redis requer REDIS_URL configurado")
        if self.session_ttl_seconds < 0:
            errors.append("SESSION_TTL_SECONDS deve ser >= 0")
        if self.chat_history_window < 1:
            errors.append("CHAT_HISTORY_WINDOW deve ser >= 1")
        if self.reply_chunk_max_chars < 20:
            errors.append("REPLY_CHUNK_MAX_CHARS deve ser >= 20")
        return errors

    def validate_user_directory_config(self) -> list[str]:
        """Valida backend do diretório de usuários."""
        errors: list[str] = []
        backend = self.user_directory_backend.lower()
        if backend not in _VALID_STORE_BACKENDS:
            errors.append(
                f"USER_DIRECTORY_BACKEND '{backend}' inválido. "
                f"Valores válidos: {sorted(_VALID_STORE_BACKENDS)}"
            )
        if backend == "redis" and not self.redis_url:
            errors.append("USER_DIRECTORY_BACKEND=redis requer REDIS_URL configurado")
        return errors

    def validate_dedupe_config(self) -> list[str]:
        """Valida backend de dedupe de mensagens inbound."""
        errors: list[str] = []
        backend = self.dedupe_backend.lower()
        if backend not in _VALID_STORE_BACKENDS:
            errors.append(
                f"DEDUPE_BACKEND '{backend}' inválido. "
                f"Valores válidos: {sorted(_VALID_STORE_BACKENDS)}"
            )
        if backend == "redis" and not self.redis_url:
            errors.append("DEDUPE_BACKEND=redis requer REDIS_URL configurado")
        if self.inbound_dedupe_ttl_seconds < 1:
            errors.append("INBOUND_DEDUPE_TTL_SECONDS deve ser >= 1")
        return errors

    def validate_openai_config(self) -> list[str]:
        """Se openai_enabled=True, exige OPENAI_API_KEY."""
        errors: list[str] = []
        if self.openai_enabled and not self.openai_api_key:
            errors.append("OPENAI_ENABLED=true requer OPENAI_API_KEY configurado")
        return errors

    def validate_whatsapp_config(self) -> list[str]:
        """Valida configurações mínimas de WhatsApp (obrigatórias fora de dev)."""
        errors: list[str] = []
        if self.is_development:
            return errors
        if not self.whatsapp_phone_number_id:
            errors.append("WHATSAPP_PHONE_NUMBER_ID não configurado")
        if not self.whatsapp_access_token:
            errors.append("WHATSAPP_ACCESS_TOKEN não configurado")
        if not self.whatsapp_webhook_secret:
            errors.append("WHATSAPP_WEBHOOK_SECRET obrigatório fora de development")
        return errors

    def validate_google_oauth_config(self) -> list[str]:
        """Valida credenciais OAuth do Google (obrigatórias fora de dev)."""
        errors: list[str] = []
        if self.is_development:
            return errors
        if not self.google_client_id:
            errors.append("GOOGLE_CLIENT_ID não configurado")
        if not self.google_client_secret:
            errors.append("GOOGLE_CLIENT_SECRET não configurado")
        if not self.google_redirect_uri:
            errors.append("GOOGLE_REDIRECT_URI não configurado")
        return errors

    def validate_all(self) -> list[str]:
        """Agrega todas as validações de startup."""
        errors: list[str] = []
        errors.extend(self.validate_session_store_config())
        errors.extend(self.validate_user_directory_config())
        errors.extend(self.validate_dedupe_config())
        errors.extend(self.validate_openai_config())
        errors.extend(self.validate_whatsapp_config())
        errors.extend(self.validate_google_oauth_config())
        return errors

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_staging(self) -> bool:
        """Retorna True se ambiente é staging."""
        return self.environment.lower() in ("staging", "stage")

    @property
    def is_development(self) -> bool:
        """Retorna True se ambiente é desenvolvimento."""
        return self.environment.lower() in ("development", "dev", "local", "test")

    def get_messages_endpoint(self, phone_number_id: str | None = None) -> str:
        """Retorna URL completa para envio de mensagens.

        Formato: https://graph.facebook.com/v24.0/{phone_number_id}/messages
        """
        pid = phone_number_id or self.whatsapp_phone_number_id
        if not pid:
            raise ValueError("phone_number_id é obrigatório")
        return f"{self.whatsapp_api_endpoint}/{pid}/messages"

    def model_post_init(self, __context: Any) -> None:
        """Registra o ambiente carregado (sem expor valores de secrets)."""
        logger: logging.Logger = get_logger(__name__)
        logger.info(
            "Configuração carregada",
            extra={
                "environment": self.environment,
                "session_store_backend": self.session_store_backend,
                "user_directory_backend": self.user_directory_backend,
                "openai_enabled": self.openai_enabled,
            },
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retorna uma instância cacheada de Settings.

    A cache garante que mesmo múltiplas injeções não criam novos objetos.
    """
    return Settings()
