"""Configurações centralizadas do pennyworth.

Este módulo exporta:
- Settings: classe de configuração via variáveis de ambiente
- get_settings: função cacheada para obter instância única
- Constantes das APIs externas (Graph API Meta, Google)

Uso típico:
    from pennyworth.config import get_settings
"""

from pennyworth.config.settings import (
    GMAIL_API_BASE_URL,
    GOOGLE_TOKEN_URL,
    GRAPH_API_BASE_URL,
    GRAPH_API_VERSION,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "GRAPH_API_VERSION",
    "GRAPH_API_BASE_URL",
    "GOOGLE_TOKEN_URL",
    "GMAIL_API_BASE_URL",
]
