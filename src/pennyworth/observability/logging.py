"""Logging estruturado em JSON (python-json-logger).

Campos fixos em todo registro: level, logger, service, environment e
correlation_id. Logs nunca carregam texto de mensagens, e-mails redigidos,
tokens ou telefones completos (use `mask_channel_id`).
"""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

from pennyworth.observability.middleware import get_correlation_id

_LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s %(message)s "
    "%(correlation_id)s %(service)s %(environment)s"
)

# Bibliotecas que logam URLs e payloads em INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


class ServiceContextFilter(logging.Filter):
    """Completa o record com serviço, ambiente e correlation_id corrente."""

    def __init__(self, service_name: str, environment: str) -> None:
        super().__init__()
        self._service_name = service_name
        self._environment = environment

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id()
        record.service = self._service_name
        record.environment = self._environment
        return True


def configure_logging(level: str, service_name: str, environment: str = "development") -> None:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(
        JsonFormatter(_LOG_FORMAT, rename_fields={"levelname": "level", "name": "logger"})
    )
    handler.addFilter(ServiceContextFilter(service_name, environment))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_fallback(
    logger: logging.Logger,
    component: str,
    error: Exception,
    **fields: object,
) -> None:
    """Registra que um colaborador falhou e o usuário recebeu a resposta de contingência.

    Só o tipo do erro é logado; a mensagem pode conter trechos de payload.
    """
    logger.warning(
        "fallback_applied",
        extra={
            "fallback_used": True,
            "component": component,
            "error_type": type(error).__name__,
            **fields,
        },
    )
