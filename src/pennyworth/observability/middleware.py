"""Correlation id por requisição, propagado para as tarefas em background."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CORRELATION_HEADER = "x-correlation-id"
# Meta não envia correlation id; proxies costumam enviar x-request-id
_FALLBACK_HEADERS = (CORRELATION_HEADER, "x-request-id")

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    return _correlation_id.get()


@contextmanager
def bound_correlation_id(value: str) -> Iterator[str]:
    """Fixa o correlation_id enquanto o bloco executa.

    Usado pelas tarefas em background, que rodam depois que a requisição
    original já respondeu.
    """
    token = _correlation_id.set(value)
    try:
        yield value
    finally:
        _correlation_id.reset(token)


def _incoming_correlation_id(request: Request) -> str | None:
    for header in _FALLBACK_HEADERS:
        value = request.headers.get(header, "").strip()
        if value:
            return value[:128]
    return None


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Reaproveita o id recebido ou gera um novo; devolve no header de resposta."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = _incoming_correlation_id(request) or uuid.uuid4().hex
        with bound_correlation_id(correlation_id):
            response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
