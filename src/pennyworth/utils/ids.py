"""Geradores de identificadores e mascaramento para logs."""

from __future__ import annotations

import uuid


def new_link_id() -> str:
    """Gera o identificador (state OAuth) de um vínculo de conta pendente."""

    return str(uuid.uuid4())


def mask_channel_id(channel_id: str | None) -> str | None:
    """Mascara o identificador do canal (telefone) para logs.

    Mantém apenas os 4 últimos dígitos: "+5511987654321" -> "***4321".
    """
    if not channel_id:
        return None
    return "***" + channel_id[-4:]


def new_user_id() -> str:
    """Gera o identificador interno de um usuário vinculado."""

    return str(uuid.uuid4())
