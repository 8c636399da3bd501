"""Forma de tratamento derivada do e-mail do usuário."""

from __future__ import annotations

import re

DEFAULT_HONORIFIC = "Master"

_LOCAL_PART_SEPARATORS = re.compile(r"[._]")


def resolve_display_name(email: str | None, honorific: str = DEFAULT_HONORIFIC) -> str:
    """Retorna o tratamento cortês para o dono do e-mail.

    "bruce.wayne@wayne.com" -> "Master Bruce"; sem token utilizável -> "Master".
    """
    local_part = (email or "").split("@")[0]
    first_token = _LOCAL_PART_SEPARATORS.split(local_part)[0].strip()
    if not first_token:
        return honorific
    return f"{honorific} {first_token[0].upper()}{first_token[1:]}"
