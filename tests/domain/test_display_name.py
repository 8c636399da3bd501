"""Testes para domain/display_name.py."""

from __future__ import annotations

import pytest

from pennyworth.domain.display_name import DEFAULT_HONORIFIC, resolve_display_name


class TestResolveDisplayName:
    """Forma de tratamento derivada do e-mail."""

    @pytest.mark.parametrize(
        ("email", "expected"),
        [
            ("bruce.wayne@wayne.com", "Master Bruce"),
            ("alfred_pennyworth@manor.co.uk", "Master Alfred"),
            ("dick@gotham.org", "Master Dick"),
            ("barbara@x.io", "Master Barbara"),
        ],
    )
    def test_uses_first_token_of_local_part(self, email: str, expected: str) -> None:
        """Deve usar o primeiro token da parte local, capitalizado."""
        assert resolve_display_name(email) == expected

    def test_keeps_rest_of_token_case(self) -> None:
        """Só a primeira letra é alterada."""
        assert resolve_display_name("mcGregor.x@a.com") == "Master McGregor"

    @pytest.mark.parametrize("email", [None, "", "@wayne.com", ".hidden@wayne.com", "_x@y.com"])
    def test_falls_back_to_honorific(self, email: str | None) -> None:
        """Sem token utilizável deve retornar só o tratamento."""
        assert resolve_display_name(email) == DEFAULT_HONORIFIC

    def test_custom_honorific(self) -> None:
        """Deve aceitar tratamento configurado."""
        assert resolve_display_name("selina@cat.com", honorific="Miss") == "Miss Selina"
