"""Testes da validação HMAC do webhook Meta."""

from __future__ import annotations

from pennyworth.adapters.whatsapp.signature import (
    SIGNATURE_HEADER,
    sign_payload,
    verify_meta_signature,
)

BODY = b'{"object":"whatsapp_business_account","entry":[]}'
SECRET = "webhook-secret"


class TestVerifyMetaSignature:
    def test_valid_signature(self) -> None:
        headers = {SIGNATURE_HEADER: sign_payload(BODY, SECRET)}
        result = verify_meta_signature(BODY, headers, SECRET)
        assert result.valid is True
        assert result.skipped is False

    def test_skipped_without_secret(self) -> None:
        """Sem secret (dev), qualquer corpo é aceito."""
        result = verify_meta_signature(BODY, {}, None)
        assert result.valid is True
        assert result.skipped is True

    def test_missing_header(self) -> None:
        result = verify_meta_signature(BODY, {}, SECRET)
        assert result.valid is False
        assert result.error == "missing_signature"

    def test_wrong_prefix(self) -> None:
        digest = sign_payload(BODY, SECRET).removeprefix("sha256=")
        result = verify_meta_signature(BODY, {SIGNATURE_HEADER: "sha1=" + digest}, SECRET)
        assert result.error == "invalid_signature_format"

    def test_tampered_body(self) -> None:
        headers = {SIGNATURE_HEADER: sign_payload(BODY, SECRET)}
        result = verify_meta_signature(BODY + b" ", headers, SECRET)
        assert result.valid is False
        assert result.error == "signature_mismatch"

    def test_other_secret(self) -> None:
        headers = {SIGNATURE_HEADER: sign_payload(BODY, "another-secret")}
        assert verify_meta_signature(BODY, headers, SECRET).valid is False
