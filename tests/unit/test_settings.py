"""Testes das validações de configuração."""

from __future__ import annotations

import pytest

from pennyworth.config.settings import Settings, get_settings


class TestSessionStoreConfig:
    def test_defaults_are_valid(self) -> None:
        assert Settings().validate_all() == []

    def test_unknown_backend(self) -> None:
        errors = Settings(session_store_backend="firestore").validate_session_store_config()
        assert any("SESSION_STORE_BACKEND" in e for e in errors)

    def test_redis_requires_url(self) -> None:
        errors = Settings(session_store_backend="redis").validate_session_store_config()
        assert errors == ["SESSION_STORE_BACKEND=redis requer REDIS_URL configurado"]

    def test_redis_with_url_is_valid(self) -> None:
        settings = Settings(session_store_backend="redis", redis_url="redis://localhost:6379/0")
        assert settings.validate_session_store_config() == []

    @pytest.mark.parametrize(
        ("field", "value", "fragment"),
        [
            ("session_ttl_seconds", -1, "SESSION_TTL_SECONDS"),
            ("chat_history_window", 0, "CHAT_HISTORY_WINDOW"),
            ("reply_chunk_max_chars", 10, "REPLY_CHUNK_MAX_CHARS"),
        ],
    )
    def test_numeric_bounds(self, field: str, value: int, fragment: str) -> None:
        errors = Settings(**{field: value}).validate_session_store_config()
        assert any(fragment in e for e in errors)


class TestOtherBackends:
    def test_user_directory_redis_requires_url(self) -> None:
        errors = Settings(user_directory_backend="redis").validate_user_directory_config()
        assert any("REDIS_URL" in e for e in errors)

    def test_dedupe_ttl_must_be_positive(self) -> None:
        errors = Settings(inbound_dedupe_ttl_seconds=0).validate_dedupe_config()
        assert any("INBOUND_DEDUPE_TTL_SECONDS" in e for e in errors)

    def test_openai_enabled_requires_key(self) -> None:
        assert Settings(openai_enabled=True).validate_openai_config()
        assert Settings(openai_enabled=True, openai_api_key="sk").validate_openai_config() == []


class TestProductionRequirements:
    def test_development_skips_external_credentials(self) -> None:
        settings = Settings(environment="development")
        assert settings.validate_whatsapp_config() == []
        assert settings.validate_google_oauth_config() == []

    def test_production_requires_whatsapp_and_google(self) -> None:
        settings = Settings(
            environment="production",
            whatsapp_phone_number_id=None,
            whatsapp_access_token=None,
            whatsapp_webhook_secret=None,
            google_client_id=None,
            google_client_secret=None,
            google_redirect_uri=None,
        )
        errors = settings.validate_all()

        assert len(errors) == 6
        assert any("WHATSAPP_WEBHOOK_SECRET" in e for e in errors)
        assert any("GOOGLE_REDIRECT_URI" in e for e in errors)


class TestEnvironmentHelpers:
    @pytest.mark.parametrize(
        ("environment", "production", "development"),
        [("prod", True, False), ("staging", False, False), ("local", False, True)],
    )
    def test_flags(self, environment: str, production: bool, development: bool) -> None:
        settings = Settings(environment=environment)
        assert settings.is_production is production
        assert settings.is_development is development

    def test_messages_endpoint(self) -> None:
        settings = Settings(whatsapp_phone_number_id="106540352242922")
        assert settings.get_messages_endpoint() == (
            "https://graph.facebook.com/v24.0/106540352242922/messages"
        )

    def test_messages_endpoint_requires_phone_id(self) -> None:
        with pytest.raises(ValueError):
            Settings(whatsapp_phone_number_id=None).get_messages_endpoint()

    def test_env_vars_are_read(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HONORIFIC", "Sir")
        monkeypatch.setenv("OPENAI_ENABLED", "true")
        settings = get_settings()
        assert settings.honorific == "Sir"
        assert settings.openai_enabled is True

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()
