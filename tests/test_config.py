"""
Tests for environment-driven settings and log redaction
"""
import logging

from app.config import Settings
from app.main import SensitiveDataFilter


class TestSettings:

    def test_defaults(self, make_settings):
        settings = make_settings()

        assert settings.environment == "development"
        assert settings.openai_model == "gpt-4.1-mini"
        assert settings.openai_temperature == 0.7
        assert settings.openai_max_tokens == 500
        assert settings.automation_flows == ""
        assert settings.activity_heartbeat_seconds == 30
        assert settings.port == 8000
        assert settings.log_level == "INFO"

    def test_credentials_are_trimmed(self, make_settings):
        settings = make_settings(OPENAI_API_KEY="  sk-abc  ")

        assert settings.openai_api_key == "sk-abc"
        assert settings.openai_configured is True

    def test_twilio_needs_all_three_values(self, make_settings):
        partial = make_settings(TWILIO_ACCOUNT_SID="AC123", TWILIO_AUTH_TOKEN="token")
        complete = make_settings(
            TWILIO_ACCOUNT_SID="AC123",
            TWILIO_AUTH_TOKEN="token",
            TWILIO_WHATSAPP_FROM="+14155238886",
        )

        assert partial.twilio_configured is False
        assert complete.twilio_configured is True

    def test_blank_credentials_are_not_configured(self, make_settings):
        settings = make_settings(OPENAI_API_KEY="   ")

        assert settings.openai_configured is False

    def test_warns_about_missing_credentials_outside_production(self, make_settings, caplog):
        with caplog.at_level(logging.WARNING, logger="app.config"):
            make_settings(ENVIRONMENT="development")

        assert "OPENAI_API_KEY" in caplog.text
        assert "TWILIO_WHATSAPP_FROM" in caplog.text

    def test_silent_in_production(self, make_settings, caplog):
        with caplog.at_level(logging.WARNING, logger="app.config"):
            make_settings(ENVIRONMENT="production")

        assert "Missing configuration" not in caplog.text

    def test_settings_reads_environment_at_construction(self, monkeypatch):
        monkeypatch.setenv("AUTOMATION_FLOWS", "[]")

        assert Settings().automation_flows == "[]"


class TestSensitiveDataFilter:

    def _filtered(self, message: str) -> str:
        record = logging.LogRecord("test", logging.INFO, __file__, 1, message, None, None)
        SensitiveDataFilter().filter(record)
        return record.msg

    def test_redacts_openai_keys(self):
        assert self._filtered("key=sk-proj-abcdefghijklmnop1234") == "key=[OPENAI_KEY_REDACTED]"

    def test_redacts_account_sid(self):
        message = self._filtered("GET /Accounts/AC" + "a" * 32 + "/Messages.json")

        assert message == "GET /Accounts/[ACCOUNT_SID_REDACTED]/Messages.json"

    def test_redacts_auth_token(self):
        message = self._filtered("{'auth_token': '" + "f" * 32 + "'}")

        assert "f" * 32 not in message
        assert "[REDACTED]" in message

    def test_leaves_ordinary_messages_alone(self):
        assert self._filtered("Webhook received") == "Webhook received"
