"""
Pytest configuration and shared fixtures.
"""
import json

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app

# Every variable Settings reads; cleared before each settings build so a local
# .env cannot leak into tests.
SETTINGS_ENV_VARS = [
    "ENVIRONMENT",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_TEMPERATURE",
    "OPENAI_MAX_TOKENS",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_WHATSAPP_FROM",
    "AUTOMATION_FLOWS",
    "HOST",
    "PORT",
    "CORS_ORIGINS",
    "ACTIVITY_HEARTBEAT_SECONDS",
    "STUDIO_API_URL",
    "STUDIO_STORE_PATH",
    "LOG_LEVEL",
]

CONFIGURED_ENV = {
    "ENVIRONMENT": "test",
    "OPENAI_API_KEY": "sk-test-key-0000000000000000",
    "TWILIO_ACCOUNT_SID": "AC" + "0" * 32,
    "TWILIO_AUTH_TOKEN": "f" * 32,
    "TWILIO_WHATSAPP_FROM": "+14155238886",
}

SAMPLE_FLOWS = [
    {
        "id": "flow-pricing",
        "name": "Pricing",
        "triggerPhrase": "pricing",
        "aiTone": "friendly",
        "goal": "Book a demo",
        "messagePreview": "Our plans start at $29/month.",
        "status": "ready",
    },
    {
        "id": "flow-price",
        "name": "Price",
        "triggerPhrase": "PRICE",
        "aiTone": "concise",
        "goal": "Share the price list",
        "messagePreview": "Here is our price list.",
        "status": "ready",
    },
]


@pytest.fixture
def make_settings(monkeypatch):
    """Build a Settings instance from an explicit environment"""
    def _make(**env):
        for key in SETTINGS_ENV_VARS:
            monkeypatch.delenv(key, raising=False)
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return Settings()
    return _make


@pytest.fixture
def configured_settings(make_settings):
    return make_settings(**CONFIGURED_ENV, AUTOMATION_FLOWS=json.dumps(SAMPLE_FLOWS))


@pytest.fixture
def app(configured_settings):
    return create_app(configured_settings)


@pytest.fixture
def client(app):
    return TestClient(app)
