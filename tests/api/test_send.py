"""
Tests for POST /api/send
"""
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_whatsapp_client
from app.clients.twilio_client import WhatsAppAPIError, WhatsAppClient
from app.main import create_app
from tests.conftest import CONFIGURED_ENV


@pytest.fixture
def whatsapp_client():
    fake = Mock(spec=WhatsAppClient)
    fake.send_message = AsyncMock(return_value="SM0123456789")
    return fake


@pytest.fixture
def send_client(app, whatsapp_client):
    app.dependency_overrides[get_whatsapp_client] = lambda: whatsapp_client
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestSendSuccess:

    def test_returns_message_sid(self, send_client, whatsapp_client):
        response = send_client.post(
            "/api/send",
            json={"to": "+14155551234", "message": "Hello from the studio"}
        )

        assert response.status_code == 200
        assert response.json() == {"sid": "SM0123456789"}
        whatsapp_client.send_message.assert_awaited_once_with("+14155551234", "Hello from the studio")

    def test_records_send_activity_with_masked_number(self, app, send_client):
        send_client.post("/api/send", json={"to": "whatsapp:+14155551234", "message": "Hi"})

        latest = app.state.activity_feed.entries()[0]
        assert latest.type == "send"
        assert "+14155551234" not in latest.message


class TestSendValidation:

    @pytest.mark.parametrize("body", [
        {"message": "Hi"},
        {"to": "+14155551234"},
        {"to": "  ", "message": "Hi"},
        {"to": "+14155551234", "message": ""},
    ])
    def test_missing_destination_or_message(self, send_client, whatsapp_client, body):
        response = send_client.post("/api/send", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing destination number or message body."}
        whatsapp_client.send_message.assert_not_awaited()


class TestSendFailures:

    @pytest.mark.parametrize("missing", ["TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_WHATSAPP_FROM"])
    def test_incomplete_credentials(self, make_settings, missing):
        env = {key: value for key, value in CONFIGURED_ENV.items() if key != missing}
        client = TestClient(create_app(make_settings(**env)))

        response = client.post("/api/send", json={"to": "+14155551234", "message": "Hi"})

        assert response.status_code == 500
        assert response.json() == {
            "error": (
                "Twilio credentials are not configured. Set TWILIO_ACCOUNT_SID, "
                "TWILIO_AUTH_TOKEN, and TWILIO_WHATSAPP_FROM."
            )
        }

    def test_uninitialized_client(self, app):
        app.dependency_overrides[get_whatsapp_client] = lambda: None
        client = TestClient(app)

        response = client.post("/api/send", json={"to": "+14155551234", "message": "Hi"})

        assert response.status_code == 500
        assert response.json() == {"error": "Twilio client failed to initialize."}

    def test_provider_failure(self, send_client, whatsapp_client):
        whatsapp_client.send_message.side_effect = WhatsAppAPIError("Twilio API error: bad number", 400, 21211)

        response = send_client.post("/api/send", json={"to": "+1", "message": "Hi"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send WhatsApp message via Twilio."}
