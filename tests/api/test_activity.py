"""
Tests for the activity feed and health endpoints
"""
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.activity_feed import SEED_MESSAGE


class TestActivityEndpoints:

    def test_starts_with_seed_entry(self, client):
        response = client.get("/api/activity")

        assert response.status_code == 200
        activity = response.json()["activity"]
        assert len(activity) == 1
        assert activity[0]["id"] == "seed-1"
        assert activity[0]["type"] == "generation"
        assert activity[0]["message"] == SEED_MESSAGE

    def test_newest_entry_first(self, app, client):
        app.state.activity_feed.record("send", "first")
        app.state.activity_feed.record("webhook", "second")

        activity = client.get("/api/activity").json()["activity"]

        assert [entry["message"] for entry in activity[:2]] == ["second", "first"]

    def test_clear_resets_to_seed(self, app, client):
        app.state.activity_feed.record("send", "something happened")

        response = client.delete("/api/activity")

        assert response.status_code == 200
        assert [entry["id"] for entry in response.json()["activity"]] == ["seed-1"]

    def test_webhook_call_shows_up_in_feed(self, client):
        client.post("/api/webhook", data={"Body": "hello", "From": "whatsapp:+15550001111"})

        activity = client.get("/api/activity").json()["activity"]

        assert activity[0]["type"] == "webhook"


class TestHealth:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["webhook_url"] == "/api/webhook"

    def test_reports_configured_integrations(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["integrations"] == {"openai": True, "twilio": True}

    def test_reports_missing_integrations(self, make_settings):
        client = TestClient(create_app(make_settings(ENVIRONMENT="test")))

        data = client.get("/health").json()

        assert data["integrations"] == {"openai": False, "twilio": False}


class TestLifespan:

    def test_starts_and_stops_heartbeat(self, app):
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200

    def test_heartbeat_can_be_disabled(self, make_settings):
        settings = make_settings(ENVIRONMENT="test", ACTIVITY_HEARTBEAT_SECONDS="0")

        with TestClient(create_app(settings)) as client:
            activity = client.get("/api/activity").json()["activity"]

        assert [entry["id"] for entry in activity] == ["seed-1"]
