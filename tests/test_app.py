"""
Tests for the FastAPI surface: token, voice webhook, health.
"""

import sqlite3

import pytest
from fastapi.testclient import TestClient

from src.server.app import create_app

from conftest import PHONE_NUMBER


class TestHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "Sales Call Relay"
        assert data["active_connections"] == 0

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["config"]["model"] == "fake-model"
        assert data["config"]["caller_id"] == PHONE_NUMBER


class TestTokenEndpoint:

    def test_returns_token(self, client):
        response = client.get("/token")
        assert response.status_code == 200
        assert response.json()["token"]

    def test_ignores_query_parameters(self, client):
        import jwt

        token = client.get("/token", params={"identity": "mallory"}).json()["token"]
        payload = jwt.decode(token, options={"verify_signature": False})
        assert payload["grants"]["identity"] == "caller"

    @pytest.mark.parametrize("origin", ["http://localhost:3000", "http://other.example"])
    def test_http_cors_is_open(self, client, origin):
        response = client.get("/token", headers={"Origin": origin})
        assert response.headers["access-control-allow-origin"] == "*"


class TestVoiceWebhook:

    def test_dial_scenario(self, client, store):
        response = client.post("/voice", data={"To": "+15551234567", "CallSid": "CA123"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/xml")
        assert f'<Dial callerId="{PHONE_NUMBER}">+15551234567</Dial>' in response.text

        call = store.get_call_log("CA123")
        assert call is not None
        assert call.status == "initiated"
        assert call.phone_number == "+15551234567"

    def test_distinct_calls_each_logged(self, client, store):
        for i in range(3):
            to = f"+1555000000{i}"
            response = client.post("/voice", data={"To": to, "CallSid": f"CA{i}"})
            assert f">{to}</Dial>" in response.text

        assert store.count_call_logs() == 3
        assert all(c.status == "initiated" for c in store.list_call_logs())

    def test_redelivery_overwrites(self, client, store):
        client.post("/voice", data={"To": "+15551234567", "CallSid": "CA123"})
        client.post("/voice", data={"To": "+15551234567", "CallSid": "CA123"})

        assert store.count_call_logs() == 1

    def test_client_address_is_not_rejected(self, client, store):
        response = client.post("/voice", data={"To": "client:caller", "CallSid": "CA7"})

        assert response.status_code == 200
        assert "<Dial" in response.text
        assert store.get_call_log("CA7").phone_number == "client:caller"

    def test_missing_fields_still_answer(self, client, store):
        response = client.post("/voice", data={})

        assert response.status_code == 200
        assert "<Dial" in response.text
        assert store.count_call_logs() == 0

    def test_storage_failure_does_not_change_response(self, settings, suggester):
        class LockedStore:
            db_path = "locked.db"

            def insert_call_log(self, record):
                raise sqlite3.OperationalError("database is locked")

        app = create_app(settings=settings, store=LockedStore(), suggester=suggester)
        with TestClient(app) as client:
            response = client.post("/voice", data={"To": "+15551234567", "CallSid": "CA1"})

        assert response.status_code == 200
        assert ">+15551234567</Dial>" in response.text


@pytest.mark.parametrize("path", ["/token", "/voice"])
def test_wrong_method(client, path):
    method = client.post if path == "/token" else client.get
    assert method(path).status_code == 405
