"""Tests for the HTTP and WebSocket surface."""

import time

import pytest
from fastapi.testclient import TestClient

from signal_server.config import get_settings


def client_ticks(test_client):
    return test_client.get("/api/status").json()["ticks_ingested"]


@pytest.fixture
def client(monkeypatch):
    """App client running the simulated feed with no persistence."""
    monkeypatch.setenv("FEED_MODE", "simulated")
    monkeypatch.setenv("SIMULATED_INTERVAL", "60")
    monkeypatch.setenv("SYMBOLS", '["R_100", "R_50"]')
    monkeypatch.setenv("DATABASE_URL", "")
    monkeypatch.setenv("REDIS_URL", "")
    get_settings.cache_clear()

    from signal_server.main import app

    with TestClient(app) as test_client:
        # First simulated ticks are emitted right after startup
        for _ in range(100):
            if client_ticks(test_client) >= 2:
                break
            time.sleep(0.01)
        yield test_client

    get_settings.cache_clear()


class TestHttp:
    """Tests for REST endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.text == "Deriv Signal Server is running..."

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_status(self, client):
        data = client.get("/api/status").json()

        assert data["status"] == "running"
        assert data["feed_mode"] == "simulated"
        assert data["feed_state"] == "subscribed"
        assert data["symbols"] == ["R_100", "R_50"]
        assert data["ticks_ingested"] >= 2

    def test_features_unknown_symbol(self, client):
        assert client.get("/api/features/UNKNOWN").status_code == 404

    def test_features_thin_history(self, client):
        data = client.get("/api/features/R_100").json()

        assert data["symbol"] == "R_100"
        assert data["features"] is None
        assert data["score"]["direction"] == "none"

    def test_recent_signals_without_cache(self, client):
        assert client.get("/api/signals/recent").json() == []


class TestWebSocketEndpoint:
    """Tests for the /ws endpoint."""

    def _receive_until(self, ws, msg_type, limit=20):
        for _ in range(limit):
            message = ws.receive_json()
            if message["type"] == msg_type:
                return message
        raise AssertionError(f"no '{msg_type}' message received")

    def test_hello_on_connect(self, client):
        with client.websocket_connect("/ws") as ws:
            message = ws.receive_json()

        assert message["type"] == "hello"
        assert message["data"] == {"message": "Welcome to Deriv Signal Server"}

    def test_ping_pong(self, client):
        with client.websocket_connect("/ws") as ws:
            self._receive_until(ws, "hello")
            ws.send_json({"type": "ping"})
            assert self._receive_until(ws, "pong")["data"] == {}

    def test_invalid_json(self, client):
        with client.websocket_connect("/ws") as ws:
            self._receive_until(ws, "hello")
            ws.send_text("not json")
            assert self._receive_until(ws, "error")["data"] == {"message": "Invalid JSON"}

    def test_unknown_message_type(self, client):
        with client.websocket_connect("/ws") as ws:
            self._receive_until(ws, "hello")
            ws.send_json({"type": "subscribe"})
            error = self._receive_until(ws, "error")
            assert "Unknown message type" in error["data"]["message"]
