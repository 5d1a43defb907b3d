"""HTTP API tests using FastAPI's TestClient with stubbed dependencies."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from corsprobe.main import app
from corsprobe.services.diagnostics import SignalInterceptor, get_signal_interceptor
from corsprobe.services.executor import RequestExecutor, get_request_executor


def _backend(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/ok":
        return httpx.Response(200, json={"ok": True})
    if path == "/blocked":
        return httpx.Response(0)
    return httpx.Response(404, json={"error": "missing"})


@pytest.fixture
def client(interceptor):
    app.dependency_overrides[get_signal_interceptor] = lambda: interceptor
    app.dependency_overrides[get_request_executor] = lambda: RequestExecutor(
        transport=httpx.MockTransport(_backend), default_timeout=5
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# ---- Diagnostics ----


def test_catalog_lists_every_category(client):
    response = client.get("/api/diagnostics/catalog")

    assert response.status_code == 200
    entries = {entry["category"]: entry for entry in response.json()}
    assert len(entries) == 10
    assert entries["cors"]["severity"] == "warning"
    assert len(entries["cors"]["code_examples"]) == 3
    assert entries["notfound"]["code_examples"] == []


def test_classify_synthetic_outcome(client):
    response = client.post(
        "/api/diagnostics/classify",
        json={
            "outcome": {"kind": "transport_failure", "raw_message": "Network Error"},
            "signals": [{"type": "CONSOLE_ERROR", "message": "blocked by CORS policy"}],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["category"] == "cors"
    assert body["severity"] == "warning"
    assert [s["message"] for s in body["evidence"]] == ["blocked by CORS policy"]


def test_classify_http_status(client):
    response = client.post(
        "/api/diagnostics/classify",
        json={"outcome": {"kind": "http_failure", "status_code": 418}},
    )

    assert response.json()["title"] == "HTTP Error 418"


def test_classify_rejects_incomplete_outcome(client):
    response = client.post(
        "/api/diagnostics/classify",
        json={"outcome": {"kind": "http_failure"}},
    )

    assert response.status_code == 422


# ---- Sending requests ----


def test_send_success_is_recorded_in_history(client):
    response = client.post(
        "/api/requests/send",
        json={"url": "https://api.example.com/ok", "method": "get", "headers": '{"x-a": "1"}'},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["outcome"]["kind"] == "success"
    assert body["outcome"]["body"] == {"ok": True}
    assert body["diagnosis"] is None
    assert body["history_id"]

    history = client.get("/api/history").json()
    assert [entry["id"] for entry in history] == [body["history_id"]]
    assert history[0]["method"] == "GET"
    assert history[0]["headers"] == '{"x-a": "1"}'


def test_send_not_found_is_diagnosed(client):
    response = client.post("/api/requests/send", json={"url": "https://api.example.com/missing"})

    assert response.status_code == 200
    body = response.json()
    assert body["outcome"]["kind"] == "http_failure"
    assert body["outcome"]["status_code"] == 404
    assert body["diagnosis"]["category"] == "notfound"
    assert body["diagnosis"]["summary"] == "HTTP Error: 404 Not Found"
    assert body["history_id"] is None
    assert client.get("/api/history").json() == []


def test_send_with_capture_returns_cors_evidence(client, interceptor):
    interceptor.enable()

    body = client.post("/api/requests/send", json={"url": "https://api.example.com/blocked"}).json()

    assert body["captured"] is True
    assert body["diagnosis"]["category"] == "cors"
    assert body["diagnosis"]["evidence"][0]["type"] == "CORS_ERROR"
    assert {s["type"] for s in body["signals"]} == {"CORS_ERROR", "CONSOLE_ERROR"}


def test_send_malformed_headers_is_diagnosed_not_rejected(client):
    response = client.post(
        "/api/requests/send",
        json={"url": "https://api.example.com/ok", "headers": "{broken"},
    )

    assert response.status_code == 200
    assert response.json()["outcome"]["kind"] == "configuration_failure"
    assert response.json()["diagnosis"]["category"] == "unknown"


@pytest.mark.parametrize(
    "payload",
    [
        {"url": "https://api.example.com/", "method": "TRACE"},
        {"url": "   "},
        {"method": "GET"},
    ],
)
def test_send_rejects_invalid_payload(client, payload):
    assert client.post("/api/requests/send", json=payload).status_code == 422


# ---- Capture ----


def test_capture_toggle(client):
    state = client.get("/api/capture").json()
    assert state["enabled"] is False

    state = client.put("/api/capture", json={"enabled": True}).json()
    assert state["enabled"] is True
    assert "logging" in state["channels"]

    state = client.put("/api/capture", json={"enabled": False}).json()
    assert state == {"enabled": False, "channels": [], "signal_count": 0}


def test_capture_conflict(client):
    other = SignalInterceptor()
    other.enable()
    try:
        response = client.put("/api/capture", json={"enabled": True})
    finally:
        other.disable()

    assert response.status_code == 409


def test_signal_listing_and_text_export(client, interceptor):
    interceptor.enable()
    client.post("/api/requests/send", json={"url": "https://api.example.com/blocked"})

    signals = client.get("/api/capture/signals").json()
    assert signals[0]["message"] == "CORS error when accessing: https://api.example.com/blocked"

    text = client.get("/api/capture/signals/0/text")
    assert text.status_code == 200
    assert text.text.startswith("Type: CORS_ERROR\nMessage: CORS error when accessing:")

    assert client.get(f"/api/capture/signals/{len(signals)}/text").status_code == 404

    state = client.delete("/api/capture/signals").json()
    assert state["signal_count"] == 0
    assert state["enabled"] is True


# ---- History and favorites ----


def test_history_entry_delete(client):
    history_id = client.post("/api/requests/send", json={"url": "https://api.example.com/ok"}).json()[
        "history_id"
    ]

    assert client.delete(f"/api/history/{history_id}").status_code == 204
    assert client.delete(f"/api/history/{history_id}").status_code == 404
    assert client.delete("/api/history").status_code == 204


def test_favorites_lifecycle(client):
    payload = {"url": "https://api.example.com/ok", "method": "GET", "headers": None, "body": None}

    first = client.post("/api/favorites", json=payload).json()
    second = client.post("/api/favorites", json=payload).json()
    assert first["id"] == second["id"]

    assert [f["id"] for f in client.get("/api/favorites").json()] == [first["id"]]
    assert client.delete(f"/api/favorites/{first['id']}").status_code == 204
    assert client.delete(f"/api/favorites/{first['id']}").status_code == 404

    client.post("/api/favorites", json=payload)
    assert client.delete("/api/favorites").status_code == 204
    assert client.get("/api/favorites").json() == []
