import pytest
from conftest import FakeV0
from fastapi.testclient import TestClient

from sitebuilder.core.errors import MissingCredentialError
from sitebuilder.core.v0_client import get_v0_client
from sitebuilder.main import app


def test_health(api):
    r = api.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["timestamp"].endswith("Z")
    assert body["message"]


def test_create_chat_reshapes_upstream(api, fake_v0):
    r = api.post("/api/chat", json={"message": "Create a navbar"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    data = body["data"]
    assert data["chatId"] == "chat_123"
    assert data["title"] == "Navbar"
    assert data["demoUrl"] == "https://demo.vusercontent.net/abc"
    assert data["status"] == "completed"
    assert data["isCompleted"] is True
    assert data["files"][0] == {
        "name": "app/page.tsx",
        "content": "export default function Page() {}",
        "type": "tsx",
        "size": len("export default function Page() {}"),
    }
    # records without a name are relayed untouched
    assert data["files"][1]["lang"] == "css"
    assert data["messages"] == [
        {"id": "m1", "role": "user", "content": "Create a navbar", "createdAt": "2025-01-01T00:00:00Z"},
    ]
    assert fake_v0.calls == [("create", "Create a navbar")]


def test_create_chat_empty_message_is_400(api, fake_v0):
    r = api.post("/api/chat", json={"message": ""})
    assert r.status_code == 400
    assert r.json() == {"error": "Message is required"}
    assert fake_v0.calls == []


def test_create_chat_missing_message_is_400(api):
    r = api.post("/api/chat", json={})
    assert r.status_code == 400
    assert "error" in r.json()


def test_create_chat_non_object_body_is_400(api):
    r = api.post("/api/chat", json=["hello"])
    assert r.status_code == 400


def test_create_chat_invalid_json_is_400(api):
    r = api.post("/api/chat", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Message is required"}


def test_create_chat_upstream_failure_is_500(api):
    app.dependency_overrides[get_v0_client] = lambda: FakeV0(error="rate limited")
    r = api.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to create chat", "details": "rate limited"}


def test_create_chat_without_credential_never_calls_upstream(api):
    app.dependency_overrides[get_v0_client] = lambda: None
    r = api.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 500
    assert r.json()["error"] == "Failed to create chat"


def test_missing_credential_still_validates_first(api):
    app.dependency_overrides[get_v0_client] = lambda: None
    r = api.post("/api/chat", json={})
    assert r.status_code == 400


def test_send_message(api, fake_v0):
    r = api.post("/api/chat/send", json={"chatId": "chat_123", "message": "make it blue"})
    assert r.status_code == 200
    assert r.json()["data"]["chatId"] == "chat_123"
    assert fake_v0.calls == [("send", "chat_123", "make it blue")]


def test_send_message_missing_chat_id_is_400(api, fake_v0):
    r = api.post("/api/chat/send", json={"message": "hi"})
    assert r.status_code == 400
    assert r.json() == {"error": "Chat ID and message are required"}
    assert fake_v0.calls == []


def test_send_message_missing_message_is_400(api):
    r = api.post("/api/chat/send", json={"chatId": "chat_123"})
    assert r.status_code == 400


def test_send_message_upstream_failure_is_500(api):
    app.dependency_overrides[get_v0_client] = lambda: FakeV0(error="boom")
    r = api.post("/api/chat/send", json={"chatId": "c", "message": "hi"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to send message"}


def test_unknown_path_is_404(api):
    r = api.get("/api/nonexistent")
    assert r.status_code == 404
    body = r.json()
    assert body["error"] == "Not Found"
    assert "/api/health" in body["availableEndpoints"]
    assert "/api/chat" in body["availableEndpoints"]


def test_wrong_method_is_404(api):
    r = api.get("/api/chat")
    assert r.status_code == 404
    assert r.json()["error"] == "Not Found"


def test_options_preflight(api):
    r = api.options("/api/chat", headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"})
    assert r.status_code == 200
    assert r.content == b""
    assert r.headers["access-control-allow-origin"] == "*"
    assert "POST" in r.headers["access-control-allow-methods"]
    assert "Authorization" in r.headers["access-control-allow-headers"]


def test_options_on_any_path(api):
    r = api.options("/anything/else")
    assert r.status_code == 200


def test_cross_origin_response_has_cors_header(api):
    r = api.get("/api/health", headers={"Origin": "http://localhost:5173"})
    assert r.headers["access-control-allow-origin"] == "*"


def test_create_chat_numeric_id_is_reshaped(api):
    app.dependency_overrides[get_v0_client] = lambda: FakeV0(chat={"id": 123, "name": "Shop"})
    r = api.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 200
    assert r.json()["data"]["chatId"] == "123"


def test_create_chat_unreshapable_payload_uses_route_error(api):
    app.dependency_overrides[get_v0_client] = lambda: FakeV0(chat={"id": "c1", "title": {"text": "odd"}})
    r = api.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Failed to create chat"
    assert "could not be reshaped" in body["details"]


def test_send_message_drops_non_object_file_records(api):
    chat = {"id": "c1", "latestVersion": {"files": ["oops", {"name": "a.js", "content": "x"}]}}
    app.dependency_overrides[get_v0_client] = lambda: FakeV0(chat=chat)
    r = api.post("/api/chat/send", json={"chatId": "c1", "message": "hi"})
    assert r.status_code == 200
    assert [f["name"] for f in r.json()["data"]["files"]] == ["a.js"]


def test_send_message_unreshapable_payload_uses_route_error(api):
    app.dependency_overrides[get_v0_client] = lambda: FakeV0(chat={"id": "c1", "title": ["odd"]})
    r = api.post("/api/chat/send", json={"chatId": "c1", "message": "hi"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to send message"}


class ExplodingV0(FakeV0):
    def create_chat(self, message):
        raise RuntimeError("unexpected")


def test_internal_error_keeps_cors_header():
    app.dependency_overrides[get_v0_client] = lambda: ExplodingV0()
    try:
        client = TestClient(app, raise_server_exceptions=False)
        r = client.post("/api/chat", json={"message": "hi"}, headers={"Origin": "http://localhost:5173"})
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 500
    assert r.json() == {"error": "Internal Server Error"}
    assert r.headers["access-control-allow-origin"] == "*"


def test_startup_aborts_without_credential(monkeypatch):
    monkeypatch.delenv("V0_API_KEY", raising=False)
    with pytest.raises(MissingCredentialError):
        with TestClient(app):
            pass


def test_startup_succeeds_with_credential(monkeypatch):
    monkeypatch.setenv("V0_API_KEY", "secret")
    with TestClient(app) as client:
        assert client.get("/api/health").status_code == 200
