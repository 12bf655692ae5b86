import json

import pytest
from fastapi.testclient import TestClient

from sitebuilder.core.errors import UpstreamError
from sitebuilder.core.v0_client import get_v0_client
from sitebuilder.main import app


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=None):
        self.status_code = status_code
        self._json = json_data
        self.text = text if text is not None else (json.dumps(json_data) if json_data is not None else "")

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json

    def raise_for_status(self):
        if not self.ok:
            raise RuntimeError(f"HTTP {self.status_code}")


class FakeHTTP:
    """Stands in for requests.Session: records calls, replays queued responses."""

    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append(("POST", url, json))
        return self._next()

    def get(self, url, timeout=None):
        self.calls.append(("GET", url, None))
        return self._next()

    def _next(self):
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


class FakeV0:
    def __init__(self, chat=None, error=None):
        self.chat = chat or {}
        self.error = error
        self.calls = []

    def create_chat(self, message):
        self.calls.append(("create", message))
        if self.error:
            raise UpstreamError(self.error)
        return self.chat

    def send_message(self, chat_id, message):
        self.calls.append(("send", chat_id, message))
        if self.error:
            raise UpstreamError(self.error)
        return self.chat


SAMPLE_CHAT = {
    "id": "chat_123",
    "name": "Navbar",
    "createdAt": "2025-01-01T00:00:00Z",
    "webUrl": "https://v0.dev/chat/chat_123",
    "messages": [
        {"id": "m1", "role": "user", "content": "Create a navbar", "createdAt": "2025-01-01T00:00:00Z", "extra": 1},
    ],
    "latestVersion": {
        "status": "completed",
        "demoUrl": "https://demo.vusercontent.net/abc",
        "files": [
            {"name": "app/page.tsx", "content": "export default function Page() {}", "object": "file", "locked": False},
            {"lang": "css", "meta": {"file": "globals.css"}, "source": "body {}"},
        ],
    },
}


@pytest.fixture
def fake_v0():
    return FakeV0(chat=SAMPLE_CHAT)


@pytest.fixture
def api(fake_v0):
    app.dependency_overrides[get_v0_client] = lambda: fake_v0
    yield TestClient(app)
    app.dependency_overrides.clear()
