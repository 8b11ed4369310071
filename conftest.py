# Shared fixtures for the gateway test-suite.
#
# Config reads the environment when it is first imported, so every variable
# the tests depend on is pinned here, before any project module is loaded.
import os
import tempfile

import httpx
import pytest
from fastapi.testclient import TestClient

_LOG_DIR = tempfile.mkdtemp(prefix="gateway-logs-")

os.environ["LOG_DIR"] = _LOG_DIR
os.environ["API_KEY"] = ""
os.environ["AUTH_REQUIRED"] = "false"
os.environ["GEMINI_API_BASE"] = "http://gemini.test/v1beta/models"
os.environ["GEMINI_API_KEY"] = ""
os.environ["DEFAULT_IMAGE_MODEL"] = "gemini-3-pro-image-preview"
os.environ["USE_OFFICIAL_WIRE_FORMAT"] = "false"
os.environ["MEDEO_API_BASE"] = "http://medeo.test/v1/videos"
os.environ["POLLINATIONS_BASE_URL"] = "http://pollinations.test/prompt"
os.environ["POLLINATIONS_VERIFY"] = "true"
os.environ["FALLBACK_ENABLED"] = "true"
os.environ["EXPOSE_INTERNAL_ERRORS"] = "true"

PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
PNG_BYTES = b"\x89PNG\r\n\x1a\n fake image bytes"


def gemini_image_body(data=PNG_B64, mime_type="image/png", text=None):
    """A generateContent response carrying one inline image."""
    parts = []
    if text:
        parts.append({"text": text})
    parts.append({"inlineData": {"mimeType": mime_type, "data": data}})
    return {"candidates": [{"content": {"role": "model", "parts": parts}}]}


class FakeUpstream:
    """
    Records every outbound request and answers from registered routes.

    Routes match on method and a URL fragment, first match wins. Unmatched
    requests get a 599 so a missing stub shows up as an upstream failure.
    """

    def __init__(self):
        self.requests = []
        self._routes = []

    def add(self, method, fragment, status_code=200, json=None, content=None, headers=None, raises=None):
        self._routes.append((method.upper(), fragment, status_code, json, content, headers, raises))

    def calls_to(self, fragment):
        return [request for request in self.requests if fragment in str(request.url)]

    @property
    def call_count(self):
        return len(self.requests)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, fragment, status_code, json, content, headers, raises in self._routes:
            if request.method == method and fragment in str(request.url):
                if raises is not None:
                    raise raises
                if json is not None:
                    return httpx.Response(status_code, json=json, headers=headers)
                return httpx.Response(status_code, content=content or b"", headers=headers)
        return httpx.Response(599, json={"error": "no stub registered"})


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def http_client(upstream):
    """An httpx client routed through the fake upstream."""
    with httpx.Client(transport=httpx.MockTransport(upstream.handler), follow_redirects=True) as client:
        yield client


@pytest.fixture
def client(upstream):
    """TestClient whose outbound HTTP goes to the fake upstream."""
    from app import app
    from common.http_client import get_http_client

    def override_http_client():
        with httpx.Client(transport=httpx.MockTransport(upstream.handler), follow_redirects=True) as mock_client:
            yield mock_client

    app.dependency_overrides[get_http_client] = override_http_client
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def api_key(monkeypatch):
    """Turn on authentication with a known secret."""
    from config import Config

    monkeypatch.setattr(Config, "API_KEY", "test-secret")
    return "test-secret"
