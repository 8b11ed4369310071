"""Tests for API key handling, CORS and service endpoints."""
import pytest

from common.error_messages import ErrorCode, get_error_response
from common.exceptions import AuthenticationError, ConfigurationError
from config import Config
from auth.services import verify_api_key

from conftest import gemini_image_body


def test_open_when_no_key_configured(client):
    assert client.get("/v1/models").status_code == 200


def test_missing_key_rejected(client, api_key):
    response = client.get("/v1/models")
    assert response.status_code == 401
    error = response.json()["error"]
    assert error["type"] == "authentication_error"
    assert error["code"] == "MISSING_API_KEY"


def test_wrong_key_rejected(client, api_key, upstream):
    response = client.post("/api/image/generate", json={"prompt": "a red fox"}, headers={"X-API-Key": "nope"})
    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "INVALID_API_KEY"
    assert upstream.call_count == 0


@pytest.mark.parametrize("kwargs", [
    {"headers": {"Authorization": "Bearer test-secret"}},
    {"headers": {"X-API-Key": "test-secret"}},
    {"params": {"api_key": "test-secret"}},
])
def test_key_accepted_everywhere(client, api_key, kwargs):
    assert client.get("/v1/models", **kwargs).status_code == 200


def test_generation_with_key(client, api_key, upstream):
    upstream.add("POST", "gemini.test", json=gemini_image_body())
    response = client.post(
        "/api/image/generate",
        json={"prompt": "a red fox"},
        headers={"Authorization": "Bearer test-secret"},
    )
    assert response.status_code == 200


def test_verify_key_valid(client, api_key):
    response = client.post("/api/verify-key", json={"api_key": "test-secret"})
    assert response.status_code == 200
    assert response.json() == {"success": True, "valid": True, "auth_enabled": True, "message": "API key is valid"}


def test_verify_key_from_header(client, api_key):
    response = client.post("/api/verify-key", headers={"X-API-Key": "test-secret"})
    assert response.status_code == 200
    assert response.json()["valid"] is True


def test_verify_key_invalid(client, api_key):
    response = client.post("/api/verify-key", json={"api_key": "wrong"})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_API_KEY"


def test_verify_key_when_auth_disabled(client):
    response = client.post("/api/verify-key", json={"api_key": "anything"})
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["auth_enabled"] is False


def test_auth_required_without_key_is_configuration_error(monkeypatch):
    monkeypatch.setattr(Config, "AUTH_REQUIRED", True)
    with pytest.raises(ConfigurationError):
        verify_api_key("anything")


def test_verify_api_key(api_key):
    assert verify_api_key("test-secret") is True
    with pytest.raises(AuthenticationError):
        verify_api_key(None)
    with pytest.raises(AuthenticationError):
        verify_api_key("test-secret-but-longer")


@pytest.mark.parametrize("path", ["/api/image/generate", "/v1/images/generations", "/anything/at/all"])
def test_preflight_short_circuits(client, api_key, upstream, path):
    response = client.options(path)
    assert response.status_code == 204
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]
    assert "X-API-Key" in response.headers["access-control-allow-headers"]
    assert response.headers["access-control-max-age"] == "86400"
    assert upstream.call_count == 0


def test_cors_headers_on_success_and_error(client, api_key):
    assert client.get("/health").headers["access-control-allow-origin"] == "*"
    assert client.get("/v1/models").headers["access-control-allow-origin"] == "*"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert "timestamp" in body


def test_info(client):
    body = client.get("/api/info").json()
    assert body["version"] == Config.VERSION
    assert body["services"]["image"]["model"] == "gemini-3-pro-image-preview"
    assert "gemini-2.5-flash-image" in body["services"]["openai"]["available_models"]


def test_config_validation(monkeypatch):
    Config.validate()
    monkeypatch.setattr(Config, "UPSTREAM_TIMEOUT_SECONDS", 0)
    with pytest.raises(ValueError):
        Config.validate()


def test_every_error_code_has_message_and_status():
    for code in ErrorCode:
        message, status = get_error_response(code)
        assert message
        assert 400 <= status < 600


def test_cors_headers_for_browser_origin(client, api_key):
    origin = {"Origin": "https://app.example.com"}
    for response in (client.get("/health", headers=origin), client.get("/v1/models", headers=origin)):
        assert response.headers.get_list("access-control-allow-origin") == ["*"]
        assert "X-API-Key" in response.headers["access-control-allow-headers"]


def test_browser_preflight_is_204(client, upstream):
    response = client.options("/v1/images/generations", headers={
        "Origin": "https://app.example.com",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "Authorization",
    })
    assert response.status_code == 204
    assert response.headers["access-control-allow-origin"] == "*"
    assert upstream.call_count == 0
