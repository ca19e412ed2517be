"""
App wiring: health, root banner, error envelope, request ids and settings.
"""

import pytest

from bonsai_gateway.config import Settings


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["success"] is True


def test_health_reports_configuration_without_keys(client, set_env, tmp_path):
    set_env(CURSOR_API_KEY="secret-cursor")
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["providerMode"] == "auto"
    assert body["dataDir"] == str(tmp_path.resolve())
    assert body["configured"]["cursor"] is True
    assert body["configured"]["mem0"] is False
    assert "secret-cursor" not in str(body)


def test_unknown_route_uses_envelope(client):
    r = client.get("/api/nothing-here")
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_malformed_json_is_400(client):
    r = client.post(
        "/api/mcp/install",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "Validation error"
    assert body["details"]


def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"x-request-id": "abc123"})
    assert r.headers["x-request-id"] == "abc123"


def test_request_id_is_minted(client):
    r = client.get("/health")
    assert len(r.headers["x-request-id"]) == 12


def test_unhandled_error_is_500_envelope(client, monkeypatch):
    class Broken:
        def run(self, *args):
            raise RuntimeError("disk on fire")

    monkeypatch.setattr("bonsai_gateway.routers.code.get_code_runner", lambda: Broken())
    r = client.post("/api/code/execute", json={"workspace": "/home/scrapybara/p"})
    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Failed to execute code"}


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MCP_REGISTRY_PATH", raising=False)
        s = Settings()
        assert s.PROVIDER_MODE == "auto"
        assert s.WORKSPACE_PREFIX == "/home/scrapybara/"
        assert s.MCP_REGISTRY_PATH.endswith("mcp_registry.json")
        assert s.configured_vendors() == {
            "cursor": False, "scrapybara": False, "mem0": False,
            "pipedream": False, "copycapy": False, "deepseek": False,
        }

    def test_blank_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("MEM0_USER_ID", "   ")
        monkeypatch.setenv("CURSOR_API_KEY", "")
        s = Settings()
        assert s.MEM0_USER_ID == "bons-ai-system"
        assert s.CURSOR_API_KEY is None

    def test_origins_are_split(self, monkeypatch):
        monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.test, http://b.test,")
        assert Settings().ALLOWED_ORIGINS == ["http://a.test", "http://b.test"]

    def test_unknown_provider_mode(self, monkeypatch):
        monkeypatch.setenv("PROVIDER_MODE", "sometimes")
        with pytest.raises(ValueError):
            Settings()
