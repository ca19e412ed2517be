"""
Shared fixtures for the gateway tests.

Every test starts from a clean environment: no vendor keys, zero simulated
latency, DATA_DIR in a temp dir and all cached singletons rebuilt.
"""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from bonsai_gateway.config import get_settings
from bonsai_gateway.core.registry import get_mcp_registry, get_scraping_slot
from bonsai_gateway.services.ai_budget import get_budget_monitor
from bonsai_gateway.services.copycapy_providers import stub_copycapy
from bonsai_gateway.services.mcp_catalog import get_mcp_catalog
from bonsai_gateway.services.mem0_providers import stub_memory_store

VENDOR_KEYS = (
    "CURSOR_API_KEY",
    "SCRAPYBARA_API_KEY",
    "MEM0_API_KEY",
    "PIPEDREAM_API_KEY",
    "COPYCAPY_API_KEY",
    "DEEPSEEK_API_KEY",
)

CACHED = (
    get_settings,
    get_mcp_registry,
    get_scraping_slot,
    get_mcp_catalog,
    get_budget_monitor,
    stub_memory_store,
    stub_copycapy,
)


def _clear_caches():
    for fn in CACHED:
        fn.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in VENDOR_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PROVIDER_MODE", "auto")
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.setenv("MCP_REGISTRY_PATH", str(tmp_path / "mcp_registry.json"))
    for name in ("MCP_INSTALL_DELAY_MS", "MCP_START_DELAY_MS", "MCP_STOP_DELAY_MS", "SCRAPE_SOURCE_DELAY_MS"):
        monkeypatch.setenv(name, "0")
    _clear_caches()
    yield
    _clear_caches()


@pytest.fixture
def set_env(monkeypatch):
    """Set environment variables and rebuild settings."""
    def _set(**values):
        for k, v in values.items():
            monkeypatch.setenv(k, v)
        get_settings.cache_clear()
    return _set


@pytest.fixture
def client():
    from bonsai_gateway.main import app
    with TestClient(app) as c:
        yield c


def fake_response(status_code=200, payload=None, text=None):
    """Stand-in for requests.Response as consumed by call_upstream."""
    resp = Mock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.text = text if text is not None else ("" if payload is None else str(payload))
    resp.content = b"" if payload is None else b"{}"
    resp.json.return_value = payload
    return resp


@pytest.fixture
def upstream(monkeypatch):
    """Patch the outbound HTTP call; configure .return_value / .side_effect per test."""
    mock = Mock(return_value=fake_response(200, {}))
    monkeypatch.setattr("bonsai_gateway.services.upstream.requests.request", mock)
    return mock


@pytest.fixture
def http_response():
    return fake_response
