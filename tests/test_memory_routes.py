"""
Mem0 memory routes.
"""

import pytest


@pytest.fixture
def mem0_key(set_env):
    set_env(MEM0_API_KEY="m0-key", MEM0_USER_ID="studio")


class TestValidation:
    def test_store_without_content(self, client):
        r = client.post("/api/memory/store", json={"id": "k1"})
        assert r.status_code == 400
        assert r.json()["success"] is False
        assert "content" in r.json()["error"]

    def test_store_without_anything(self, client):
        r = client.post("/api/memory/store", json={})
        assert r.json()["error"] == "Missing required fields: id and content"

    def test_search_without_query(self, client):
        r = client.post("/api/memory/search", json={"limit": 5})
        assert r.status_code == 400
        assert r.json()["error"] == "Missing required field: query"

    def test_search_limit_bounds(self, client, mem0_key):
        r = client.post("/api/memory/search", json={"query": "x", "limit": 0})
        assert r.status_code == 400


class TestNotConfigured:
    @pytest.mark.parametrize("path,body", [
        ("/api/memory/search", {"query": "router"}),
        ("/api/memory/store", {"id": "k1", "content": "hello"}),
        ("/api/memory/test", None),
    ])
    def test_without_key(self, client, upstream, path, body):
        r = client.post(path, json=body)
        assert r.status_code == 400
        assert r.json() == {"success": False, "error": "Mem0 API key not configured"}
        upstream.assert_not_called()


class TestLive:
    def test_search_forwards_filters_and_limit(self, client, upstream, http_response, mem0_key):
        upstream.return_value = http_response(200, {"results": [{"id": "a", "memory": "router notes"}], "total": 1})
        r = client.post("/api/memory/search", json={
            "query": "router", "filters": {"type": "docs", "empty": ""}, "limit": 3,
        })
        assert r.status_code == 200
        body = r.json()
        assert body == {"success": True, "results": [{"id": "a", "memory": "router notes"}], "total": 1, "query": "router"}

        args, kwargs = upstream.call_args
        assert args[0] == "POST"
        assert args[1].endswith("/memories/search")
        assert ("user_id", "studio") in kwargs["params"]
        assert ("limit", "3") in kwargs["params"]
        assert ("metadata.type", "docs") in kwargs["params"]
        assert all(k != "metadata.empty" for k, _ in kwargs["params"])
        assert kwargs["headers"]["Authorization"] == "Bearer m0-key"

    def test_store_wraps_content_as_message(self, client, upstream, http_response, mem0_key):
        upstream.return_value = http_response(200, {"id": "mem-9"})
        r = client.post("/api/memory/store", json={"id": "k1", "content": "hello", "metadata": {"source": "ui"}})
        assert r.status_code == 200
        assert r.json() == {"success": True, "memoryId": "mem-9", "message": "Memory stored successfully"}

        sent = upstream.call_args.kwargs["json"]
        assert sent["messages"] == [{"role": "user", "content": "hello"}]
        assert sent["metadata"]["id"] == "k1"
        assert sent["metadata"]["type"] == "system_knowledge"
        assert sent["metadata"]["source"] == "ui"

    def test_connection_probe(self, client, upstream, http_response, mem0_key):
        upstream.return_value = http_response(200, {"memories": [{}, {}], "usage": {"current": 2}})
        body = client.post("/api/memory/test").json()
        assert body["status"] == "connected"
        assert body["memoriesCount"] == 2
        assert body["usage"] == {"current": 2, "limit": 1000000}

    def test_upstream_error_is_400(self, client, upstream, http_response, mem0_key):
        upstream.return_value = http_response(401, text="bad key")
        r = client.post("/api/memory/test")
        assert r.status_code == 400
        assert r.json()["success"] is False


class TestStubMode:
    def test_store_then_search(self, client, set_env):
        set_env(PROVIDER_MODE="stub")
        client.post("/api/memory/store", json={"id": "k1", "content": "DeepSeek pricing notes", "metadata": {"type": "docs"}})
        client.post("/api/memory/store", json={"id": "k2", "content": "Cursor sync options"})

        body = client.post("/api/memory/search", json={"query": "deepseek"}).json()
        assert body["total"] == 1
        assert body["results"][0]["metadata"]["id"] == "k1"

        filtered = client.post("/api/memory/search", json={"query": "o", "filters": {"type": "docs"}}).json()
        assert [m["metadata"]["id"] for m in filtered["results"]] == ["k1"]

        assert client.post("/api/memory/test").json()["memoriesCount"] == 2
