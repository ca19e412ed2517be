"""
HTTP tests for the MCP registry, catalog and scraping routes.
"""

import pytest


def install(client, server_id):
    return client.post("/api/mcp/install", json={"server_id": server_id})


@pytest.mark.parametrize("route", ["install", "start", "stop"])
def test_missing_server_id_is_rejected(client, route):
    r = client.post(f"/api/mcp/{route}", json={})
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "Server ID is required"}


def test_install_twice_returns_409(client):
    first = install(client, "x")
    assert first.status_code == 200
    assert first.json() == {"success": True, "server_id": "x", "message": "Server installed successfully"}

    second = install(client, "x")
    assert second.status_code == 409
    assert second.json() == {"success": False, "error": "Server is already installed"}


def test_start_before_install_is_404(client):
    r = client.post("/api/mcp/start", json={"server_id": "nope"})
    assert r.status_code == 404
    assert r.json()["error"] == "Server is not installed"


def test_stop_when_not_running_is_404(client):
    install(client, "a")
    r = client.post("/api/mcp/stop", json={"server_id": "a"})
    assert r.status_code == 404
    assert r.json()["error"] == "Server is not running"


def test_start_twice_returns_409(client):
    install(client, "a")
    assert client.post("/api/mcp/start", json={"server_id": "a"}).status_code == 200
    r = client.post("/api/mcp/start", json={"server_id": "a"})
    assert r.status_code == 409
    assert r.json()["error"] == "Server is already running"


def test_installed_reports_totals(client):
    install(client, "a")
    client.post("/api/mcp/start", json={"server_id": "a"})

    body = client.get("/api/mcp/installed").json()
    assert body["success"] is True
    assert body["servers"] == ["a"]
    assert body["running"] == ["a"]
    assert body["total_installed"] == 1
    assert body["total_running"] == 1


def test_stop_removes_from_running(client):
    install(client, "a")
    client.post("/api/mcp/start", json={"server_id": "a"})
    r = client.post("/api/mcp/stop", json={"server_id": "a"})
    assert r.json()["message"] == "Server stopped successfully"
    assert client.get("/api/mcp/installed").json()["total_running"] == 0


def test_registry_is_shared_between_handlers(client):
    # install and start go through the same injected store
    install(client, "shared")
    assert client.post("/api/mcp/start", json={"server_id": "shared"}).status_code == 200


@pytest.mark.parametrize("content", ["null", '["a"]', '{"installed": "abc"}'])
def test_malformed_registry_file_does_not_break_routes(client, tmp_path, content):
    (tmp_path / "mcp_registry.json").write_text(content)

    r = client.get("/api/mcp/installed")
    assert r.status_code == 200
    assert r.json()["total_installed"] == 0
    assert install(client, "a").status_code == 200


def test_wrong_type_is_validation_error(client):
    r = client.post("/api/mcp/install", json={"server_id": ["not", "a", "string"]})
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert r.json()["error"] == "Validation error"


class TestCatalog:
    def test_sorted_by_popularity(self, client):
        body = client.get("/api/mcp/servers").json()
        assert body["success"] is True
        assert body["total"] == 8
        scores = [s["stars"] + s["downloads"] for s in body["servers"]]
        assert scores == sorted(scores, reverse=True)
        assert body["servers"][0]["id"] == "aws-server"
        assert "Communication" in body["categories"]
        assert len(body["categories"]) == len(set(body["categories"]))

    def test_add_requires_fields(self, client):
        r = client.post("/api/mcp/servers", json={"id": "new", "name": "New"})
        assert r.status_code == 400
        assert r.json()["error"] == "Missing required field: description"

    def test_add_and_duplicate(self, client):
        server = {
            "id": "notes-server", "name": "Notes", "description": "Notes via MCP",
            "version": "0.1.0", "author": "me", "category": "Productivity",
        }
        r = client.post("/api/mcp/servers", json=server)
        assert r.status_code == 200
        added = r.json()["server"]
        assert added["stars"] == 0
        assert added["compatibility"] == ["Windows", "macOS", "Linux"]
        assert client.get("/api/mcp/servers").json()["total"] == 9

        dup = client.post("/api/mcp/servers", json=server)
        assert dup.status_code == 409

    def test_update(self, client):
        r = client.put("/api/mcp/servers", json={"id": "git-server", "version": "2.0.0"})
        assert r.status_code == 200
        assert r.json()["server"]["version"] == "2.0.0"
        assert r.json()["server"]["name"] == "Git MCP Server"

    def test_update_unknown_is_404(self, client):
        r = client.put("/api/mcp/servers", json={"id": "missing"})
        assert r.status_code == 404
        assert r.json()["error"] == "Server not found"

    def test_update_without_id_is_400(self, client):
        r = client.put("/api/mcp/servers", json={"version": "1"})
        assert r.status_code == 400

    @pytest.mark.parametrize("patch", [
        {"stars": "many"},
        {"downloads": [1, 2]},
        {"stars": -5},
        {"category": ["X"]},
        {"tags": "api"},
    ])
    def test_update_with_bad_types_is_rejected(self, client, patch):
        r = client.put("/api/mcp/servers", json={"id": "git-server", **patch})
        assert r.status_code == 400
        assert r.json()["error"] == "Validation error"

        listing = client.get("/api/mcp/servers")
        assert listing.status_code == 200
        git = next(s for s in listing.json()["servers"] if s["id"] == "git-server")
        assert git["stars"] == 298

    def test_add_with_list_category_is_rejected(self, client):
        server = {
            "id": "odd-server", "name": "Odd", "description": "d",
            "version": "1.0.0", "author": "me", "category": ["X"],
        }
        r = client.post("/api/mcp/servers", json=server)
        assert r.status_code == 400
        assert client.get("/api/mcp/servers").json()["total"] == 8

    def test_null_fields_leave_entry_untouched(self, client):
        r = client.put("/api/mcp/servers", json={"id": "git-server", "stars": None, "category": None})
        assert r.status_code == 200
        assert r.json()["server"]["stars"] == 298
        assert r.json()["server"]["category"] == "Version Control"
        assert client.get("/api/mcp/servers").status_code == 200


class TestScraping:
    def test_status_without_job(self, client):
        body = client.get("/api/mcp/scraping/status").json()
        assert body == {"success": True, "job": None, "message": "No active scraping job"}

    def test_sources_required(self, client):
        r = client.post("/api/mcp/scraping/start", json={"sources": []})
        assert r.status_code == 400
        assert r.json()["error"] == "Sources array is required"

    def test_job_runs_and_feeds_catalog(self, client):
        r = client.post("/api/mcp/scraping/start", json={"sources": ["https://github.com/acme/tools"]})
        assert r.status_code == 200
        started = r.json()["job"]
        assert started["status"] == "running"
        assert started["progress"] == 0

        # the background task has finished by the time TestClient returns
        status = client.get("/api/mcp/scraping/status").json()
        assert status["message"] == "Scraping job found"
        job = status["job"]
        assert job["id"] == started["id"]
        assert job["status"] == "completed"
        assert job["progress"] == 100
        assert 1 <= job["servers_found"] <= 5

        catalog = client.get("/api/mcp/servers").json()
        assert catalog["total"] == 8 + job["servers_found"]

    def test_job_runner_walks_every_source(self):
        from bonsai_gateway.core.models import JobState, ScrapingJob
        from bonsai_gateway.services.mcp_catalog import McpCatalog
        from bonsai_gateway.services.scraping import run_scraping_job

        job = ScrapingJob(sources=["https://github.com/a", "https://github.com/b"])
        catalog = McpCatalog()
        run_scraping_job(job, catalog, delay_s=0)

        assert job.status == JobState.completed
        assert job.current_source is None
        assert job.completed_at is not None
        assert 2 <= job.servers_found <= 10
        assert catalog.snapshot()["total"] == 8 + job.servers_found

    def test_running_job_blocks_new_one(self, client):
        from bonsai_gateway.core.registry import get_scraping_slot

        get_scraping_slot().claim(["https://github.com/busy"])
        r = client.post("/api/mcp/scraping/start", json={"sources": ["https://github.com/other"]})
        assert r.status_code == 409
        assert r.json()["error"] == "Another scraping job is already running"
