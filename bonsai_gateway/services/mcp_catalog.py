# bonsai_gateway/services/mcp_catalog.py
from __future__ import annotations
from functools import lru_cache
from typing import Any, Dict, List
import copy, threading

from bonsai_gateway.core.errors import ConflictError, NotFoundError, ValidationError
from bonsai_gateway.core.models import now_ms

REQUIRED_FIELDS = ("id", "name", "description", "version", "author", "category")
ALL_PLATFORMS = ["Windows", "macOS", "Linux"]

HOUR_MS = 3600 * 1000


def _entry(id, name, description, version, author, category, tags, repository, install_command,
           requirements, age_ms, stars, downloads, documentation_url, api_keys_required, dependencies):
    return {
        "id": id,
        "name": name,
        "description": description,
        "version": version,
        "author": author,
        "category": category,
        "tags": tags,
        "repository": repository,
        "install_command": install_command,
        "requirements": requirements,
        "status": "available",
        "last_updated": now_ms() - age_ms,
        "stars": stars,
        "downloads": downloads,
        "compatibility": list(ALL_PLATFORMS),
        "documentation_url": documentation_url,
        "api_keys_required": api_keys_required,
        "dependencies": dependencies,
        "test_endpoint": f"/api/mcp/test/{id.split('-')[0]}",
    }


def seed_catalog() -> List[Dict[str, Any]]:
    return [
        _entry("filesystem-server", "Filesystem Server", "Provides file system operations through MCP protocol",
               "1.0.0", "MCP Community", "File System", ["filesystem", "files", "io"],
               "https://github.com/mcp-community/filesystem-server", "npm install @mcp/filesystem-server",
               ["Node.js 18+"], 24 * HOUR_MS, 245, 1250, "https://docs.mcp.dev/servers/filesystem", [], ["@mcp/core"]),
        _entry("database-server", "Database MCP Server", "Connect to various databases through MCP protocol",
               "2.1.0", "DataCorp", "Database", ["database", "sql", "nosql", "postgres", "mongodb"],
               "https://github.com/datacorp/mcp-database-server", "pip install mcp-database-server",
               ["Python 3.8+", "Database drivers"], 12 * HOUR_MS, 189, 890, "https://database-mcp.readthedocs.io",
               ["DATABASE_URL"], ["psycopg2", "pymongo"]),
        _entry("weather-api-server", "Weather API Server", "Access weather data from multiple providers via MCP",
               "1.5.2", "WeatherDev", "API Integration", ["weather", "api", "climate", "forecast"],
               "https://github.com/weatherdev/mcp-weather-server", "npm install @weather/mcp-server",
               ["Node.js 16+", "Weather API keys"], 6 * HOUR_MS, 156, 672, "https://weather-mcp.dev/docs",
               ["OPENWEATHER_API_KEY", "WEATHERSTACK_API_KEY"], ["axios", "dotenv"]),
        _entry("git-server", "Git MCP Server", "Git operations and repository management through MCP",
               "1.2.1", "GitTools", "Version Control", ["git", "version-control", "repository", "commit"],
               "https://github.com/gittools/mcp-git-server", "go install github.com/gittools/mcp-git-server@latest",
               ["Go 1.19+", "Git"], 2 * HOUR_MS, 298, 1456, "https://git-mcp.gittools.dev", ["GITHUB_TOKEN"], ["git"]),
        _entry("slack-server", "Slack Integration Server", "Send messages and interact with Slack through MCP",
               "0.9.0", "SlackMCP Team", "Communication", ["slack", "messaging", "notifications", "chat"],
               "https://github.com/slackmcp/mcp-slack-server", "npm install @slackmcp/server",
               ["Node.js 18+", "Slack App"], 1 * HOUR_MS, 123, 445, "https://slack-mcp.dev",
               ["SLACK_BOT_TOKEN", "SLACK_SIGNING_SECRET"], ["@slack/bolt"]),
        _entry("aws-server", "AWS MCP Server", "AWS services integration through MCP protocol",
               "2.0.0", "AWS Community", "Cloud Services", ["aws", "cloud", "s3", "lambda", "ec2"],
               "https://github.com/aws-community/mcp-aws-server", "pip install aws-mcp-server",
               ["Python 3.9+", "AWS CLI", "boto3"], 3 * HOUR_MS, 334, 2156, "https://aws-mcp.amazonaws.com",
               ["AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"], ["boto3", "botocore"]),
        _entry("browser-automation-server", "Browser Automation Server",
               "Automate web browsers through MCP for testing and scraping",
               "1.3.0", "AutoBrowser", "Automation", ["browser", "automation", "scraping", "testing", "playwright"],
               "https://github.com/autobrowser/mcp-browser-server", "npm install @autobrowser/mcp-server",
               ["Node.js 18+", "Playwright"], int(1.5 * HOUR_MS), 201, 723, "https://browser-mcp.autobrowser.dev",
               [], ["playwright", "@playwright/test"]),
        _entry("email-server", "Email MCP Server", "Send and receive emails through various providers via MCP",
               "1.1.0", "EmailMCP", "Communication", ["email", "smtp", "imap", "gmail", "outlook"],
               "https://github.com/emailmcp/mcp-email-server", "npm install @emailmcp/server",
               ["Node.js 16+", "Email provider credentials"], 4 * HOUR_MS, 87, 234, "https://email-mcp.dev",
               ["EMAIL_PROVIDER_API_KEY"], ["nodemailer", "imap"]),
    ]


class McpCatalog:
    """Marketplace listing of MCP servers that can be installed."""

    def __init__(self, servers: List[Dict[str, Any]] | None = None):
        self._lock = threading.Lock()
        self._servers: List[Dict[str, Any]] = list(servers if servers is not None else seed_catalog())

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            servers = sorted(
                (copy.deepcopy(s) for s in self._servers),
                key=lambda s: s.get("stars", 0) + s.get("downloads", 0),
                reverse=True,
            )
        categories = list(dict.fromkeys(s["category"] for s in servers))
        return {
            "servers": servers,
            "total": len(servers),
            "categories": categories,
            "last_updated": max((s.get("last_updated", 0) for s in servers), default=None),
        }

    def add(self, data: Dict[str, Any]) -> Dict[str, Any]:
        for f in REQUIRED_FIELDS:
            if not data.get(f):
                raise ValidationError(f"Missing required field: {f}")
        server = {
            **data,
            "status": "available",
            "last_updated": now_ms(),
            "stars": 0,
            "downloads": 0,
            "tags": data.get("tags") or [],
            "requirements": data.get("requirements") or [],
            "compatibility": data.get("compatibility") or list(ALL_PLATFORMS),
            "api_keys_required": data.get("api_keys_required") or [],
            "dependencies": data.get("dependencies") or [],
        }
        with self._lock:
            if any(s["id"] == server["id"] for s in self._servers):
                raise ConflictError("Server with this ID already exists")
            self._servers.append(server)
        return copy.deepcopy(server)

    def update(self, data: Dict[str, Any]) -> Dict[str, Any]:
        server_id = data.get("id")
        if not server_id:
            raise ValidationError("Server ID is required")
        with self._lock:
            for i, s in enumerate(self._servers):
                if s["id"] == server_id:
                    self._servers[i] = {**s, **data, "last_updated": now_ms()}
                    return copy.deepcopy(self._servers[i])
        raise NotFoundError("Server not found")

    def merge_discovered(self, discovered: List[Dict[str, Any]]) -> int:
        """Add servers found by a scraping run; ids already listed are skipped."""
        added = 0
        with self._lock:
            known = {s["id"] for s in self._servers}
            for s in discovered:
                if s["id"] not in known:
                    self._servers.append(s)
                    known.add(s["id"])
                    added += 1
        return added


@lru_cache(maxsize=1)
def get_mcp_catalog() -> McpCatalog:
    return McpCatalog()
