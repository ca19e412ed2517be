# bonsai_gateway/services/scraping.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging, random, re, time

from bonsai_gateway.core.models import JobState, ScrapingJob, now_ms
from bonsai_gateway.services.mcp_catalog import ALL_PLATFORMS, McpCatalog

logger = logging.getLogger("bonsai.scraping")

DAY_MS = 24 * 3600 * 1000

CATEGORIES = ["Database", "API Integration", "File System", "Communication", "Automation", "Cloud Services"]
TAGS = ["api", "database", "web", "automation", "files", "cloud", "messaging", "data", "tools", "integration"]
REQUIREMENTS = ["Node.js 18+", "Python 3.8+", "Go 1.19+", "Rust 1.70+", "Java 11+", "Docker", "API credentials"]
DEPENDENCIES = ["@mcp/core", "axios", "express", "dotenv", "lodash", "moment", "winston", "joi"]
INSTALL_COMMANDS = {
    "JavaScript": "npm install @mcp/example-server",
    "Python": "pip install mcp-example-server",
    "Go": "go install github.com/example/mcp-server@latest",
    "Rust": "cargo install mcp-example-server",
    "Java": "mvn install:install-file -Dfile=mcp-server.jar",
}


def discover_servers(source: str, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    """Pretend-scrape one source URL: 1-5 plausible catalog entries."""
    rng = rng or random.Random()
    slug = re.sub(r"[^a-zA-Z0-9]", "-", source)
    label = source.rstrip("/").split("/")[-1] or "Unknown"
    servers = []
    for i in range(1, rng.randint(1, 5) + 1):
        servers.append({
            "id": f"{slug}-server-{i}",
            "name": f"{label} Server {i}",
            "description": f"Discovered MCP server from {source}",
            "version": f"1.{rng.randint(0, 9)}.{rng.randint(0, 9)}",
            "author": f"Developer{rng.randint(0, 99)}",
            "category": rng.choice(CATEGORIES),
            "tags": rng.sample(TAGS, rng.randint(2, 5)),
            "repository": f"{source}/tree/main/server-{i}",
            "install_command": INSTALL_COMMANDS[rng.choice(list(INSTALL_COMMANDS))],
            "requirements": rng.sample(REQUIREMENTS, rng.randint(1, 3)),
            "status": "available",
            "last_updated": now_ms() - rng.randint(0, 29) * DAY_MS,
            "stars": rng.randint(0, 499),
            "downloads": rng.randint(0, 1999),
            "compatibility": list(ALL_PLATFORMS),
            "documentation_url": f"{source}/docs",
            "api_keys_required": [] if rng.random() > 0.5 else ["API_KEY"],
            "dependencies": rng.sample(DEPENDENCIES, rng.randint(1, 4)),
            "discovered_from": source,
            "discovered_at": now_ms(),
        })
    return servers


def run_scraping_job(job: ScrapingJob, catalog: McpCatalog, delay_s: float = 2.0) -> None:
    """Background task: walk the sources, then fold discoveries into the catalog."""
    found: List[Dict[str, Any]] = []
    try:
        total = len(job.sources)
        for n, source in enumerate(job.sources, start=1):
            job.current_source = source
            try:
                servers = discover_servers(source)
                found.extend(servers)
                job.servers_found += len(servers)
            except Exception as e:
                logger.exception("Failed to scrape %s", source)
                job.errors.append({"source": source, "error": str(e)})
            job.progress = round(n / total * 100)
            time.sleep(delay_s)

        job.status = JobState.completed
        job.progress = 100
        job.completed_at = now_ms()
        job.current_source = None
        added = catalog.merge_discovered(found)
        logger.info("Scraping job %s discovered %d servers (%d new)", job.id, len(found), added)
    except Exception as e:
        logger.exception("Scraping job %s failed", job.id)
        job.status = JobState.failed
        job.error = str(e)
