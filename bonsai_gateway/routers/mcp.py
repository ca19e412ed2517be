# bonsai_gateway/routers/mcp.py
from __future__ import annotations
from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, Field
from typing import Optional, List
import logging

from bonsai_gateway.config import get_settings
from bonsai_gateway.core.errors import ApiError, InternalError, ValidationError
from bonsai_gateway.core.registry import (
    McpRegistry, ScrapingJobSlot, get_mcp_registry, get_scraping_slot,
)
from bonsai_gateway.services.mcp_catalog import McpCatalog, get_mcp_catalog
from bonsai_gateway.services.scraping import run_scraping_job

logger = logging.getLogger("bonsai.mcp")

router = APIRouter(prefix="/mcp", tags=["mcp"])


class ServerRequest(BaseModel):
    server_id: Optional[str] = None


class ScrapeStartRequest(BaseModel):
    sources: Optional[List[str]] = None


class CatalogServer(BaseModel):
    """Catalog entry as sent by the marketplace editor; every field optional so PUT can patch."""
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    repository: Optional[str] = None
    install_command: Optional[str] = None
    requirements: Optional[List[str]] = None
    status: Optional[str] = None
    stars: Optional[int] = Field(default=None, ge=0)
    downloads: Optional[int] = Field(default=None, ge=0)
    compatibility: Optional[List[str]] = None
    documentation_url: Optional[str] = None
    api_keys_required: Optional[List[str]] = None
    dependencies: Optional[List[str]] = None
    test_endpoint: Optional[str] = None

    def as_entry(self) -> dict:
        # null means "not given"
        return self.model_dump(exclude_none=True)


def _server_id(req: ServerRequest) -> str:
    if not req.server_id:
        raise ValidationError("Server ID is required")
    return req.server_id


# ---------- Registry ----------
@router.post("/install")
async def install_server(req: ServerRequest, registry: McpRegistry = Depends(get_mcp_registry)):
    server_id = _server_id(req)
    try:
        await registry.install(server_id)
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to install server %s", server_id)
        raise InternalError("Failed to install server")
    return {"success": True, "server_id": server_id, "message": "Server installed successfully"}


@router.post("/start")
async def start_server(req: ServerRequest, registry: McpRegistry = Depends(get_mcp_registry)):
    server_id = _server_id(req)
    try:
        await registry.start(server_id)
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to start server %s", server_id)
        raise InternalError("Failed to start server")
    return {"success": True, "server_id": server_id, "message": "Server started successfully"}


@router.post("/stop")
async def stop_server(req: ServerRequest, registry: McpRegistry = Depends(get_mcp_registry)):
    server_id = _server_id(req)
    try:
        await registry.stop(server_id)
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to stop server %s", server_id)
        raise InternalError("Failed to stop server")
    return {"success": True, "server_id": server_id, "message": "Server stopped successfully"}


@router.get("/installed")
def installed_servers(registry: McpRegistry = Depends(get_mcp_registry)):
    try:
        listing = registry.list()
    except Exception:
        logger.exception("Failed to get installed servers")
        raise InternalError("Failed to get installed servers")
    return {"success": True, **listing}


# ---------- Catalog ----------
@router.get("/servers")
def list_catalog(catalog: McpCatalog = Depends(get_mcp_catalog)):
    try:
        snapshot = catalog.snapshot()
    except Exception:
        logger.exception("Failed to load MCP servers")
        raise InternalError("Failed to load MCP servers")
    return {"success": True, **snapshot}


@router.post("/servers")
def add_catalog_server(req: CatalogServer, catalog: McpCatalog = Depends(get_mcp_catalog)):
    try:
        server = catalog.add(req.as_entry())
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to add MCP server")
        raise InternalError("Failed to add MCP server")
    return {"success": True, "server": server, "message": "MCP server added successfully"}


@router.put("/servers")
def update_catalog_server(req: CatalogServer, catalog: McpCatalog = Depends(get_mcp_catalog)):
    try:
        server = catalog.update(req.as_entry())
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to update MCP server")
        raise InternalError("Failed to update MCP server")
    return {"success": True, "server": server, "message": "MCP server updated successfully"}


# ---------- Scraping ----------
@router.post("/scraping/start")
def start_scraping(
    req: ScrapeStartRequest,
    background: BackgroundTasks,
    slot: ScrapingJobSlot = Depends(get_scraping_slot),
    catalog: McpCatalog = Depends(get_mcp_catalog),
):
    if not req.sources:
        raise ValidationError("Sources array is required")
    try:
        job = slot.claim(req.sources)
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to start scraping")
        raise InternalError("Failed to start scraping job")

    delay_s = get_settings().SCRAPE_SOURCE_DELAY_MS / 1000.0
    background.add_task(run_scraping_job, job, catalog, delay_s)
    return {"success": True, "job": job.to_api(), "message": "Scraping job started successfully"}


@router.get("/scraping/status")
def scraping_status(slot: ScrapingJobSlot = Depends(get_scraping_slot)):
    job = slot.current
    return {
        "success": True,
        "job": job.to_api() if job else None,
        "message": "Scraping job found" if job else "No active scraping job",
    }
