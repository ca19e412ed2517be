# bonsai_gateway/routers/research.py
from __future__ import annotations
from fastapi import APIRouter
from pydantic import BaseModel
from typing import Optional
from urllib.parse import urlparse
import logging

from bonsai_gateway.core.errors import ApiError, InternalError, UpstreamError, ValidationError
from bonsai_gateway.services.copycapy_providers import DEV_ACCOUNT, get_copycapy

logger = logging.getLogger("bonsai.research")

router = APIRouter(prefix="/research/copyCapy", tags=["research"])


class CopyCapyTestRequest(BaseModel):
    apiKey: Optional[str] = None


class ScrapeConfig(BaseModel):
    extractText: bool = True
    extractMetadata: bool = True
    extractImages: bool = False
    followLinks: bool = False
    maxDepth: int = 1


class ScrapeRequest(BaseModel):
    url: Optional[str] = None
    config: Optional[ScrapeConfig] = None
    webhook: Optional[str] = None


def _valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@router.post("/test")
def test_copycapy_connection(req: CopyCapyTestRequest):
    if not req.apiKey:
        raise ValidationError("API key required")
    try:
        client = get_copycapy(req.apiKey)
        account = client.account()
    except UpstreamError as e:
        if e.upstream_status is not None:
            raise UpstreamError("Failed to connect to CopyCapy", upstream_status=e.upstream_status) from e
        logger.warning("CopyCapy unreachable (%s); answering in development mode", e)
        return {
            "success": True,
            "message": "CopyCapy connection successful (development mode)",
            "accountInfo": dict(DEV_ACCOUNT),
        }
    except Exception:
        logger.exception("CopyCapy test error")
        raise InternalError("Failed to test CopyCapy connection")
    suffix = " (development mode)" if client.dev_mode else ""
    return {"success": True, "message": f"CopyCapy connection successful{suffix}", "accountInfo": account}


@router.post("/scrape")
def start_copycapy_scrape(req: ScrapeRequest):
    if not req.url:
        raise ValidationError("URL is required")
    if not _valid_url(req.url):
        raise ValidationError("Invalid URL format")
    try:
        client = get_copycapy()
        job = client.scrape(req.url, (req.config or ScrapeConfig()).model_dump(), req.webhook)
    except ApiError:
        raise
    except Exception:
        logger.exception("CopyCapy scrape error")
        raise InternalError("Failed to start scraping job")

    message = "Scraping job started (development mode)" if client.dev_mode else "Scraping job started successfully"
    return {"success": True, "message": message, **job}


@router.get("/status/{job_id}")
def copycapy_job_status(job_id: str):
    try:
        status = get_copycapy().job_status(job_id)
    except ApiError:
        raise
    except Exception:
        logger.exception("Job status check error")
        raise InternalError("Failed to check job status")
    return {"success": True, **status}
