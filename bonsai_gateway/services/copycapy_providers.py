# bonsai_gateway/services/copycapy_providers.py
from __future__ import annotations
from typing import Protocol, Dict, Any, Optional
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from urllib.parse import urlparse
import secrets, threading, time

from bonsai_gateway.config import get_settings
from bonsai_gateway.core.errors import NotFoundError, UpstreamError
from bonsai_gateway.services.upstream import call_upstream, wants_live

USER_AGENT = "Bons-AI Research Studio"

DEV_ACCOUNT = {"plan": "pro", "requestsRemaining": 9500, "monthlyLimit": 10000}


class CopyCapyClient(Protocol):
    def account(self) -> Dict[str, Any]: ...
    def scrape(self, url: str, config: Dict[str, Any], webhook: Optional[str] = None) -> Dict[str, Any]: ...
    def job_status(self, job_id: str) -> Dict[str, Any]: ...


def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def mock_summary(url: str) -> str:
    domain = urlparse(url).hostname or url
    return (
        f"Comprehensive documentation for {domain} covering API usage, implementation "
        f"patterns, and best practices. Includes detailed examples and technical "
        f"specifications for developers."
    )


def mock_content(url: str) -> str:
    domain = urlparse(url).hostname or url
    return "\n".join([
        f"# Documentation Analysis for {domain}",
        "",
        "## Overview",
        f"Analysis of the documentation found at {url}: API references, implementation guides and best practices.",
        "",
        "## Key Sections",
        "1. **Getting Started** - Initial setup and configuration",
        "2. **API Reference** - Complete endpoint documentation",
        "3. **Examples** - Code examples and use cases",
        "4. **Best Practices** - Recommended implementation patterns",
        "",
        "## Technical Details",
        "- Authentication and security",
        "- Rate limiting and quota management",
        "- Error handling and debugging",
        "- Performance optimization",
    ])


# ---------- Stub (development mode) ----------
class StubCopyCapy:
    """
    Jobs complete a fixed delay after submission; status is derived from the
    clock, so polling shows running -> completed without a webhook.
    """
    dev_mode = True
    COMPLETE_AFTER_SEC = 10.0

    def __init__(self):
        self._lock = threading.Lock()
        self._jobs: dict[str, dict] = {}

    def account(self) -> Dict[str, Any]:
        return dict(DEV_ACCOUNT)

    def scrape(self, url, config, webhook=None) -> Dict[str, Any]:
        job_id = f"job_{int(time.time() * 1000)}_{secrets.token_hex(5)}"
        now = time.time()
        with self._lock:
            self._jobs[job_id] = {"url": url, "submitted": now, "ready": now + self.COMPLETE_AFTER_SEC}
        return {"jobId": job_id, "estimatedCompletion": _iso(now + self.COMPLETE_AFTER_SEC)}

    def job_status(self, job_id: str) -> Dict[str, Any]:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise NotFoundError("Job not found")

        now = time.time()
        if now < job["ready"]:
            elapsed = now - job["submitted"]
            return {
                "status": "running",
                "jobId": job_id,
                "progress": min(95, int(elapsed / self.COMPLETE_AFTER_SEC * 100)),
                "message": "Processing content...",
            }
        content = mock_content(job["url"])
        return {
            "status": "completed",
            "jobId": job_id,
            "data": {
                "content": content,
                "summary": mock_summary(job["url"]),
                "metadata": {
                    "wordCount": len(content.split()),
                    "contentType": "article",
                    "language": "en",
                },
            },
            "completedAt": _iso(job["ready"]),
            "processingTime": int((job["ready"] - job["submitted"]) * 1000),
        }


# ---------- CopyCapy API ----------
class LiveCopyCapy:
    dev_mode = False

    def __init__(self, api_key: str):
        s = get_settings()
        self.key = api_key
        self.base_url = s.COPYCAPY_API_URL
        self.public_base_url = s.PUBLIC_BASE_URL

    def account(self) -> Dict[str, Any]:
        data = call_upstream("CopyCapy", "GET", f"{self.base_url}/test", self.key) or {}
        return {
            "plan": data.get("plan") or "free",
            "requestsRemaining": data.get("requestsRemaining") or 0,
            "monthlyLimit": data.get("monthlyLimit") or 1000,
        }

    def scrape(self, url, config, webhook=None) -> Dict[str, Any]:
        config = config or {}
        body = {
            "url": url,
            "options": {
                "extractText": config.get("extractText", True),
                "extractMetadata": config.get("extractMetadata", True),
                "extractImages": config.get("extractImages", False),
                "followLinks": config.get("followLinks", False),
                "maxDepth": config.get("maxDepth", 1),
                "respectRobots": True,
                "userAgent": USER_AGENT,
            },
        }
        if webhook:
            body["webhook"] = f"{self.public_base_url}{webhook}"
        data = call_upstream("CopyCapy", "POST", f"{self.base_url}/scrape", self.key, json=body) or {}
        return {
            "jobId": data.get("jobId"),
            "estimatedCompletion": data.get("estimatedCompletion"),
            "cost": data.get("cost") or 0,
        }

    def job_status(self, job_id: str) -> Dict[str, Any]:
        try:
            data = call_upstream("CopyCapy", "GET", f"{self.base_url}/jobs/{job_id}", self.key) or {}
        except UpstreamError as e:
            if e.upstream_status == 404:
                raise NotFoundError("Job not found") from e
            raise
        return {
            "status": data.get("status"),
            "jobId": data.get("jobId"),
            "progress": data.get("progress"),
            "data": data.get("result"),
            "completedAt": data.get("completedAt"),
            "processingTime": data.get("processingTime"),
            "error": data.get("error"),
        }


@lru_cache(maxsize=1)
def stub_copycapy() -> StubCopyCapy:
    return StubCopyCapy()


def get_copycapy(api_key: Optional[str] = None) -> CopyCapyClient:
    key = api_key or get_settings().COPYCAPY_API_KEY
    if wants_live("CopyCapy", key):
        return LiveCopyCapy(key)
    return stub_copycapy()
