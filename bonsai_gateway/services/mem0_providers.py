# bonsai_gateway/services/mem0_providers.py
from __future__ import annotations
from typing import Protocol, Dict, Any, Optional
from datetime import datetime, timezone
from functools import lru_cache
import uuid

from bonsai_gateway.config import get_settings
from bonsai_gateway.services.upstream import call_upstream, wants_live


# ---------- Interface ----------
class MemoryStore(Protocol):
    def search(self, query: str, filters: Optional[Dict[str, Any]] = None, limit: int = 10) -> Dict[str, Any]: ...
    def store(self, memory_id: str, content: str, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]: ...
    def ping(self) -> Dict[str, Any]: ...


# ---------- Stub (PROVIDER_MODE=stub only) ----------
class StubMem0:
    """Keeps memories in-process; search is a case-insensitive substring match."""

    def __init__(self):
        self._memories: list[dict] = []

    def search(self, query, filters=None, limit=10):
        q = query.lower()
        hits = [
            m for m in self._memories
            if q in m["memory"].lower()
            and all(m["metadata"].get(k) == v for k, v in (filters or {}).items() if v)
        ]
        return {"results": hits[:limit], "total": len(hits)}

    def store(self, memory_id, content, metadata=None):
        record = {
            "id": uuid.uuid4().hex,
            "memory": content,
            "metadata": {"id": memory_id, **(metadata or {})},
        }
        self._memories.append(record)
        return {"memoryId": record["id"]}

    def ping(self):
        return {"memoriesCount": len(self._memories), "usage": {"current": 0, "limit": 1000000}}


# ---------- Mem0 API ----------
class LiveMem0:
    def __init__(self, api_key: str):
        s = get_settings()
        self.key = api_key
        self.base_url = s.MEM0_API_URL
        self.user_id = s.MEM0_USER_ID

    def search(self, query, filters=None, limit=10):
        params: list[tuple[str, str]] = [("user_id", self.user_id), ("limit", str(limit))]
        for k, v in (filters or {}).items():
            if v:
                params.append((f"metadata.{k}", str(v)))
        data = call_upstream(
            "Mem0", "POST", f"{self.base_url}/memories/search", self.key,
            params=params,
            json={"query": query, "user_id": self.user_id},
        ) or {}
        return {"results": data.get("results") or [], "total": data.get("total") or 0}

    def store(self, memory_id, content, metadata=None):
        body = {
            "messages": [{"role": "user", "content": content}],
            "user_id": self.user_id,
            "metadata": {
                "id": memory_id,
                "type": "system_knowledge",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                **(metadata or {}),
            },
        }
        data = call_upstream("Mem0", "POST", f"{self.base_url}/memories", self.key, json=body) or {}
        return {"memoryId": data.get("id")}

    def ping(self):
        data = call_upstream("Mem0", "GET", f"{self.base_url}/memories", self.key) or {}
        usage = data.get("usage") or {}
        return {
            "memoriesCount": len(data.get("memories") or []),
            "usage": {"current": usage.get("current") or 0, "limit": usage.get("limit") or 1000000},
        }


@lru_cache(maxsize=1)
def stub_memory_store() -> StubMem0:
    return StubMem0()


# ---------- Factory ----------
def get_memory_store() -> MemoryStore:
    key = get_settings().MEM0_API_KEY
    if wants_live("Mem0", key, stub_without_key=False):
        return LiveMem0(key)
    return stub_memory_store()
