# bonsai_gateway/routers/memory.py
from __future__ import annotations
from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
import logging

from bonsai_gateway.core.errors import ApiError, InternalError, ValidationError
from bonsai_gateway.services.mem0_providers import get_memory_store

logger = logging.getLogger("bonsai.memory")

router = APIRouter(prefix="/memory", tags=["memory"])


class SearchRequest(BaseModel):
    query: Optional[str] = None
    filters: Optional[Dict[str, Any]] = None
    limit: int = Field(default=10, ge=1, le=100)


class StoreRequest(BaseModel):
    id: Optional[str] = None
    content: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


@router.post("/search")
def search_memories(req: SearchRequest):
    if not req.query:
        raise ValidationError("Missing required field: query")
    try:
        found = get_memory_store().search(req.query, req.filters, req.limit)
    except ApiError:
        raise
    except Exception:
        logger.exception("Memory search error")
        raise InternalError("Failed to search memories")
    return {"success": True, **found, "query": req.query}


@router.post("/store")
def store_memory(req: StoreRequest):
    missing = [name for name in ("id", "content") if not getattr(req, name)]
    if missing:
        raise ValidationError(f"Missing required fields: {' and '.join(missing)}")
    try:
        stored = get_memory_store().store(req.id, req.content, req.metadata)
    except ApiError:
        raise
    except Exception:
        logger.exception("Memory store error")
        raise InternalError("Failed to store memory")
    return {"success": True, **stored, "message": "Memory stored successfully"}


@router.post("/test")
def test_memory_connection():
    try:
        info = get_memory_store().ping()
    except ApiError:
        raise
    except Exception:
        logger.exception("Mem0 connection test error")
        raise InternalError("Mem0 connection failed")
    return {"success": True, "status": "connected", **info}
