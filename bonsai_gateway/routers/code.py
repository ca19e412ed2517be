# bonsai_gateway/routers/code.py
from __future__ import annotations
from fastapi import APIRouter
from pydantic import BaseModel
from typing import Optional, List, Dict, Any, Literal
import logging, posixpath

from bonsai_gateway.config import get_settings
from bonsai_gateway.core.errors import ApiError, InternalError, UpstreamError, ValidationError
from bonsai_gateway.services.code_runner import get_code_runner
from bonsai_gateway.services.cursor_providers import get_cursor
from bonsai_gateway.services.deepseek_providers import CAPABILITIES, LIMITS, PRICING, get_deepseek

logger = logging.getLogger("bonsai.code")

router = APIRouter(prefix="/code", tags=["code"])


# ---------- Models ----------
class CursorConnectRequest(BaseModel):
    workspace: Optional[str] = None
    apiKey: Optional[str] = None


class SyncOptions(BaseModel):
    autoSync: bool = True
    conflictResolution: Literal["manual", "auto", "cursor-wins", "web-wins"] = "manual"
    syncInterval: int = 5  # seconds


class SyncRequest(BaseModel):
    enabled: bool = False
    files: Optional[List[str]] = None
    options: Optional[SyncOptions] = None


class WorkspaceFile(BaseModel):
    id: Optional[str] = None
    name: str
    path: str
    content: str = ""


class ExecuteRequest(BaseModel):
    files: List[WorkspaceFile] = []
    command: str = ""
    workspace: Optional[str] = None


class DeepSeekTestRequest(BaseModel):
    apiKey: Optional[str] = None


def check_workspace(workspace: Optional[str]) -> str:
    if not workspace:
        raise ValidationError("Workspace path is required")
    workspace = posixpath.normpath(workspace)
    if not (workspace + "/").startswith(get_settings().WORKSPACE_PREFIX):
        raise ValidationError("Invalid workspace path")
    return workspace


# ---------- Cursor ----------
@router.post("/cursor/connect")
def cursor_connect(req: CursorConnectRequest):
    workspace = check_workspace(req.workspace)
    try:
        cursor = get_cursor(req.apiKey)
        try:
            result = cursor.connect(workspace)
        except UpstreamError as e:
            logger.error("Cursor connection error: %s", e)
            raise UpstreamError("Failed to connect to Cursor Pro") from e
    except ApiError:
        raise
    except Exception:
        logger.exception("Cursor connect error")
        raise InternalError("Failed to process connection request")

    suffix = " (development mode)" if cursor.dev_mode else ""
    return {
        "success": True,
        "message": f"Cursor Pro connected successfully{suffix}",
        "workspace": workspace,
        **result,
    }


@router.post("/cursor/sync")
def cursor_sync(req: SyncRequest):
    options = req.options.model_dump() if req.options else None
    try:
        cursor = get_cursor()
        try:
            result = cursor.configure_sync(req.enabled, req.files, options)
        except UpstreamError as e:
            logger.error("Cursor sync error: %s", e)
            raise UpstreamError("Failed to configure Cursor sync") from e
    except ApiError:
        raise
    except Exception:
        logger.exception("Sync configuration error")
        raise InternalError("Failed to configure sync")

    state = "enabled" if req.enabled else "disabled"
    suffix = " (development mode)" if cursor.dev_mode else " successfully"
    return {
        "success": True,
        "message": f"Cursor sync {state}{suffix}",
        "syncEnabled": req.enabled,
        **result,
    }


# ---------- Execute ----------
@router.post("/execute")
def execute(req: ExecuteRequest):
    workspace = check_workspace(req.workspace)
    try:
        files = [f.model_dump() for f in req.files]
        result = get_code_runner().run(files, req.command, workspace)
    except ApiError:
        raise
    except Exception:
        logger.exception("Code execution error")
        raise InternalError("Failed to execute code")
    return {"success": True, **result}


# ---------- DeepSeek ----------
@router.post("/deepseek/test")
def deepseek_test(req: Optional[DeepSeekTestRequest] = None):
    api_key = req.apiKey if req else None
    try:
        client = get_deepseek(api_key)
        try:
            probe: Dict[str, Any] = client.probe()
        except Exception as e:
            logger.error("DeepSeek connection error: %s", e)
            raise UpstreamError("Failed to connect to DeepSeek API") from e
    except ApiError:
        raise
    except Exception:
        logger.exception("DeepSeek test error")
        raise InternalError("Failed to test DeepSeek connection")

    message = (
        "DeepSeek V3 connected successfully (development mode)"
        if client.dev_mode else "DeepSeek V3 connected and tested successfully"
    )
    return {
        "success": True,
        "message": message,
        **probe,
        "pricing": PRICING,
        "capabilities": CAPABILITIES,
        "limits": LIMITS,
    }
