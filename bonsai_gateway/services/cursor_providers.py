# bonsai_gateway/services/cursor_providers.py
from __future__ import annotations
from typing import Protocol, Dict, Any, Optional, List
from datetime import datetime, timezone

from bonsai_gateway.config import get_settings
from bonsai_gateway.services.upstream import call_upstream, wants_live

DEFAULT_SYNC_FILES = ["**/*.ts", "**/*.tsx", "**/*.js", "**/*.jsx"]
DEFAULT_SYNC_OPTIONS = {"autoSync": True, "conflictResolution": "manual", "syncInterval": 5}
CONNECT_FEATURES = ["ai-suggestions", "auto-complete", "code-review", "refactoring", "real-time-sync"]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------- Interface ----------
class CursorClient(Protocol):
    def connect(self, workspace: str) -> Dict[str, Any]: ...
    def configure_sync(self, enabled: bool, files: Optional[List[str]], options: Optional[Dict[str, Any]]) -> Dict[str, Any]: ...


# ---------- Stub (development mode) ----------
class StubCursor:
    dev_mode = True

    def connect(self, workspace: str) -> Dict[str, Any]:
        return {
            "features": {
                "aiSuggestions": True,
                "autoComplete": True,
                "codeReview": True,
                "refactoring": True,
                "syncEnabled": False,
            },
            "connection": {"status": "connected", "version": "0.42.1", "lastSync": _now()},
        }

    def configure_sync(self, enabled, files, options) -> Dict[str, Any]:
        return {
            "syncedFiles": files or [],
            "options": options or dict(DEFAULT_SYNC_OPTIONS),
            "lastSync": _now(),
        }


# ---------- Cursor Pro API ----------
class LiveCursor:
    dev_mode = False

    def __init__(self, api_key: str):
        s = get_settings()
        self.key = api_key
        self.base_url = s.CURSOR_API_URL
        self.webhook = f"{s.PUBLIC_BASE_URL}/api/code/cursor/webhook"

    def connect(self, workspace: str) -> Dict[str, Any]:
        data = call_upstream(
            "Cursor", "POST", f"{self.base_url}/workspace/connect", self.key,
            json={"workspace": workspace, "features": CONNECT_FEATURES, "webhook": self.webhook},
        ) or {}
        return {
            "sessionId": data.get("sessionId"),
            "features": data.get("enabledFeatures"),
            "connection": {"status": "connected", "version": data.get("version"), "lastSync": _now()},
        }

    def configure_sync(self, enabled, files, options) -> Dict[str, Any]:
        options = options or {}
        body = {
            "enabled": enabled,
            "files": files or DEFAULT_SYNC_FILES,
            "options": {
                "autoSync": options.get("autoSync", True),
                "conflictResolution": options.get("conflictResolution", "manual"),
                "syncInterval": options.get("syncInterval", 5),
                "watchPatterns": ["src/**/*", "lib/**/*", "components/**/*"],
                "ignorePatterns": ["node_modules/**/*", ".next/**/*", "*.log"],
            },
        }
        data = call_upstream("Cursor", "POST", f"{self.base_url}/sync/configure", self.key, json=body) or {}
        return {
            "syncedFiles": data.get("trackedFiles"),
            "options": data.get("syncOptions"),
            "lastSync": data.get("lastSync"),
        }


# ---------- Factory ----------
def get_cursor(api_key: Optional[str] = None) -> CursorClient:
    key = api_key or get_settings().CURSOR_API_KEY
    if wants_live("Cursor", key):
        return LiveCursor(key)
    return StubCursor()
