# bonsai_gateway/services/pipedream.py
from __future__ import annotations
from typing import Protocol, Dict, Any

from bonsai_gateway.config import get_settings
from bonsai_gateway.services.upstream import call_upstream, wants_live


class PipedreamClient(Protocol):
    def whoami(self) -> Dict[str, Any]: ...


class StubPipedream:
    def whoami(self) -> Dict[str, Any]:
        return {"user": "dev-user", "plan": "free", "workflows": 0}


class LivePipedream:
    def __init__(self, api_key: str):
        self.key = api_key
        self.base_url = get_settings().PIPEDREAM_API_URL

    def whoami(self) -> Dict[str, Any]:
        data = call_upstream("Pipedream", "GET", f"{self.base_url}/users/me", self.key) or {}
        # /users/me nests the account under "data" on newer API versions
        user = data["data"] if isinstance(data.get("data"), dict) else data
        return {
            "user": user.get("username"),
            "plan": user.get("plan"),
            "workflows": user.get("workflow_count") or 0,
        }


def get_pipedream() -> PipedreamClient:
    key = get_settings().PIPEDREAM_API_KEY
    if wants_live("Pipedream", key, stub_without_key=False):
        return LivePipedream(key)
    return StubPipedream()
