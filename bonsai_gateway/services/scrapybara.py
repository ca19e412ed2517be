# bonsai_gateway/services/scrapybara.py
from __future__ import annotations
from typing import Protocol, Dict, Any

from bonsai_gateway.config import get_settings
from bonsai_gateway.services.upstream import call_upstream, wants_live


class ScrapybaraClient(Protocol):
    def instance_status(self) -> Dict[str, Any]: ...


class StubScrapybara:
    def instance_status(self) -> Dict[str, Any]:
        return {"connected": True, "instances": 1, "active_instances": 1}


class LiveScrapybara:
    def __init__(self, api_key: str):
        self.key = api_key
        self.base_url = get_settings().SCRAPYBARA_URL

    def instance_status(self) -> Dict[str, Any]:
        instances = call_upstream("Scrapybara", "GET", f"{self.base_url}/v1/instances", self.key) or []
        if isinstance(instances, dict):
            # some deployments wrap the list
            instances = instances.get("instances") or []
        return {
            "connected": True,
            "instances": len(instances),
            "active_instances": sum(1 for i in instances if isinstance(i, dict) and i.get("status") == "running"),
        }


def get_scrapybara() -> ScrapybaraClient:
    key = get_settings().SCRAPYBARA_API_KEY
    if wants_live("Scrapybara", key, stub_without_key=False):
        return LiveScrapybara(key)
    return StubScrapybara()
