# bonsai_gateway/services/deepseek_providers.py
from __future__ import annotations
from typing import Protocol, Dict, Any, Optional

from bonsai_gateway.config import get_settings
from bonsai_gateway.services.upstream import wants_live

PRICING = {
    "input": "$0.14 per 1M tokens",
    "output": "$0.28 per 1M tokens",
    "savings": "95% vs GPT-4",
}
CAPABILITIES = ["code-generation", "code-review", "debugging", "optimization", "refactoring", "testing"]
LIMITS = {"maxTokens": 65536, "rateLimitPerMinute": 60, "concurrentRequests": 5}

PROBE_PROMPT = 'Write a simple "hello world" function in TypeScript.'


class CodeModelClient(Protocol):
    def probe(self) -> Dict[str, Any]: ...


class StubDeepSeek:
    dev_mode = True

    def probe(self) -> Dict[str, Any]:
        return {"model": "deepseek-coder-v2"}


class LiveDeepSeek:
    """DeepSeek speaks the OpenAI wire format, so the OpenAI SDK is pointed at it."""
    dev_mode = False

    def __init__(self, api_key: str):
        from openai import OpenAI
        s = get_settings()
        self.client = OpenAI(api_key=api_key, base_url=s.DEEPSEEK_BASE_URL, timeout=s.UPSTREAM_TIMEOUT_SEC, max_retries=0)
        self.model = s.DEEPSEEK_MODEL

    def probe(self) -> Dict[str, Any]:
        models = [m.id for m in self.client.models.list()]
        resp = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": PROBE_PROMPT}],
            max_tokens=100,
            temperature=0.1,
        )
        text = (resp.choices[0].message.content or "") if resp.choices else ""
        usage = resp.usage.model_dump() if getattr(resp, "usage", None) is not None else None
        return {
            "model": self.model,
            "availableModels": models,
            "testResult": text[:100] + "...",
            "usage": usage,
        }


def get_deepseek(api_key: Optional[str] = None) -> CodeModelClient:
    key = api_key or get_settings().DEEPSEEK_API_KEY
    if wants_live("DeepSeek", key):
        return LiveDeepSeek(key)
    return StubDeepSeek()
