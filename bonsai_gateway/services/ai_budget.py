# bonsai_gateway/services/ai_budget.py
from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Any, List
import logging, threading

from bonsai_gateway.config import get_settings

logger = logging.getLogger("bonsai.budget")


@dataclass
class GoogleAccount:
    id: str
    name: str
    daily_quota: int
    used_today: int = 0
    active: bool = True

    @property
    def remaining(self) -> int:
        return self.daily_quota - self.used_today


class AIBudgetMonitor:
    """
    Spend/quota state for the AI vendors behind the chat router.

    Google AI Studio accounts are free (daily token quota), Vertex AI spends
    prepaid credits and OpenRouter has a daily budget. The emergency brake
    turns off everything that costs money.
    """

    def __init__(self, google_daily_quota: int = 300000, vertex_credits: float = 240.0, openrouter_daily_budget: float = 10.0):
        self._lock = threading.Lock()
        self.google_accounts: List[GoogleAccount] = [
            GoogleAccount("google-ai-1", "Google AI Studio Account 1", google_daily_quota),
            GoogleAccount("google-ai-2", "Google AI Studio Account 2", google_daily_quota),
        ]
        self.vertex_remaining_credits = vertex_credits
        self.vertex_daily_spend = 0.0
        self.openrouter_daily_budget = openrouter_daily_budget
        self.openrouter_daily_used = 0.0
        self.openrouter_free_only = False

    @staticmethod
    def overall_health(vertex_credits: float, google_remaining: int) -> str:
        if vertex_credits < 50 and google_remaining < 50000:
            return "critical"
        if vertex_credits < 100 or google_remaining < 100000:
            return "warning"
        if vertex_credits < 200 or google_remaining < 200000:
            return "good"
        return "excellent"

    def system_status(self) -> Dict[str, Any]:
        with self._lock:
            google_remaining = sum(a.remaining for a in self.google_accounts)
            openrouter_remaining = self.openrouter_daily_budget - self.openrouter_daily_used
            return {
                "googleAI": {
                    "accounts": [
                        {
                            "name": a.name,
                            "quotaUsed": a.used_today,
                            "quotaTotal": a.daily_quota,
                            "isAvailable": a.active,
                        }
                        for a in self.google_accounts
                    ],
                    "totalQuotaRemaining": google_remaining,
                },
                "vertexAI": {
                    "creditsRemaining": self.vertex_remaining_credits,
                    "dailySpend": self.vertex_daily_spend,
                    "isAvailable": self.vertex_remaining_credits > 0,
                },
                "openRouter": {
                    "dailyBudgetUsed": self.openrouter_daily_used,
                    "dailyBudgetTotal": self.openrouter_daily_budget,
                    "isAvailable": openrouter_remaining > 0,
                    "freeModelsOnly": self.openrouter_free_only,
                },
                "overallHealth": self.overall_health(self.vertex_remaining_credits, google_remaining),
            }

    def emergency_brake(self) -> None:
        with self._lock:
            for acc in self.google_accounts:
                acc.active = False
            self.vertex_remaining_credits = 0.0
            self.openrouter_free_only = True
        logger.warning("EMERGENCY BRAKE ACTIVATED - all paid AI services disabled")

    def brake_active(self, status: Dict[str, Any] | None = None) -> bool:
        status = status or self.system_status()
        return (not status["vertexAI"]["isAvailable"]) or status["overallHealth"] == "critical"


@lru_cache(maxsize=1)
def get_budget_monitor() -> AIBudgetMonitor:
    s = get_settings()
    return AIBudgetMonitor(
        google_daily_quota=s.GOOGLE_AI_DAILY_QUOTA,
        vertex_credits=s.VERTEX_AI_CREDITS,
        openrouter_daily_budget=s.OPENROUTER_DAILY_BUDGET,
    )
