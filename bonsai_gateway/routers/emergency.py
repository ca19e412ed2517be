# bonsai_gateway/routers/emergency.py
from fastapi import APIRouter, Depends
from datetime import datetime, timezone
import logging

from bonsai_gateway.core.errors import InternalError
from bonsai_gateway.services.ai_budget import AIBudgetMonitor, get_budget_monitor

logger = logging.getLogger("bonsai.budget")

router = APIRouter(tags=["budget"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/emergency-brake")
def activate_emergency_brake(monitor: AIBudgetMonitor = Depends(get_budget_monitor)):
    try:
        monitor.emergency_brake()
        status = monitor.system_status()
    except Exception:
        logger.exception("Emergency brake error")
        raise InternalError("Failed to activate emergency brake")

    return {
        "success": True,
        "message": "Emergency brake activated. All paid AI services have been disabled.",
        "details": {
            "googleAI": "Free models still available",
            "vertexAI": "Disabled - no further charges",
            "openRouter": "Limited to free models only",
            "systemHealth": status["overallHealth"],
        },
        "nextSteps": [
            "Only free AI models are now available",
            "Check usage dashboard for cost analysis",
            "Contact support if emergency brake was triggered in error",
            "Review budget settings and quotas",
        ],
        "timestamp": _timestamp(),
    }


@router.get("/emergency-brake")
def emergency_brake_status(monitor: AIBudgetMonitor = Depends(get_budget_monitor)):
    try:
        status = monitor.system_status()
        active = monitor.brake_active(status)
    except Exception:
        logger.exception("Emergency brake status error")
        raise InternalError("Failed to get emergency brake status")

    if active:
        recommendations = [
            "Emergency mode active - only free services available",
            "Review cost monitoring dashboard",
            "Adjust budget limits if needed",
        ]
    else:
        recommendations = [
            "All systems operating normally",
            "Monitor usage to prevent emergency activation",
        ]
    return {
        "success": True,
        "emergencyBrakeActive": active,
        "systemHealth": status["overallHealth"],
        "availableServices": {
            "googleAIFree": status["googleAI"]["totalQuotaRemaining"] > 0,
            "vertexAI": status["vertexAI"]["isAvailable"],
            "openRouterFree": status["openRouter"]["isAvailable"],
        },
        "recommendations": recommendations,
        "timestamp": _timestamp(),
    }
