"""
AI budget monitor and the emergency brake routes.
"""

import pytest

from bonsai_gateway.services.ai_budget import AIBudgetMonitor


@pytest.mark.parametrize("credits,quota,expected", [
    (240, 600000, "excellent"),
    (150, 600000, "good"),
    (240, 150000, "good"),
    (80, 600000, "warning"),
    (240, 90000, "warning"),
    (40, 40000, "critical"),
    (40, 600000, "warning"),
])
def test_overall_health(credits, quota, expected):
    assert AIBudgetMonitor.overall_health(credits, quota) == expected


def test_brake_disables_paid_services():
    monitor = AIBudgetMonitor()
    assert not monitor.brake_active()

    monitor.emergency_brake()
    status = monitor.system_status()
    assert status["vertexAI"]["isAvailable"] is False
    assert status["openRouter"]["freeModelsOnly"] is True
    assert all(not a["isAvailable"] for a in status["googleAI"]["accounts"])
    assert status["overallHealth"] == "warning"
    assert monitor.brake_active(status)


def test_status_before_brake(client):
    body = client.get("/api/emergency-brake").json()
    assert body["success"] is True
    assert body["emergencyBrakeActive"] is False
    assert body["systemHealth"] == "excellent"
    assert body["availableServices"] == {"googleAIFree": True, "vertexAI": True, "openRouterFree": True}
    assert body["recommendations"][0] == "All systems operating normally"


def test_activate_then_status(client):
    r = client.post("/api/emergency-brake")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"].startswith("Emergency brake activated")
    assert body["details"]["systemHealth"] == "warning"
    assert len(body["nextSteps"]) == 4

    status = client.get("/api/emergency-brake").json()
    assert status["emergencyBrakeActive"] is True
    assert status["availableServices"]["vertexAI"] is False
    assert status["recommendations"][0].startswith("Emergency mode active")


def test_budgets_come_from_settings(client, set_env):
    set_env(VERTEX_AI_CREDITS="30", GOOGLE_AI_DAILY_QUOTA="10000")
    body = client.get("/api/emergency-brake").json()
    assert body["systemHealth"] == "critical"
    assert body["emergencyBrakeActive"] is True
