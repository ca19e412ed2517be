# bonsai_gateway/services/code_runner.py
from __future__ import annotations
from typing import Protocol, Dict, Any, List

# Canned suite shown in the code studio; nothing is executed.
CANNED_RESULTS: List[Dict[str, Any]] = [
    {"id": "1", "name": "Enhanced AI Router Tests", "status": "passed", "duration": 1450, "coverage": 92},
    {"id": "2", "name": "Research Studio Integration Tests", "status": "passed", "duration": 890, "coverage": 88},
    {"id": "3", "name": "Code Studio Component Tests", "status": "running"},
    {"id": "4", "name": "DeepSeek API Integration Tests", "status": "passed", "duration": 675},
]

CANNED_COVERAGE = {"overall": 89, "statements": 92, "branches": 87, "functions": 94, "lines": 90}


class CodeRunner(Protocol):
    def run(self, files: List[Dict[str, Any]], command: str, workspace: str) -> Dict[str, Any]: ...


def _line(test: Dict[str, Any]) -> str:
    if test["status"] == "passed":
        return f"✅ {test['name']} ({test['duration']}ms)"
    if test["status"] == "failed":
        return f"❌ {test['name']} - {test.get('output', 'failed')}"
    return f"⏳ {test['name']} - running..."


def render_report(results: List[Dict[str, Any]], command: str, file_count: int) -> str:
    counts = {s: sum(1 for t in results if t["status"] == s) for s in ("passed", "failed", "running")}
    lines = [
        "🌿 Bons-AI Platform Test Results",
        "",
        f"$ {command}" if command else "$ (default test command)",
        f"✓ {file_count} file(s) received",
        "✓ Test suite execution started",
        "",
        "Running tests...",
        *[_line(t) for t in results],
        "",
        "Test Summary:",
        f"- Passed: {counts['passed']}",
        f"- Failed: {counts['failed']}",
        f"- Running: {counts['running']}",
    ]
    return "\n".join(lines) + "\n"


class StubCodeRunner:
    def run(self, files, command, workspace) -> Dict[str, Any]:
        results = [dict(t) for t in CANNED_RESULTS]
        return {
            "output": render_report(results, command, len(files)),
            "testResults": results,
            "buildTime": sum(t.get("duration", 0) for t in results),
            "coverage": dict(CANNED_COVERAGE),
        }


def get_code_runner() -> CodeRunner:
    # No live runner exists; workspaces are never executed server-side.
    return StubCodeRunner()
