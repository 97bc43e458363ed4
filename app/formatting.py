from __future__ import annotations

from typing import Any, Dict

from app.checks.results import CheckResult, FailureReason, Success


def format_result(result: CheckResult) -> str:
    if isinstance(result, Success):
        return f"Web app responded in {result.latency_ms:.1f}ms (HTTP {result.status_code})"

    if result.reason is FailureReason.UNEXPECTED_STATUS:
        return f"Web app check failed: unexpected status (HTTP {result.status_code})"
    return f"Web app check failed: transport error: {result.detail}"


def result_to_dict(result: CheckResult) -> Dict[str, Any]:
    if isinstance(result, Success):
        return {
            "ok": True,
            "latency_ms": round(result.latency_ms, 3),
            "status_code": result.status_code,
            "reason": None,
            "detail": None,
            "message": format_result(result),
        }
    return {
        "ok": False,
        "latency_ms": None,
        "status_code": result.status_code,
        "reason": result.reason.value,
        "detail": result.detail,
        "message": format_result(result),
    }
