from __future__ import annotations

import time
import requests

from app.checks.results import CheckResult, Failure, FailureReason, Success
from app.models import CheckTarget


def run_http(url: str, timeout_s: float, connect_timeout_s: float | None = None) -> CheckResult:
    connect_timeout = timeout_s if connect_timeout_s is None else connect_timeout_s
    start = time.perf_counter()
    try:
        # stream=True returns once headers arrive; the body is never drained.
        with requests.get(url, timeout=(connect_timeout, timeout_s), stream=True) as r:
            latency_ms = (time.perf_counter() - start) * 1000
            if r.status_code != 200:
                return Failure(
                    reason=FailureReason.UNEXPECTED_STATUS,
                    detail="unexpected status",
                    status_code=r.status_code,
                )
            return Success(latency_ms=latency_ms, status_code=r.status_code)
    except requests.RequestException as e:
        return Failure(reason=FailureReason.TRANSPORT_ERROR, detail=str(e))


def check_target(target: CheckTarget) -> CheckResult:
    return run_http(
        target.url,
        timeout_s=target.timeout_s,
        connect_timeout_s=target.connect_timeout_s,
    )
