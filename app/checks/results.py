from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailureReason(str, Enum):
    TRANSPORT_ERROR = "transport_error"
    UNEXPECTED_STATUS = "unexpected_status"


@dataclass(frozen=True)
class Success:
    latency_ms: float
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    reason: FailureReason
    detail: str
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return False


CheckResult = Success | Failure
