from __future__ import annotations

from typing import Literal
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(description="Health status")


class ConfigResponse(BaseModel):
    url: str
    interval_s: float = Field(gt=0)
    timeout_s: float = Field(gt=0)
    connect_timeout_s: float | None = Field(default=None)


class CheckResultResponse(BaseModel):
    ok: bool
    latency_ms: float | None = None
    status_code: int | None = None
    reason: Literal["transport_error", "unexpected_status"] | None = None
    detail: str | None = None
    message: str


class MonitorStatusResponse(BaseModel):
    state: Literal["idle", "running", "stopped"]
    url: str
    interval_s: float
    timeout_s: float
    ticks: int = Field(ge=0)
    skipped_ticks: int = Field(ge=0)
    delivery_failures: int = Field(ge=0)
    last_result: CheckResultResponse | None = None
    clients: int = Field(ge=0, description="Connected WebSocket observers")
