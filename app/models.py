from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CheckTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1)
    interval_s: float = Field(..., gt=0)
    timeout_s: float = Field(default=3.0, gt=0)
    connect_timeout_s: Optional[float] = Field(default=None, gt=0)

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(f"url must be an absolute http(s) URL, got {value!r}")
        return value
