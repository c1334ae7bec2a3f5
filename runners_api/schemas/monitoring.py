"""Schemas for client-side monitoring reports (logged, not stored)."""

from typing import Any

from pydantic import Field, field_validator

from runners_api.schemas.common import CamelModel, UtcDateTime, one_of

SEVERITIES = ("low", "medium", "high", "critical")


class ClientErrorReport(CamelModel):
    message: str = Field(..., min_length=1, max_length=2000)
    url: str | None = Field(default=None, max_length=2000)
    severity: str = "medium"
    stack: str | None = Field(default=None, max_length=10000)
    user_agent: str | None = Field(default=None, max_length=500)
    occurred_at: UtcDateTime | None = None
    context: dict[str, Any] = Field(default_factory=dict)

    @field_validator("severity")
    @classmethod
    def validate_severity(cls, v: str) -> str:
        return one_of(v, SEVERITIES)


class PerformanceReport(CamelModel):
    operation_name: str = Field(..., min_length=1, max_length=200)
    duration_ms: float = Field(..., ge=0)
    success: bool = True
    metrics: dict[str, Any] = Field(default_factory=dict)


class ActivityReport(CamelModel):
    activity_type: str = Field(..., min_length=1, max_length=100)
    details: dict[str, Any] = Field(default_factory=dict)


class AckResponse(CamelModel):
    received: bool = True
    reference: str = Field(..., description="Correlation id echoed in the server log line.")
