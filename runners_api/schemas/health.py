"""Schema for GET /health/."""

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"] = "ok"
    environment: str
    database: Literal["connected", "disconnected"]
