"""Schemas for the admin dashboard endpoints."""

from pydantic import Field

from runners_api.schemas.common import CamelModel, UtcDateTime


class AdminStatsResponse(CamelModel):
    """Aggregate counts computed per request."""

    total_users: int
    active_users: int
    total_runners: int
    active_runners: int
    inactive_runners: int
    total_cases: int
    public_cases: int
    cases_by_status: dict[str, int] = Field(default_factory=dict)
    users_by_role: dict[str, int] = Field(default_factory=dict)
    new_users_last_24h: int
    new_cases_last_24h: int
    generated_at: UtcDateTime


class BackfillResponse(CamelModel):
    created: int
    case_ids: list[int] = Field(default_factory=list)
