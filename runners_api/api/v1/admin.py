"""Admin dashboard routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from runners_api.api.v1.auth import require_admin, require_privileged
from runners_api.core.database import get_db
from runners_api.models.user import User
from runners_api.schemas.admin import AdminStatsResponse, BackfillResponse
from runners_api.services import admin as admin_service

router = APIRouter()


@router.get("/stats", response_model=AdminStatsResponse)
def stats(
    _staff: Annotated[User, Depends(require_privileged)],
    db: Annotated[Session, Depends(get_db)],
) -> AdminStatsResponse:
    """Totals and breakdowns, counted fresh on every request."""
    return AdminStatsResponse.model_validate(admin_service.dashboard_stats(db))


@router.post("/backfill-cases", response_model=BackfillResponse)
def backfill_cases(
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> BackfillResponse:
    """Create the missing companion case for runners that have none."""
    case_ids = admin_service.backfill_profile_cases(db)
    return BackfillResponse(created=len(case_ids), case_ids=case_ids)
