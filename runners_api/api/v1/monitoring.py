"""Client monitoring routes. Reports are written to the log and not stored."""

from typing import Annotated

from fastapi import APIRouter, Depends

from runners_api.api.v1.auth import get_current_user, get_optional_user, require_admin
from runners_api.models.user import User
from runners_api.schemas.monitoring import AckResponse, ActivityReport, ClientErrorReport, PerformanceReport
from runners_api.services import monitoring as monitoring_service

router = APIRouter()


@router.post("/errors", response_model=AckResponse, status_code=202)
def report_error(
    body: ClientErrorReport,
    caller: Annotated[User | None, Depends(get_optional_user)],
) -> AckResponse:
    """Anonymous clients may report errors; the caller is attached when a token is sent."""
    return AckResponse(reference=monitoring_service.record_client_error(body, caller))


@router.post("/performance", response_model=AckResponse, status_code=202)
def report_performance(
    body: PerformanceReport,
    admin: Annotated[User, Depends(require_admin)],
) -> AckResponse:
    return AckResponse(reference=monitoring_service.record_performance(body, admin))


@router.post("/activity", response_model=AckResponse, status_code=202)
def report_activity(
    body: ActivityReport,
    current_user: Annotated[User, Depends(get_current_user)],
) -> AckResponse:
    return AckResponse(reference=monitoring_service.record_activity(body, current_user))
