"""Case routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from runners_api.api.v1.auth import get_current_user, get_optional_user, require_admin, require_privileged
from runners_api.api.v1.params import RecordId, get_page_params
from runners_api.core.database import get_db
from runners_api.core.errors import ValidationFailed
from runners_api.models.base import MAX_ID
from runners_api.models.case import CASE_PRIORITIES, CASE_STATUSES
from runners_api.models.user import User
from runners_api.schemas.cases import (
    CaseApproveRequest,
    CaseCountersResponse,
    CaseCreateRequest,
    CaseResponse,
    CaseStatusRequest,
    CaseUpdateRequest,
    CaseVerifyRequest,
    PublicCaseResponse,
)
from runners_api.schemas.common import Page, build_page, one_of
from runners_api.services import cases as case_service
from runners_api.services.pagination import PageParams

router = APIRouter()


def _filter_value(field: str, value: str | None, allowed: tuple[str, ...]) -> str | None:
    """Canonical spelling of an optional filter, matched case-insensitively like request bodies."""
    if value is None:
        return None
    try:
        return one_of(value, allowed)
    except ValueError as e:
        raise ValidationFailed(str(e), details={field: str(e)})


@router.get("/public", response_model=Page[PublicCaseResponse])
def list_public_cases(
    db: Annotated[Session, Depends(get_db)],
    params: Annotated[PageParams, Depends(get_page_params)],
    status: str | None = Query(default=None, max_length=20),
    priority: str | None = Query(default=None, max_length=20),
) -> Page[PublicCaseResponse]:
    """Public, approved cases. No authentication required."""
    rows, total = case_service.list_public_cases(
        db,
        params,
        status=_filter_value("status", status, CASE_STATUSES),
        priority=_filter_value("priority", priority, CASE_PRIORITIES),
    )
    return build_page(PublicCaseResponse, rows, total, params.page, params.page_size)


@router.get("", response_model=Page[CaseResponse])
def list_cases(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    params: Annotated[PageParams, Depends(get_page_params)],
    status: str | None = Query(default=None, max_length=20),
    priority: str | None = Query(default=None, max_length=20),
    runner_id: int | None = Query(default=None, alias="runnerId", ge=1, le=MAX_ID),
    q: str | None = Query(default=None, max_length=100),
    mine: bool = False,
) -> Page[CaseResponse]:
    """Cases visible to the caller: their own reports and cases about their runners, or all for admin/staff."""
    rows, total = case_service.list_cases(
        db,
        current_user,
        params,
        status=_filter_value("status", status, CASE_STATUSES),
        priority=_filter_value("priority", priority, CASE_PRIORITIES),
        runner_id=runner_id,
        q=q,
        mine=mine,
    )
    return build_page(CaseResponse, rows, total, params.page, params.page_size)


@router.post("", response_model=CaseResponse, status_code=201)
def create_case(
    body: CaseCreateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CaseResponse:
    return CaseResponse.model_validate(case_service.create_case(db, current_user, body))


@router.get("/{case_id}", response_model=CaseResponse)
def get_case(
    case_id: RecordId,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CaseResponse:
    return CaseResponse.model_validate(case_service.view_case(db, current_user, case_id))


@router.put("/{case_id}", response_model=CaseResponse)
def update_case(
    case_id: RecordId,
    body: CaseUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CaseResponse:
    return CaseResponse.model_validate(case_service.update_case(db, current_user, case_id, body))


@router.put("/{case_id}/status", response_model=CaseResponse)
def set_case_status(
    case_id: RecordId,
    body: CaseStatusRequest,
    staff: Annotated[User, Depends(require_privileged)],
    db: Annotated[Session, Depends(get_db)],
) -> CaseResponse:
    return CaseResponse.model_validate(case_service.set_case_status(db, staff, case_id, body.status))


@router.put("/{case_id}/approve", response_model=CaseResponse)
def approve_case(
    case_id: RecordId,
    body: CaseApproveRequest,
    staff: Annotated[User, Depends(require_privileged)],
    db: Annotated[Session, Depends(get_db)],
) -> CaseResponse:
    return CaseResponse.model_validate(case_service.set_case_approved(db, staff, case_id, body.is_approved))


@router.put("/{case_id}/verify", response_model=CaseResponse)
def verify_case(
    case_id: RecordId,
    body: CaseVerifyRequest,
    staff: Annotated[User, Depends(require_privileged)],
    db: Annotated[Session, Depends(get_db)],
) -> CaseResponse:
    return CaseResponse.model_validate(case_service.set_case_verified(db, staff, case_id, body.is_verified))


@router.post("/{case_id}/share", response_model=CaseCountersResponse)
def share_case(
    case_id: RecordId,
    caller: Annotated[User | None, Depends(get_optional_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CaseCountersResponse:
    return CaseCountersResponse.model_validate(case_service.record_share(db, caller, case_id))


@router.post("/{case_id}/tips", response_model=CaseCountersResponse)
def tip_case(
    case_id: RecordId,
    caller: Annotated[User | None, Depends(get_optional_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CaseCountersResponse:
    return CaseCountersResponse.model_validate(case_service.record_tip(db, caller, case_id))


@router.delete("/{case_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_case(
    case_id: RecordId,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    case_service.delete_case(db, admin, case_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
