"""Cases: listing with ownership scoping, lifecycle stamps and public counters."""

import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from runners_api.core.errors import NotFound, ValidationFailed
from runners_api.core.timeutil import utcnow
from runners_api.models import Case, Runner, User
from runners_api.models.case import RESOLVED_STATUSES
from runners_api.schemas.cases import CaseCreateRequest, CaseUpdateRequest
from runners_api.services.access import ensure_admin, ensure_owner_or_privileged, ensure_privileged, is_privileged
from runners_api.services.accounts import apply_partial_update
from runners_api.services.pagination import PageParams, paginate

logger = logging.getLogger(__name__)

CASE_FIELDS = (
    "title",
    "description",
    "status",
    "priority",
    "last_seen_date",
    "last_seen_location",
    "latitude",
    "longitude",
    "circumstances",
    "clothing_description",
    "additional_info",
    "contact_person",
    "contact_phone",
    "contact_email",
)


def _owned_by(user_id: int):
    """Filter: cases the user reported or that belong to one of the user's runners."""
    owned_runner_ids = select(Runner.id).where(Runner.user_id == user_id)
    return or_(Case.reported_by_user_id == user_id, Case.runner_id.in_(owned_runner_ids))


def case_owner_ids(db: Session, case: Case) -> tuple[int, ...]:
    runner_owner = db.query(Runner.user_id).filter(Runner.id == case.runner_id).scalar()
    return tuple(i for i in (case.reported_by_user_id, runner_owner) if i is not None)


def list_public_cases(
    db: Session,
    params: PageParams,
    status: str | None = None,
    priority: str | None = None,
) -> tuple[list[Case], int]:
    query = db.query(Case).filter(Case.is_public.is_(True), Case.is_approved.is_(True))
    if status:
        query = query.filter(Case.status == status)
    if priority:
        query = query.filter(Case.priority == priority)
    return paginate(query.order_by(Case.created_at.desc(), Case.id.desc()), params)


def list_cases(
    db: Session,
    caller: User,
    params: PageParams,
    status: str | None = None,
    priority: str | None = None,
    runner_id: int | None = None,
    q: str | None = None,
    mine: bool = False,
) -> tuple[list[Case], int]:
    query = db.query(Case)
    if not is_privileged(caller) or mine:
        query = query.filter(_owned_by(caller.id))
    if status:
        query = query.filter(Case.status == status)
    if priority:
        query = query.filter(Case.priority == priority)
    if runner_id is not None:
        query = query.filter(Case.runner_id == runner_id)
    if q and q.strip():
        term = q.strip()
        query = query.filter(
            or_(Case.title.icontains(term, autoescape=True), Case.description.icontains(term, autoescape=True))
        )
    return paginate(query.order_by(Case.created_at.desc(), Case.id.desc()), params)


def get_case(db: Session, case_id: int) -> Case:
    case = db.query(Case).filter(Case.id == case_id).first()
    if case is None:
        raise NotFound("Case not found")
    return case


def get_visible_case(db: Session, caller: User, case_id: int) -> Case:
    case = get_case(db, case_id)
    ensure_owner_or_privileged(caller, case_owner_ids(db, case), "case")
    return case


def view_case(db: Session, caller: User, case_id: int) -> Case:
    """Fetch a case for display and count the view."""
    case = get_visible_case(db, caller, case_id)
    case.view_count = (case.view_count or 0) + 1
    db.commit()
    db.refresh(case)
    return case


def create_case(db: Session, caller: User, body: CaseCreateRequest) -> Case:
    runner = db.query(Runner).filter(Runner.id == body.runner_id).first()
    if runner is None:
        raise ValidationFailed("Runner does not exist", details={"runnerId": "Runner not found"})
    ensure_owner_or_privileged(caller, runner.user_id, "runner")
    case = Case(
        runner_id=runner.id,
        reported_by_user_id=caller.id,
        is_public=body.is_public,
        is_approved=False,
        is_verified=False,
        view_count=0,
        share_count=0,
        tip_count=0,
        created_at=utcnow(),
    )
    apply_partial_update(case, body.model_dump(), CASE_FIELDS)
    _stamp_resolution(case, caller)
    db.add(case)
    db.commit()
    db.refresh(case)
    logger.info("Case created", extra={"case_id": case.id, "runner_id": runner.id, "by": caller.id})
    return case


def _stamp_resolution(case: Case, caller: User) -> None:
    if case.status in RESOLVED_STATUSES:
        if case.resolved_at is None:
            case.resolved_at = utcnow()
            case.resolved_by = caller.email
    else:
        case.resolved_at = None
        case.resolved_by = None


def update_case(db: Session, caller: User, case_id: int, body: CaseUpdateRequest) -> Case:
    case = get_visible_case(db, caller, case_id)
    values = body.model_dump(exclude_unset=True)
    changed = apply_partial_update(case, values, CASE_FIELDS)
    if values.get("is_public") is not None and case.is_public != values["is_public"]:
        case.is_public = values["is_public"]
        changed.append("is_public")
    if "status" in changed:
        _stamp_resolution(case, caller)
    if changed:
        case.updated_at = utcnow()
        db.commit()
        db.refresh(case)
    return case


def set_case_status(db: Session, caller: User, case_id: int, status: str) -> Case:
    """Found/Resolved/Closed stamp resolved_at and resolved_by; other statuses clear them."""
    ensure_privileged(caller)
    case = get_case(db, case_id)
    previous = case.status
    case.status = status
    if status in RESOLVED_STATUSES:
        case.resolved_at = utcnow()
        case.resolved_by = caller.email
    else:
        case.resolved_at = None
        case.resolved_by = None
    case.updated_at = utcnow()
    db.commit()
    db.refresh(case)
    logger.info("Case status changed", extra={"case_id": case.id, "from_status": previous, "to_status": status, "by": caller.id})
    return case


def set_case_approved(db: Session, caller: User, case_id: int, is_approved: bool) -> Case:
    ensure_privileged(caller)
    case = get_case(db, case_id)
    now = utcnow()
    case.is_approved = is_approved
    case.approved_at = now if is_approved else None
    case.approved_by = caller.email if is_approved else None
    case.updated_at = now
    db.commit()
    db.refresh(case)
    return case


def set_case_verified(db: Session, caller: User, case_id: int, is_verified: bool) -> Case:
    ensure_privileged(caller)
    case = get_case(db, case_id)
    now = utcnow()
    case.is_verified = is_verified
    case.verified_at = now if is_verified else None
    case.verified_by = caller.email if is_verified else None
    case.updated_at = now
    db.commit()
    db.refresh(case)
    return case


def _get_engageable_case(db: Session, caller: User | None, case_id: int) -> Case:
    """Public approved cases are open to anyone; others need the owner or a privileged caller."""
    case = get_case(db, case_id)
    if case.is_public and case.is_approved:
        return case
    if caller is None:
        raise NotFound("Case not found")
    ensure_owner_or_privileged(caller, case_owner_ids(db, case), "case")
    return case


def record_share(db: Session, caller: User | None, case_id: int) -> Case:
    case = _get_engageable_case(db, caller, case_id)
    case.share_count = (case.share_count or 0) + 1
    db.commit()
    db.refresh(case)
    return case


def record_tip(db: Session, caller: User | None, case_id: int) -> Case:
    case = _get_engageable_case(db, caller, case_id)
    case.tip_count = (case.tip_count or 0) + 1
    db.commit()
    db.refresh(case)
    logger.info("Tip recorded", extra={"case_id": case.id, "by": caller.id if caller else None})
    return case


def delete_case(db: Session, caller: User, case_id: int) -> None:
    ensure_admin(caller)
    case = get_case(db, case_id)
    db.delete(case)
    db.commit()
    logger.info("Case deleted", extra={"case_id": case_id, "by": caller.id})
