"""Runner profiles: CRUD, companion case creation, verification and photo reminders."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from runners_api.core.errors import Conflict, NotFound
from runners_api.core.timeutil import add_months, as_utc, utcnow
from runners_api.models import Case, Runner, User
from runners_api.models.runner import PHOTO_REMINDER_MONTHS
from runners_api.schemas.runners import RunnerCreateRequest, RunnerUpdateRequest
from runners_api.services import notifications
from runners_api.services.access import ensure_owner_or_privileged, ensure_privileged, is_privileged
from runners_api.services.accounts import apply_partial_update
from runners_api.services.pagination import PageParams, paginate

logger = logging.getLogger(__name__)

RUNNER_FIELDS = (
    "name",
    "date_of_birth",
    "gender",
    "height",
    "weight",
    "eye_color",
    "hair_color",
    "identifying_marks",
    "physical_description",
    "medical_conditions",
    "medications",
    "allergies",
    "emergency_instructions",
    "preferred_language",
    "additional_notes",
    "last_known_location",
)

# A profile counts as complete once all of these are filled in.
COMPLETENESS_FIELDS = (
    "name",
    "date_of_birth",
    "gender",
    "height",
    "weight",
    "eye_color",
    "hair_color",
    "profile_image_url",
)


def profile_is_complete(runner: Runner) -> bool:
    for field in COMPLETENESS_FIELDS:
        value = getattr(runner, field)
        if value is None or (isinstance(value, str) and not value.strip()):
            return False
    return True


def build_profile_case(runner: Runner, owner: User) -> Case:
    """Companion case seeded for every runner profile."""
    now = utcnow()
    return Case(
        runner_id=runner.id,
        reported_by_user_id=owner.id,
        title=f"Runner Profile - {runner.name}",
        description=f"Profile case for {runner.name}",
        status="Active",
        priority="Low",
        last_seen_location=runner.last_known_location,
        contact_person=owner.full_name,
        contact_phone=owner.phone_number,
        contact_email=owner.email,
        is_public=True,
        is_approved=True,
        approved_at=now,
        approved_by=owner.email,
        is_verified=False,
        view_count=0,
        share_count=0,
        tip_count=0,
        created_at=now,
    )


def list_runners(
    db: Session,
    caller: User,
    params: PageParams,
    status: str | None = None,
    q: str | None = None,
    mine: bool = False,
) -> tuple[list[Runner], int]:
    """Non-privileged callers only ever see their own runners."""
    query = db.query(Runner)
    if not is_privileged(caller) or mine:
        query = query.filter(Runner.user_id == caller.id)
    if status == "active":
        query = query.filter(Runner.is_active.is_(True))
    elif status == "inactive":
        query = query.filter(Runner.is_active.is_(False))
    if q and q.strip():
        query = query.filter(Runner.name.icontains(q.strip(), autoescape=True))
    return paginate(query.order_by(Runner.created_at.desc(), Runner.id.desc()), params)


def get_runner(db: Session, runner_id: int) -> Runner:
    runner = db.query(Runner).filter(Runner.id == runner_id).first()
    if runner is None:
        raise NotFound("Runner not found")
    return runner


def get_visible_runner(db: Session, caller: User, runner_id: int) -> Runner:
    runner = get_runner(db, runner_id)
    ensure_owner_or_privileged(caller, runner.user_id, "runner")
    return runner


def create_runner(db: Session, owner: User, body: RunnerCreateRequest) -> tuple[Runner, Case]:
    """Create the runner and its companion case in one transaction."""
    now = utcnow()
    runner = Runner(
        user_id=owner.id,
        additional_image_urls=[],
        photo_update_reminder_sent=False,
        photo_update_reminder_count=0,
        next_photo_reminder=add_months(now, PHOTO_REMINDER_MONTHS),
        is_verified=False,
        is_active=True,
        created_at=now,
    )
    apply_partial_update(runner, body.model_dump(), RUNNER_FIELDS)
    runner.is_profile_complete = profile_is_complete(runner)
    try:
        db.add(runner)
        db.flush()
        case = build_profile_case(runner, owner)
        db.add(case)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Runner creation rolled back", extra={"owner_id": owner.id})
        raise
    db.refresh(runner)
    db.refresh(case)
    logger.info("Runner created", extra={"runner_id": runner.id, "case_id": case.id, "owner_id": owner.id})
    return runner, case


def update_runner(db: Session, caller: User, runner_id: int, body: RunnerUpdateRequest) -> Runner:
    runner = get_visible_runner(db, caller, runner_id)
    changed = apply_partial_update(runner, body.model_dump(exclude_unset=True), RUNNER_FIELDS)
    runner.is_profile_complete = profile_is_complete(runner)
    if changed:
        runner.updated_at = utcnow()
    db.commit()
    db.refresh(runner)
    return runner


def set_runner_status(db: Session, caller: User, runner_id: int, is_active: bool) -> Runner:
    ensure_privileged(caller)
    runner = get_runner(db, runner_id)
    runner.is_active = is_active
    runner.updated_at = utcnow()
    db.commit()
    db.refresh(runner)
    logger.info("Runner status changed", extra={"runner_id": runner.id, "is_active": is_active, "by": caller.id})
    return runner


def set_runner_verified(db: Session, caller: User, runner_id: int, is_verified: bool) -> Runner:
    """Verification stamps verified_at and the verifier's email; un-verifying clears both."""
    ensure_privileged(caller)
    runner = get_runner(db, runner_id)
    now = utcnow()
    runner.is_verified = is_verified
    runner.verified_at = now if is_verified else None
    runner.verified_by = caller.email if is_verified else None
    runner.updated_at = now
    db.commit()
    db.refresh(runner)
    logger.info("Runner verification changed", extra={"runner_id": runner.id, "is_verified": is_verified, "by": caller.id})
    return runner


def delete_runner(db: Session, caller: User, runner_id: int, hard: bool = False) -> str:
    """
    Hard-delete a runner no case references; otherwise deactivate it.

    hard=True (privileged only) insists on deletion and fails with 409 while
    cases still reference the runner.
    """
    runner = get_visible_runner(db, caller, runner_id)
    if hard:
        ensure_privileged(caller)
    case_count = db.query(Case).filter(Case.runner_id == runner.id).count()
    if case_count:
        if hard:
            raise Conflict(
                "Runner is referenced by cases and cannot be deleted",
                code="HAS_RELATED_DATA",
                details={"cases": case_count},
            )
        runner.is_active = False
        runner.updated_at = utcnow()
        db.commit()
        logger.info("Runner deactivated instead of deleted", extra={"runner_id": runner_id, "cases": case_count, "by": caller.id})
        return "deactivated"
    db.delete(runner)
    db.commit()
    logger.info("Runner deleted", extra={"runner_id": runner_id, "by": caller.id})
    return "deleted"


def list_runner_cases(db: Session, caller: User, runner_id: int) -> list[Case]:
    runner = get_visible_runner(db, caller, runner_id)
    return db.query(Case).filter(Case.runner_id == runner.id).order_by(Case.created_at.desc(), Case.id.desc()).all()


def record_photos(db: Session, runner: Runner, urls: list[str], photo_type: str) -> Runner:
    """
    Attach uploaded photo URLs and restart the reminder window.

    A Profile upload replaces profile_image_url with the first URL; the rest
    (and every Additional upload) are appended to additional_image_urls.
    """
    now = utcnow()
    extra_urls = list(runner.additional_image_urls or [])
    if photo_type == "Profile" and urls:
        runner.profile_image_url = urls[0]
        extra_urls.extend(urls[1:])
    else:
        extra_urls.extend(urls)
    runner.additional_image_urls = extra_urls
    runner.last_photo_update = now
    runner.next_photo_reminder = add_months(now, PHOTO_REMINDER_MONTHS)
    runner.photo_update_reminder_sent = False
    runner.photo_update_reminder_count = 0
    runner.is_profile_complete = profile_is_complete(runner)
    runner.updated_at = now
    db.commit()
    db.refresh(runner)
    return runner


def due_photo_reminders(db: Session, caller: User) -> list[dict]:
    """Active runners whose reminder date has passed and whose reminder is unsent."""
    ensure_privileged(caller)
    now = utcnow()
    rows = (
        db.query(Runner, User)
        .join(User, User.id == Runner.user_id)
        .filter(
            Runner.is_active.is_(True),
            Runner.photo_update_reminder_sent.is_(False),
            Runner.next_photo_reminder.isnot(None),
            Runner.next_photo_reminder <= now,
        )
        .order_by(Runner.next_photo_reminder)
        .all()
    )
    reminders = []
    for runner, owner in rows:
        due = as_utc(runner.next_photo_reminder)
        reminders.append(
            {
                "runner_id": runner.id,
                "name": runner.name,
                "user_id": owner.id,
                "owner_email": owner.email,
                "owner_name": owner.full_name,
                "last_photo_update": runner.last_photo_update,
                "next_photo_reminder": due,
                "photo_update_reminder_count": runner.photo_update_reminder_count,
                "days_overdue": (now - due).days,
            }
        )
    return reminders


def mark_photo_reminder_sent(db: Session, caller: User, runner_id: int) -> Runner:
    ensure_privileged(caller)
    runner = get_runner(db, runner_id)
    owner_email = db.query(User.email).filter(User.id == runner.user_id).scalar()
    runner.photo_update_reminder_sent = True
    runner.photo_update_reminder_count = (runner.photo_update_reminder_count or 0) + 1
    runner.updated_at = utcnow()
    db.commit()
    db.refresh(runner)
    notifications.notify_photo_reminder(runner, owner_email or "")
    return runner
