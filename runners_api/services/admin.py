"""Admin dashboard aggregates, companion-case backfill and admin account seeding."""

import logging
from datetime import timedelta
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from runners_api.core.security import hash_password
from runners_api.core.timeutil import utcnow
from runners_api.models import Case, Runner, User
from runners_api.models.user import ROLE_ADMIN
from runners_api.services.accounts import find_user_by_email
from runners_api.services.runners import build_profile_case

logger = logging.getLogger(__name__)


def _count(db: Session, column, *criteria) -> int:
    return db.query(func.count(column)).filter(*criteria).scalar() or 0


def dashboard_stats(db: Session) -> dict[str, Any]:
    """Count queries computed fresh on every call."""
    now = utcnow()
    since = now - timedelta(hours=24)
    cases_by_status = dict(db.query(Case.status, func.count(Case.id)).group_by(Case.status).all())
    users_by_role = dict(db.query(User.role, func.count(User.id)).group_by(User.role).all())
    active_runners = _count(db, Runner.id, Runner.is_active.is_(True))
    total_runners = _count(db, Runner.id)
    return {
        "total_users": _count(db, User.id),
        "active_users": _count(db, User.id, User.is_active.is_(True)),
        "total_runners": total_runners,
        "active_runners": active_runners,
        "inactive_runners": total_runners - active_runners,
        "total_cases": _count(db, Case.id),
        "public_cases": _count(db, Case.id, Case.is_public.is_(True)),
        "cases_by_status": cases_by_status,
        "users_by_role": users_by_role,
        "new_users_last_24h": _count(db, User.id, User.created_at >= since),
        "new_cases_last_24h": _count(db, Case.id, Case.created_at >= since),
        "generated_at": now,
    }


def backfill_profile_cases(db: Session) -> list[int]:
    """Create the companion case for every runner that has none. Returns the new case ids."""
    runners = (
        db.query(Runner)
        .filter(~Runner.id.in_(select(Case.runner_id)))
        .order_by(Runner.id)
        .all()
    )
    created: list[Case] = []
    for runner in runners:
        owner = db.query(User).filter(User.id == runner.user_id).first()
        if owner is None:
            logger.warning("Skipping runner without owner", extra={"runner_id": runner.id})
            continue
        case = build_profile_case(runner, owner)
        db.add(case)
        created.append(case)
    db.commit()
    ids = [c.id for c in created]
    logger.info("Backfilled profile cases", extra={"cases_created": len(ids)})
    return ids


def seed_admins(db: Session, accounts: list[dict[str, str]]) -> tuple[list[str], list[str]]:
    """
    Create verified, active admin accounts. Idempotent: existing emails are skipped.

    Each account needs email, password, firstName and lastName. Returns
    (created_emails, skipped_emails).
    """
    created: list[str] = []
    skipped: list[str] = []
    now = utcnow()
    for account in accounts:
        email = account["email"].strip().lower()
        if find_user_by_email(db, email) is not None or email in created:
            skipped.append(email)
            continue
        db.add(
            User(
                email=email,
                password_hash=hash_password(account["password"]),
                first_name=account["firstName"],
                last_name=account["lastName"],
                role=ROLE_ADMIN,
                is_active=True,
                is_email_verified=True,
                email_verified_at=now,
                is_phone_verified=False,
                failed_login_attempts=0,
                organization=account.get("organization"),
                title=account.get("title"),
                created_at=now,
            )
        )
        created.append(email)
    db.commit()
    return created, skipped
