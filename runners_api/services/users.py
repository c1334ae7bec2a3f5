"""User administration: listing, updates, activation and delete-or-deactivate."""

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from runners_api.core.errors import NotFound, PermissionDenied, ValidationFailed
from runners_api.core.timeutil import utcnow
from runners_api.models import Case, Device, Runner, TopicSubscription, User
from runners_api.services.access import ensure_admin, ensure_owner_or_privileged
from runners_api.schemas.users import UserCreateRequest, UserUpdateRequest
from runners_api.services.accounts import (
    PROFILE_FIELDS,
    apply_partial_update,
    create_user,
    ensure_may_assign_role,
)
from runners_api.services.pagination import PageParams, paginate

logger = logging.getLogger(__name__)


def list_users(
    db: Session,
    params: PageParams,
    q: str | None = None,
    role: str | None = None,
    is_active: bool | None = None,
) -> tuple[list[User], int]:
    query = db.query(User)
    if q and q.strip():
        term = q.strip()
        query = query.filter(
            or_(
                User.email.icontains(term, autoescape=True),
                User.first_name.icontains(term, autoescape=True),
                User.last_name.icontains(term, autoescape=True),
            )
        )
    if role:
        query = query.filter(User.role == role.strip().lower())
    if is_active is not None:
        query = query.filter(User.is_active == is_active)
    return paginate(query.order_by(User.id), params)


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound("User not found")
    return user


def get_visible_user(db: Session, caller: User, user_id: int) -> User:
    user = get_user(db, user_id)
    ensure_owner_or_privileged(caller, user.id, "user")
    return user


def create_user_as_admin(db: Session, caller: User, body: UserCreateRequest) -> User:
    ensure_admin(caller)
    user = create_user(db, body, is_active=body.is_active)
    logger.info("User created by admin", extra={"user_id": user.id, "role": user.role, "by": caller.id})
    return user


def update_user(db: Session, caller: User, user_id: int, body: UserUpdateRequest) -> User:
    user = get_visible_user(db, caller, user_id)
    values = body.model_dump(exclude_unset=True)
    admin_fields = [f for f in ("role", "is_active") if values.get(f) is not None]
    if admin_fields:
        if caller.role != "admin":
            raise PermissionDenied("Only admins may change role or active status")
        if "role" in admin_fields:
            ensure_may_assign_role(values["role"], caller)
    changed = apply_partial_update(user, values, PROFILE_FIELDS + ("role",))
    if values.get("is_active") is not None and user.is_active != values["is_active"]:
        user.is_active = values["is_active"]
        changed.append("is_active")
    if changed:
        user.updated_at = utcnow()
        db.commit()
        db.refresh(user)
        logger.info("User updated", extra={"user_id": user.id, "fields": changed, "by": caller.id})
    return user


def set_user_status(db: Session, caller: User, user_id: int, is_active: bool) -> User:
    ensure_admin(caller)
    user = get_user(db, user_id)
    if user.id == caller.id and not is_active:
        raise ValidationFailed("You cannot deactivate your own account", code="SELF_DEACTIVATION")
    user.is_active = is_active
    user.updated_at = utcnow()
    db.commit()
    db.refresh(user)
    logger.info("User status changed", extra={"user_id": user.id, "is_active": is_active, "by": caller.id})
    return user


def has_related_data(db: Session, user_id: int) -> bool:
    """True when any runner, reported case, device or subscription belongs to the user."""
    for model, column in (
        (Runner, Runner.user_id),
        (Case, Case.reported_by_user_id),
        (Device, Device.user_id),
        (TopicSubscription, TopicSubscription.user_id),
    ):
        if db.query(model.id).filter(column == user_id).first() is not None:
            return True
    return False


def delete_user(db: Session, caller: User, user_id: int) -> str:
    """Hard-delete a user without related rows, otherwise deactivate. Returns the action taken."""
    ensure_admin(caller)
    user = get_user(db, user_id)
    if user.id == caller.id:
        raise ValidationFailed("You cannot delete your own account", code="SELF_DELETION")
    if has_related_data(db, user.id):
        user.is_active = False
        user.updated_at = utcnow()
        db.commit()
        logger.info("User deactivated instead of deleted", extra={"user_id": user_id, "by": caller.id})
        return "deactivated"
    db.delete(user)
    db.commit()
    logger.info("User deleted", extra={"user_id": user_id, "by": caller.id})
    return "deleted"
