"""Registration, login with lockout, password and email-verification flows."""

import logging
from datetime import datetime, timedelta

import jwt
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from runners_api.core.config import settings
from runners_api.core.errors import AuthenticationFailed, Conflict, PermissionDenied, ValidationFailed
from runners_api.core.security import (
    create_access_token,
    decode_access_token,
    generate_opaque_token,
    hash_password,
    verify_password,
)
from runners_api.core.timeutil import as_utc, utcnow
from runners_api.models.user import PRIVILEGED_ROLES, ROLE_ADMIN, User
from runners_api.schemas.auth import (
    ChangePasswordRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    ResetPasswordRequest,
)

logger = logging.getLogger(__name__)

# Fields a user may change on their own profile.
PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "phone_number",
    "address",
    "city",
    "state",
    "zip_code",
    "organization",
    "title",
    "credentials",
    "specialization",
    "years_of_experience",
    "profile_image_url",
    "emergency_contact_name",
    "emergency_contact_phone",
    "emergency_contact_relationship",
)


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def apply_partial_update(target: object, values: dict, fields: tuple[str, ...]) -> list[str]:
    """
    Copy values onto target for the listed fields, skipping None and blank strings.
    Returns the names of fields that changed.
    """
    changed: list[str] = []
    for field in fields:
        if field not in values:
            continue
        value = values[field]
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        if isinstance(value, str):
            value = value.strip()
        if getattr(target, field) != value:
            setattr(target, field, value)
            changed.append(field)
    return changed


def ensure_may_assign_role(role: str, caller: User | None) -> None:
    """
    Privileged roles need an admin caller unless ALLOW_PUBLIC_PRIVILEGED_REGISTRATION is set.
    Raises 401 without a caller and 403 for a non-admin caller.
    """
    if role not in PRIVILEGED_ROLES or settings.ALLOW_PUBLIC_PRIVILEGED_REGISTRATION:
        return
    if caller is None:
        raise AuthenticationFailed(
            f"Registering a '{role}' account requires an authenticated admin",
            code="AUTH_REQUIRED",
        )
    if caller.role != ROLE_ADMIN:
        raise PermissionDenied(f"Only admins may create '{role}' accounts")


def create_user(db: Session, body: RegisterRequest, *, is_active: bool = True) -> User:
    """Insert a user row. Raises Conflict (USER_EXISTS) when the email is taken."""
    if find_user_by_email(db, body.email) is not None:
        raise Conflict("A user with this email already exists", code="USER_EXISTS")

    user = User(
        email=body.email,
        password_hash=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        role=body.role,
        is_active=is_active,
        is_email_verified=False,
        is_phone_verified=False,
        email_verification_token=generate_opaque_token(),
        failed_login_attempts=0,
        created_at=utcnow(),
    )
    apply_partial_update(user, body.model_dump(), PROFILE_FIELDS[2:])
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent registration with the same email lost the race on the unique index.
        db.rollback()
        raise Conflict("A user with this email already exists", code="USER_EXISTS")
    db.refresh(user)
    return user


def register(db: Session, body: RegisterRequest, caller: User | None) -> tuple[User, str, datetime]:
    """Create an account and return (user, token, expires_at)."""
    ensure_may_assign_role(body.role, caller)
    user = create_user(db, body)
    logger.info(
        "User registered",
        extra={"user_id": user.id, "role": user.role, "by_admin": caller.id if caller else None},
    )
    # Delivery of the verification link is log-only.
    logger.info("Email verification token issued", extra={"user_id": user.id})
    token, expires_at = create_access_token(user)
    return user, token, expires_at


def login(db: Session, email: str, password: str) -> tuple[User, str, datetime]:
    """
    Check credentials and apply the lockout policy; return (user, token, expires_at).

    A locked account is rejected even with the correct password. Once the lock
    window has elapsed the failure counter starts again from zero.
    """
    user = find_user_by_email(db, email)
    if user is None:
        logger.info("Login failed: unknown email")
        raise AuthenticationFailed("Invalid email or password", code="INVALID_CREDENTIALS")

    now = utcnow()
    locked_until = as_utc(user.locked_until)
    if locked_until is not None:
        if locked_until > now:
            logger.warning("Login attempt on locked account", extra={"user_id": user.id})
            raise AuthenticationFailed(
                "Account is temporarily locked due to repeated failed logins",
                code="ACCOUNT_LOCKED",
                details={"lockedUntil": locked_until.isoformat()},
            )
        user.locked_until = None
        user.failed_login_attempts = 0

    if not verify_password(password, user.password_hash):
        user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
        locked = user.failed_login_attempts >= settings.LOGIN_MAX_FAILED_ATTEMPTS
        if locked:
            user.locked_until = now + timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)
        db.commit()
        if locked:
            logger.warning(
                "Account locked after failed logins",
                extra={"user_id": user.id, "failed_attempts": user.failed_login_attempts},
            )
            raise AuthenticationFailed(
                "Account is temporarily locked due to repeated failed logins",
                code="ACCOUNT_LOCKED",
                details={"lockedUntil": as_utc(user.locked_until).isoformat()},
            )
        logger.info(
            "Login failed: wrong password",
            extra={"user_id": user.id, "failed_attempts": user.failed_login_attempts},
        )
        raise AuthenticationFailed("Invalid email or password", code="INVALID_CREDENTIALS")

    if not user.is_active:
        db.commit()
        raise AuthenticationFailed("Account is disabled", code="ACCOUNT_DISABLED")

    user.failed_login_attempts = 0
    user.locked_until = None
    user.last_login_at = now
    db.commit()
    db.refresh(user)
    token, expires_at = create_access_token(user)
    logger.info("Login succeeded", extra={"user_id": user.id})
    return user, token, expires_at


def user_from_token(db: Session, token: str) -> User:
    """Resolve a bearer token to an active user. Raises AuthenticationFailed otherwise."""
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise AuthenticationFailed("Invalid or expired token", code="INVALID_TOKEN")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationFailed("Invalid token payload", code="INVALID_TOKEN")
    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        raise AuthenticationFailed("User not found or inactive", code="INVALID_TOKEN")
    return user


def update_profile(db: Session, user: User, body: ProfileUpdateRequest) -> User:
    changed = apply_partial_update(user, body.model_dump(exclude_unset=True), PROFILE_FIELDS)
    if changed:
        user.updated_at = utcnow()
        db.commit()
        db.refresh(user)
    return user


def change_password(db: Session, user: User, body: ChangePasswordRequest) -> None:
    if not verify_password(body.current_password, user.password_hash):
        raise ValidationFailed(
            "Current password is incorrect",
            code="INVALID_PASSWORD",
            details={"currentPassword": "Current password is incorrect"},
        )
    user.password_hash = hash_password(body.new_password)
    user.updated_at = utcnow()
    db.commit()
    logger.info("Password changed", extra={"user_id": user.id})


def forgot_password(db: Session, email: str) -> None:
    """Issue a reset token when the email exists. Callers always answer 200."""
    user = find_user_by_email(db, email)
    if user is None or not user.is_active:
        logger.info("Password reset requested for unknown or inactive email")
        return
    user.password_reset_token = generate_opaque_token()
    user.password_reset_expires_at = utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
    db.commit()
    logger.info("Password reset token issued", extra={"user_id": user.id})


def reset_password(db: Session, body: ResetPasswordRequest) -> None:
    user = db.query(User).filter(User.password_reset_token == body.token).first()
    expires_at = as_utc(user.password_reset_expires_at) if user is not None else None
    if user is None or expires_at is None or expires_at <= utcnow():
        raise ValidationFailed("Reset token is invalid or has expired", code="INVALID_TOKEN")
    user.password_hash = hash_password(body.new_password)
    user.password_reset_token = None
    user.password_reset_expires_at = None
    user.failed_login_attempts = 0
    user.locked_until = None
    user.updated_at = utcnow()
    db.commit()
    logger.info("Password reset completed", extra={"user_id": user.id})


def verify_email(db: Session, token: str) -> User:
    user = db.query(User).filter(User.email_verification_token == token).first()
    if user is None:
        raise ValidationFailed("Verification token is invalid", code="INVALID_TOKEN")
    user.is_email_verified = True
    user.email_verified_at = utcnow()
    user.email_verification_token = None
    db.commit()
    db.refresh(user)
    return user
