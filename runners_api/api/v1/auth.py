"""Auth routes and auth dependencies (get_current_user, require_admin, require_privileged)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from runners_api.core.database import get_db
from runners_api.core.errors import AuthenticationFailed
from runners_api.models.user import User
from runners_api.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserResponse,
    VerifyEmailRequest,
)
from runners_api.schemas.common import OkResponse
from runners_api.services import accounts
from runners_api.services.access import ensure_admin, ensure_privileged

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User | None:
    """Dependency: the caller when a Bearer token is sent, None when it is absent. Bad tokens are 401."""
    if credentials is None:
        return None
    return accounts.user_from_token(db, credentials.credentials)


def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """Dependency: require a valid Bearer token for an active user. Raises 401 otherwise."""
    if user is None:
        raise AuthenticationFailed("Not authenticated")
    return user


def require_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency: require role 'admin'. Raises 403 for anyone else."""
    ensure_admin(current_user)
    return current_user


def require_privileged(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency: require role 'admin' or 'staff'."""
    ensure_privileged(current_user)
    return current_user


def _auth_response(user: User, token: str, expires_at) -> AuthResponse:
    return AuthResponse(
        token=token,
        token_type="Bearer",
        expires_at=expires_at,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=AuthResponse)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    caller: Annotated[User | None, Depends(get_optional_user)],
) -> AuthResponse:
    """
    Create an account and return a token for it.
    Registering as admin or staff requires an admin Bearer token unless
    ALLOW_PUBLIC_PRIVILEGED_REGISTRATION is enabled.
    """
    user, token, expires_at = accounts.register(db, body, caller)
    return _auth_response(user, token, expires_at)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns a 24h access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    user, token, expires_at = accounts.login(db, body.email, body.password)
    return _auth_response(user, token, expires_at)


@router.post("/logout", response_model=OkResponse)
def logout(
    current_user: Annotated[User, Depends(get_current_user)],
) -> OkResponse:
    """Tokens are stateless; the client discards its copy."""
    return OkResponse(message="Logged out")


@router.post("/verify", response_model=UserResponse)
def verify_token(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.get("/me", response_model=UserResponse)
def me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    body: ProfileUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    user = accounts.update_profile(db, current_user, body)
    return UserResponse.model_validate(user)


@router.post("/change-password", response_model=OkResponse)
def change_password(
    body: ChangePasswordRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> OkResponse:
    accounts.change_password(db, current_user, body)
    return OkResponse(message="Password changed")


@router.post("/forgot-password", response_model=OkResponse)
def forgot_password(
    body: ForgotPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
) -> OkResponse:
    """Always succeeds so the response does not reveal which emails are registered."""
    accounts.forgot_password(db, body.email)
    return OkResponse(message="If the email is registered, a reset link has been sent")


@router.post("/reset-password", response_model=OkResponse)
def reset_password(
    body: ResetPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
) -> OkResponse:
    accounts.reset_password(db, body)
    return OkResponse(message="Password has been reset")


@router.post("/verify-email", response_model=UserResponse)
def verify_email(
    body: VerifyEmailRequest,
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    user = accounts.verify_email(db, body.token)
    return UserResponse.model_validate(user)
