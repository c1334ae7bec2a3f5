"""User administration routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from runners_api.api.v1.auth import get_current_user, require_admin, require_privileged
from runners_api.api.v1.params import RecordId, get_page_params
from runners_api.core.database import get_db
from runners_api.models.user import User
from runners_api.schemas.auth import UserResponse
from runners_api.schemas.common import Page, build_page
from runners_api.schemas.users import (
    UserCreateRequest,
    UserDeleteResponse,
    UserStatusRequest,
    UserUpdateRequest,
)
from runners_api.services import users as user_service
from runners_api.services.pagination import PageParams

router = APIRouter()


@router.get("", response_model=Page[UserResponse])
def list_users(
    _staff: Annotated[User, Depends(require_privileged)],
    db: Annotated[Session, Depends(get_db)],
    params: Annotated[PageParams, Depends(get_page_params)],
    q: str | None = Query(default=None, max_length=100),
    role: str | None = Query(default=None, max_length=32),
    is_active: bool | None = Query(default=None, alias="isActive"),
) -> Page[UserResponse]:
    """List users (admin/staff). q matches email, first or last name."""
    rows, total = user_service.list_users(db, params, q=q, role=role, is_active=is_active)
    return build_page(UserResponse, rows, total, params.page, params.page_size)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    body: UserCreateRequest,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    user = user_service.create_user_as_admin(db, admin, body)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: RecordId,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    return UserResponse.model_validate(user_service.get_visible_user(db, current_user, user_id))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: RecordId,
    body: UserUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    return UserResponse.model_validate(user_service.update_user(db, current_user, user_id, body))


@router.put("/{user_id}/status", response_model=UserResponse)
def set_user_status(
    user_id: RecordId,
    body: UserStatusRequest,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    return UserResponse.model_validate(user_service.set_user_status(db, admin, user_id, body.is_active))


@router.delete("/{user_id}", response_model=UserDeleteResponse)
def delete_user(
    user_id: RecordId,
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserDeleteResponse:
    """Deactivates users that still own data; deletes the rest."""
    action = user_service.delete_user(db, admin, user_id)
    return UserDeleteResponse(id=user_id, action=action)
