"""Schemas for the user administration endpoints."""

from typing import Literal

from pydantic import Field, field_validator

from runners_api.models.user import ALLOWED_ROLES
from runners_api.schemas.auth import ProfileUpdateRequest, RegisterRequest
from runners_api.schemas.common import CamelModel, one_of


class UserCreateRequest(RegisterRequest):
    """Admin-created account; any allowed role."""

    is_active: bool = True


class UserUpdateRequest(ProfileUpdateRequest):
    """Partial update. role and is_active are admin-only."""

    role: str | None = None
    is_active: bool | None = None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return one_of(v, ALLOWED_ROLES)


class UserStatusRequest(CamelModel):
    is_active: bool


class UserDeleteResponse(CamelModel):
    id: int
    action: Literal["deleted", "deactivated"] = Field(
        ...,
        description="'deactivated' when the user still owns related rows.",
    )
