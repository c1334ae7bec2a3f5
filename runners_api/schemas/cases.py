"""Schemas for cases."""

from pydantic import EmailStr, Field, field_validator

from runners_api.models.base import MAX_ID
from runners_api.models.case import CASE_PRIORITIES, CASE_STATUSES
from runners_api.schemas.common import CamelModel, UtcDateTime, clean_phone, one_of


class CaseFields(CamelModel):
    description: str | None = Field(default=None, max_length=2000)
    last_seen_date: UtcDateTime | None = None
    last_seen_location: str | None = Field(default=None, max_length=500)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    circumstances: str | None = Field(default=None, max_length=2000)
    clothing_description: str | None = Field(default=None, max_length=1000)
    additional_info: str | None = Field(default=None, max_length=2000)
    contact_person: str | None = Field(default=None, max_length=100)
    contact_phone: str | None = Field(default=None, max_length=20)
    contact_email: EmailStr | None = None

    @field_validator("contact_phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        return clean_phone(v)


class CaseCreateRequest(CaseFields):
    runner_id: int = Field(..., ge=1, le=MAX_ID)
    title: str = Field(..., min_length=1, max_length=200)
    status: str = "Open"
    priority: str = "Medium"
    is_public: bool = False

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be empty")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return one_of(v, CASE_STATUSES)

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: str) -> str:
        return one_of(v, CASE_PRIORITIES)


class CaseUpdateRequest(CaseFields):
    """Partial update; omitted, null or blank fields are left as stored."""

    title: str | None = Field(default=None, max_length=200)
    status: str | None = None
    priority: str | None = None
    is_public: bool | None = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return one_of(v, CASE_STATUSES)

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return one_of(v, CASE_PRIORITIES)


class CaseStatusRequest(CamelModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return one_of(v, CASE_STATUSES)


class CaseApproveRequest(CamelModel):
    is_approved: bool


class CaseVerifyRequest(CamelModel):
    is_verified: bool


class PublicCaseResponse(CamelModel):
    """Case fields safe to show anonymous visitors."""

    id: int
    runner_id: int
    title: str
    description: str | None = None
    status: str
    priority: str
    last_seen_date: UtcDateTime | None = None
    last_seen_location: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    clothing_description: str | None = None
    contact_person: str | None = None
    contact_phone: str | None = None
    view_count: int
    share_count: int
    tip_count: int
    created_at: UtcDateTime


class CaseResponse(PublicCaseResponse):
    reported_by_user_id: int
    circumstances: str | None = None
    additional_info: str | None = None
    contact_email: str | None = None
    is_public: bool
    is_approved: bool
    approved_at: UtcDateTime | None = None
    approved_by: str | None = None
    is_verified: bool
    verified_at: UtcDateTime | None = None
    verified_by: str | None = None
    resolved_at: UtcDateTime | None = None
    resolved_by: str | None = None
    updated_at: UtcDateTime | None = None


class CaseCountersResponse(CamelModel):
    id: int
    view_count: int
    share_count: int
    tip_count: int
