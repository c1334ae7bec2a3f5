"""Schemas for runner profiles and their photo reminders."""

from datetime import date
from typing import Literal

from pydantic import Field, field_validator

from runners_api.core.timeutil import utcnow
from runners_api.models.runner import GENDERS
from runners_api.schemas.common import CamelModel, UtcDateTime, clean_name, one_of
from runners_api.schemas.upload import UploadedFile

PHOTO_TYPES = ("Profile", "Additional")


def _validate_dob(value: date | None) -> date | None:
    if value is None:
        return None
    today = utcnow().date()
    if value > today:
        raise ValueError("Date of birth cannot be in the future")
    if today.year - value.year > 120:
        raise ValueError("Date of birth is not plausible")
    return value


class RunnerFields(CamelModel):
    """Optional descriptive fields shared by create and update."""

    height: str | None = Field(default=None, max_length=20)
    weight: str | None = Field(default=None, max_length=20)
    eye_color: str | None = Field(default=None, max_length=50)
    hair_color: str | None = Field(default=None, max_length=50)
    identifying_marks: str | None = Field(default=None, max_length=1000)
    physical_description: str | None = Field(default=None, max_length=2000)
    medical_conditions: str | None = Field(default=None, max_length=2000)
    medications: str | None = Field(default=None, max_length=1000)
    allergies: str | None = Field(default=None, max_length=1000)
    emergency_instructions: str | None = Field(default=None, max_length=2000)
    preferred_language: str | None = Field(default=None, max_length=50)
    additional_notes: str | None = Field(default=None, max_length=2000)
    last_known_location: str | None = Field(default=None, max_length=500)


class RunnerCreateRequest(RunnerFields):
    name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date
    gender: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_dob(cls, v: date) -> date:
        return _validate_dob(v)

    @field_validator("gender")
    @classmethod
    def validate_gender(cls, v: str) -> str:
        return one_of(v, GENDERS)


class RunnerUpdateRequest(RunnerFields):
    """Partial update; omitted, null or blank fields are left as stored."""

    name: str | None = Field(default=None, max_length=100)
    date_of_birth: date | None = None
    gender: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return clean_name(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_dob(cls, v: date | None) -> date | None:
        return _validate_dob(v)

    @field_validator("gender")
    @classmethod
    def validate_gender(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return one_of(v, GENDERS)


class RunnerResponse(RunnerFields):
    id: int
    user_id: int
    name: str
    date_of_birth: date
    gender: str
    profile_image_url: str | None = None
    additional_image_urls: list[str] = Field(default_factory=list)
    last_photo_update: UtcDateTime | None = None
    next_photo_reminder: UtcDateTime | None = None
    photo_update_reminder_sent: bool
    photo_update_reminder_count: int
    is_profile_complete: bool
    is_verified: bool
    verified_at: UtcDateTime | None = None
    verified_by: str | None = None
    is_active: bool
    created_at: UtcDateTime
    updated_at: UtcDateTime | None = None

    @field_validator("additional_image_urls", mode="before")
    @classmethod
    def default_urls(cls, v: list[str] | None) -> list[str]:
        return list(v or [])


class RunnerStatusRequest(CamelModel):
    is_active: bool


class RunnerVerifyRequest(CamelModel):
    is_verified: bool


class RunnerDeleteResponse(CamelModel):
    id: int
    action: Literal["deleted", "deactivated"]


class RunnerPhotosResponse(CamelModel):
    runner: RunnerResponse
    photo_type: str
    files: list[UploadedFile]


class PhotoReminderItem(CamelModel):
    """Runner whose photo reminder is due and has not been sent yet."""

    runner_id: int
    name: str
    user_id: int
    owner_email: str
    owner_name: str
    last_photo_update: UtcDateTime | None = None
    next_photo_reminder: UtcDateTime
    photo_update_reminder_count: int
    days_overdue: int
