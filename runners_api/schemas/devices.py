"""Schemas for push-notification device registration."""

from pydantic import Field, field_validator

from runners_api.models.device import PLATFORMS
from runners_api.schemas.common import CamelModel, UtcDateTime, one_of


class DeviceRegisterRequest(CamelModel):
    platform: str
    push_token: str = Field(..., min_length=1, max_length=500)
    app_version: str | None = Field(default=None, max_length=50)
    app_build_number: str | None = Field(default=None, max_length=50)
    device_model: str | None = Field(default=None, max_length=100)
    os_version: str | None = Field(default=None, max_length=50)

    @field_validator("platform")
    @classmethod
    def validate_platform(cls, v: str) -> str:
        return one_of(v, PLATFORMS)

    @field_validator("push_token")
    @classmethod
    def strip_token(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Push token must not be empty")
        return v


class DeviceResponse(CamelModel):
    id: int
    platform: str
    push_token: str
    app_version: str | None = None
    app_build_number: str | None = None
    device_model: str | None = None
    os_version: str | None = None
    is_active: bool
    last_seen_at: UtcDateTime | None = None
    created_at: UtcDateTime
    updated_at: UtcDateTime | None = None


class DeviceRegisterResponse(CamelModel):
    device: DeviceResponse
    created: bool
    subscribed_topics: list[str] = Field(
        default_factory=list,
        description="Default topics subscribed because this was the user's first device.",
    )
